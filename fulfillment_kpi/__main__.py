from fulfillment_kpi.cli import app

app(prog_name="fulfillment-kpi")
