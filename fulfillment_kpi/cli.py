#!filepath: fulfillment_kpi/cli.py
from typing import List, Optional

import typer
from pydantic import ValidationError
from rich import print
from rich.markup import escape

from fulfillment_kpi import __version__, logs
from fulfillment_kpi.config.app_config import AppConfig
from fulfillment_kpi.config.kpi_config import KpiConfig
from fulfillment_kpi.utils.errors import KpiError, UserInputError
from fulfillment_kpi.workflows.fulfillment_kpi import build_kpi_pipeline

app = typer.Typer(help="Fulfillment latency KPI -> shop metafields")


@app.command()
def version():
    print(__version__)


@app.command()
def run(
    config: Optional[str] = typer.Option(None, "--config", "-c", help="YAML config path"),
    window: Optional[List[int]] = typer.Option(
        None, "--window", "-w", help="Window size in days (repeatable); defaults to config"
    ),
    dry_run: bool = typer.Option(False, "--dry-run", help="Compute and log, do not publish"),
):
    """
    Compute fulfillment latency for each window and upsert the kpi metafields.
    """
    try:
        if window and any(d <= 0 for d in window):
            raise UserInputError(f"--window must be positive (got {window})")

        try:
            cfg = AppConfig.load(config)
            if window:
                cfg.kpi = KpiConfig(**{**cfg.kpi.model_dump(), "windows": list(window)})
        except (FileNotFoundError, ValidationError) as e:
            raise UserInputError(f"invalid config: {e}") from e

        pipeline = build_kpi_pipeline(cfg, dry_run=dry_run)
        reports = pipeline.run()

    except UserInputError as e:
        print(f"[red]{escape(str(e))}[/red]")
        raise typer.Exit(code=1)
    except KpiError as e:
        logs.error(f"[CLI] run failed: {type(e).__name__}: {e}")
        print(f"[red]{type(e).__name__}: {escape(str(e))}[/red]")
        raise typer.Exit(code=1)

    for r in reports:
        if r.summary.empty:
            print(f"[yellow]No data for {r.days}d window[/yellow]")
            continue
        for mf in r.published:
            print(f"[green]Updated {r.days}d {mf.key} → {mf.value}[/green]")
        if r.skip_reason == "dry run":
            print(
                f"[blue]{r.days}d median={r.summary.median} average={r.summary.average} "
                f"(dry run)[/blue]"
            )


if __name__ == "__main__":
    app()

# python -m fulfillment_kpi.cli run --window 30
