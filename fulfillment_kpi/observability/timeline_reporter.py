#!filepath: fulfillment_kpi/observability/timeline_reporter.py
from typing import Dict
from fulfillment_kpi.utils.logger import logs


class TimelineReporter:
    """
    Run timeline report:
    - leaf name -> elapsed seconds
    """

    def __init__(self, timeline: Dict[str, float], label: str):
        self.timeline = timeline
        self.label = label

    def print(self):
        logs.info(f"[Timeline] ===== Run timeline for {self.label} =====")

        total = 0.0
        for name, sec in self.timeline.items():
            logs.info(f"[Timeline] {str(name):<30} {sec:>8.3f}s")
            total += sec

        logs.info(f"[Timeline] Total{'':<27} {total:>8.3f}s")
        logs.info("[Timeline] ===========================================")
