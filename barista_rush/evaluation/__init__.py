from barista_rush.evaluation.metrics import InMemoryMetricsRecorder, format_report, generate_report
from barista_rush.evaluation.satisfaction import SatisfactionGauge

__all__ = ["InMemoryMetricsRecorder", "SatisfactionGauge", "generate_report", "format_report"]
