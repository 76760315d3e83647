"""
Threshold-based health classification.

A snapshot is in WARNING when its highest usage percentage is strictly
greater than the alert threshold. A value exactly at the threshold is still
HEALTHY.
"""
from typing import Tuple

from health_metrics.base import (
    METRIC_NAMES, HealthReport, HealthStatus, MetricsSnapshot
)


def classify(snapshot: MetricsSnapshot, threshold_percent: float) -> HealthStatus:
    """
    Classify a snapshot against a threshold.

    Args:
        snapshot: The snapshot to classify
        threshold_percent: Alert threshold (0-100)

    Returns:
        HealthStatus.WARNING iff max(cpu, memory, disk) > threshold_percent
    """
    if snapshot.max_percent > threshold_percent:
        return HealthStatus.WARNING
    return HealthStatus.HEALTHY


class ThresholdEvaluator:
    """Evaluates snapshots against a single configured alert threshold."""

    def __init__(self, threshold_percent: float):
        if not 0 <= threshold_percent <= 100:
            raise ValueError(f"threshold_percent must be within [0, 100], got {threshold_percent}")
        self.threshold_percent = float(threshold_percent)

    def classify(self, snapshot: MetricsSnapshot) -> HealthStatus:
        return classify(snapshot, self.threshold_percent)

    def breached_metrics(self, snapshot: MetricsSnapshot) -> Tuple[str, ...]:
        """Names of the metrics strictly above the threshold, in cpu/memory/disk order."""
        values = snapshot.as_dict()
        return tuple(name for name in METRIC_NAMES if values[name] > self.threshold_percent)

    def evaluate(self, snapshot: MetricsSnapshot) -> HealthReport:
        """
        Build the full health report for a snapshot.

        Args:
            snapshot: The snapshot to evaluate

        Returns:
            A HealthReport with status and the breached metric names
        """
        return HealthReport(
            snapshot=snapshot,
            status=self.classify(snapshot),
            threshold_percent=self.threshold_percent,
            breached=self.breached_metrics(snapshot),
        )
