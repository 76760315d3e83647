"""
Tests for threshold classification.
"""
import pytest

from health_metrics.alerts.thresholds import ThresholdEvaluator, classify
from health_metrics.base import HealthStatus

from conftest import make_snapshot


class TestClassify:
    """Tests for classify()."""

    def test_single_metric_above_threshold_warns(self):
        snapshot = make_snapshot(cpu=81, memory=10, disk=10)

        assert classify(snapshot, 80) is HealthStatus.WARNING

    def test_all_at_threshold_is_healthy(self):
        snapshot = make_snapshot(cpu=80, memory=80, disk=80)

        assert classify(snapshot, 80) is HealthStatus.HEALTHY

    @pytest.mark.parametrize("threshold", [0, 0.5, 42.25, 80, 90, 100])
    @pytest.mark.parametrize("position", ["cpu", "memory", "disk"])
    def test_max_equal_to_threshold_is_healthy(self, threshold, position):
        values = {"cpu": 0.0, "memory": 0.0, "disk": 0.0}
        values[position] = threshold

        assert classify(make_snapshot(**values), threshold) is HealthStatus.HEALTHY

    @pytest.mark.parametrize("threshold", [0, 42.25, 80, 99.9])
    @pytest.mark.parametrize("epsilon", [1e-9, 0.01, 0.1])
    def test_max_just_above_threshold_warns(self, threshold, epsilon):
        snapshot = make_snapshot(cpu=0, memory=threshold + epsilon, disk=0)

        assert classify(snapshot, threshold) is HealthStatus.WARNING

    def test_threshold_of_100_never_warns(self):
        assert classify(make_snapshot(100, 100, 100), 100) is HealthStatus.HEALTHY

    def test_threshold_of_0_warns_on_any_usage(self):
        assert classify(make_snapshot(0, 0, 0), 0) is HealthStatus.HEALTHY
        assert classify(make_snapshot(0, 0, 0.001), 0) is HealthStatus.WARNING


class TestThresholdEvaluator:
    """Tests for ThresholdEvaluator."""

    def test_evaluate_builds_report(self):
        evaluator = ThresholdEvaluator(80)
        snapshot = make_snapshot(cpu=95, memory=80, disk=81)

        report = evaluator.evaluate(snapshot)

        assert report.snapshot is snapshot
        assert report.status is HealthStatus.WARNING
        assert report.threshold_percent == 80.0
        assert report.breached == ("cpu", "disk")
        assert report.is_warning

    def test_healthy_report_has_no_breaches(self):
        report = ThresholdEvaluator(90).evaluate(make_snapshot(50, 90, 10))

        assert report.status is HealthStatus.HEALTHY
        assert report.breached == ()

    def test_classify_matches_module_function(self):
        evaluator = ThresholdEvaluator(75)
        for values in [(75, 75, 75), (75.01, 0, 0), (10, 20, 30)]:
            snapshot = make_snapshot(*values)
            assert evaluator.classify(snapshot) is classify(snapshot, 75)

    @pytest.mark.parametrize("threshold", [-0.1, 100.1])
    def test_rejects_out_of_range_threshold(self, threshold):
        with pytest.raises(ValueError):
            ThresholdEvaluator(threshold)

    def test_report_to_dict(self):
        report = ThresholdEvaluator(80).evaluate(make_snapshot(81, 10, 10))

        data = report.to_dict()

        assert data["status"] == "WARNING"
        assert data["cpu_percent"] == 81.0
        assert data["timestamp"] == "2024-01-01T12:00:00"
        assert data["breached"] == ["cpu"]
