"""
Tests for monitor events and memory introspection.
"""
import os
from unittest.mock import patch

import psutil
import pytest

from health_metrics.alerts.thresholds import ThresholdEvaluator
from health_metrics.events import MonitorEvent, MonitorEventType, Observer, Subject
from health_metrics.memory import MemoryUsage, ProcessMemoryReporter

from conftest import RecordingObserver, make_snapshot


class TestSubject:
    """Tests for the synchronous Subject."""

    def test_notifies_in_attach_order(self):
        order = []

        class Named(Observer):
            def __init__(self, name):
                self.name = name

            def update(self, event):
                order.append(self.name)

        subject = Subject()
        for name in ("first", "second", "third"):
            subject.attach(Named(name))

        subject.notify(MonitorEvent(MonitorEventType.STATE_CHANGED, "test"))

        assert order == ["first", "second", "third"]

    def test_attach_is_idempotent_and_detach_works(self):
        subject = Subject()
        recorder = RecordingObserver()
        subject.attach(recorder)
        subject.attach(recorder)

        subject.notify(MonitorEvent(MonitorEventType.STATE_CHANGED, "test"))
        subject.detach(recorder)
        subject.notify(MonitorEvent(MonitorEventType.STATE_CHANGED, "test"))

        assert len(recorder.events) == 1

    def test_failing_observer_is_isolated(self):
        class Failing(Observer):
            def update(self, event):
                raise ValueError("nope")

        subject = Subject()
        recorder = RecordingObserver()
        subject.attach(Failing())
        subject.attach(recorder)

        subject.notify(MonitorEvent(MonitorEventType.STATE_CHANGED, "test"))

        assert len(recorder.events) == 1

    def test_base_observer_must_be_implemented(self):
        with pytest.raises(NotImplementedError):
            Observer().update(None)


class TestMonitorEvent:
    """Tests for MonitorEvent."""

    def test_to_dict_expands_report(self):
        report = ThresholdEvaluator(80).evaluate(make_snapshot(90, 1, 1))
        event = MonitorEvent(MonitorEventType.HEALTH_CHECKED, "health-check",
                             data=report, message="WARNING")

        data = event.to_dict()

        assert data["event_type"] == "HEALTH_CHECKED"
        assert data["data"]["status"] == "WARNING"
        assert data["message"] == "WARNING"
        assert event.age >= 0


class TestProcessMemoryReporter:
    """Tests for ProcessMemoryReporter."""

    def test_reads_current_process(self):
        usage = ProcessMemoryReporter().read()

        assert isinstance(usage, MemoryUsage)
        assert usage.pid == os.getpid()
        assert usage.rss_mb > 0
        assert usage.vms_mb >= usage.rss_mb
        assert 0 <= usage.percent <= 100

    def test_missing_process_raises_psutil_error(self):
        reporter = ProcessMemoryReporter()
        with patch.object(psutil.Process, "memory_info",
                          side_effect=psutil.NoSuchProcess(pid=reporter.pid)):
            with pytest.raises(psutil.Error):
                reporter.read()

    def test_to_dict(self):
        usage = MemoryUsage(pid=3, rss_mb=1.0, vms_mb=2.0, percent=0.25)

        assert usage.to_dict()["rss_mb"] == 1.0
        assert usage.to_dict()["pid"] == 3
