"""
Command-line display for periodic health checks.
"""
import logging
import sys
from datetime import datetime
from typing import Optional, TextIO

from health_metrics.alerts.thresholds import ThresholdEvaluator
from health_metrics.collectors import create_collector
from health_metrics.config import EffectiveConfig
from health_metrics.events import MonitorEvent, MonitorEventType, Observer
from health_metrics.lifecycle import MonitorController
from health_metrics.memory import ProcessMemoryReporter
from health_metrics.sampler import Sampler
from cli.formatting import (
    format_banner, format_concise_record, format_detailed_record,
    format_memory_usage, format_sample_failure, strip_colors
)

logger = logging.getLogger(__name__)


class HealthDisplay(Observer[MonitorEvent]):
    """
    Prints monitor events to a text stream.

    Verbose configurations get the detailed multi-line record, everything
    else the concise one-liner.
    """

    def __init__(self,
                 config: EffectiveConfig,
                 stream: Optional[TextIO] = None,
                 detailed_view: Optional[bool] = None,
                 use_color: bool = True):
        """
        Initialize the display.

        Args:
            config: The resolved configuration
            stream: Where to write (default: sys.stdout)
            detailed_view: Override the verbosity implied by the config
            use_color: Whether to keep ANSI color codes
        """
        self.config = config
        self.stream = stream or sys.stdout
        self.detailed_view = config.verbose if detailed_view is None else detailed_view
        self.use_color = use_color

    def write(self, text: str) -> None:
        if not self.use_color:
            text = strip_colors(text)
        self.stream.write(text + "\n")
        self.stream.flush()

    def show_banner(self) -> None:
        self.write(format_banner(self.config))

    def update(self, event: MonitorEvent) -> None:
        if event.event_type is MonitorEventType.HEALTH_CHECKED:
            if self.detailed_view:
                next_check = self.config.interval_ms if self.config.verbose else 0
                self.write("\n" + format_detailed_record(event.data, next_check_ms=next_check))
            else:
                self.write(format_concise_record(event.data))
        elif event.event_type is MonitorEventType.SAMPLE_FAILED:
            self.write(format_sample_failure(event.message, datetime.fromtimestamp(event.timestamp)))
        elif event.event_type is MonitorEventType.MEMORY_REPORTED:
            self.write("\n" + format_memory_usage(event.data))


def build_controller(config: EffectiveConfig, collector_name: str = "simulated") -> MonitorController:
    """
    Wire a controller for the given configuration.

    Args:
        config: The resolved configuration
        collector_name: Which collector to sample from

    Raises:
        ValueError: If the collector name is unknown.
    """
    collector = create_collector(collector_name)
    if not collector.is_available():
        logger.warning("Collector %s reports it is not available on this system", collector_name)

    memory_reporter = ProcessMemoryReporter() if config.memory_logging_enabled else None
    return MonitorController(
        config=config,
        sampler=Sampler(collector, timeout_seconds=config.sample_timeout_seconds),
        evaluator=ThresholdEvaluator(config.alert_threshold_percent),
        memory_reporter=memory_reporter,
    )


def run_health_monitor(config: EffectiveConfig,
                       collector_name: str = "simulated",
                       detailed_view: Optional[bool] = None,
                       use_color: bool = True) -> int:
    """
    Run the health monitor with console output until SIGINT or SIGTERM.

    Args:
        config: The resolved configuration
        collector_name: Which collector to sample from
        detailed_view: Override the verbosity implied by the config
        use_color: Whether to print ANSI colors

    Returns:
        The process exit code

    Raises:
        FatalStartupError: If the recurring tasks cannot be established.
    """
    controller = build_controller(config, collector_name)
    display = HealthDisplay(config, detailed_view=detailed_view, use_color=use_color)
    display.show_banner()
    controller.attach(display)

    exit_code = controller.run_forever()
    if controller.received_signal:
        display.write(f"\nReceived {controller.received_signal}. Stopping health monitor...")
    else:
        display.write("\nStopping health monitor...")
    return exit_code
