"""
Terminal formatting utilities for displaying health records.
"""
import math
import re
from datetime import datetime
from typing import List

from health_metrics.base import HealthReport, HealthStatus
from health_metrics.config import EffectiveConfig
from health_metrics.memory import MemoryUsage


# ANSI color codes
class Colors:
    """ANSI color codes for terminal output."""
    RESET = "\033[0m"
    BOLD = "\033[1m"
    DIM = "\033[2m"

    # Foreground colors
    FG_RED = "\033[31m"
    FG_GREEN = "\033[32m"
    FG_YELLOW = "\033[33m"
    FG_CYAN = "\033[36m"

    # Bright foreground colors
    FG_BRIGHT_BLACK = "\033[90m"


ANSI_ESCAPE = re.compile(r"\033\[[0-9;]*m")

METRIC_LABELS = {
    "cpu": "CPU usage",
    "memory": "Memory usage",
    "disk": "Disk usage",
}


def strip_colors(text: str) -> str:
    """Remove ANSI color codes from a string."""
    return ANSI_ESCAPE.sub("", text)


def format_timestamp(moment: datetime) -> str:
    return moment.isoformat(timespec="seconds")


def usage_color(value: float, threshold: float) -> str:
    """
    Pick a color for a usage value relative to the alert threshold.

    Red above the threshold, yellow within 10 points below it, green otherwise.
    """
    if value > threshold:
        return Colors.FG_RED
    if value >= threshold - 10:
        return Colors.FG_YELLOW
    return Colors.FG_GREEN


def create_progress_bar(
    value: float,
    threshold: float,
    max_value: float = 100.0,
    width: int = 20,
    char_empty: str = "▱",
    char_filled: str = "▰",
) -> str:
    """
    Create a progress bar representation.

    Args:
        value: Current value (0-100)
        threshold: Alert threshold used to color the bar
        max_value: Maximum value
        width: Width of the progress bar in characters
        char_empty: Character for empty portion
        char_filled: Character for filled portion

    Returns:
        Progress bar string with ANSI colors
    """
    percentage = min(1.0, value / max_value)
    filled_width = math.floor(percentage * width)
    empty_width = width - filled_width

    filled_part = usage_color(value, threshold) + char_filled * filled_width
    empty_part = Colors.FG_BRIGHT_BLACK + char_empty * empty_width

    return f"{filled_part}{empty_part}{Colors.RESET}"


def format_status(report: HealthReport) -> str:
    """Format the overall status line of a health record."""
    if report.status is HealthStatus.WARNING:
        breached = ", ".join(report.breached)
        return (f"{Colors.BOLD}{Colors.FG_RED}System Status: WARNING{Colors.RESET}"
                f" - High resource usage ({breached} above {report.threshold_percent:g}%)")
    return f"{Colors.BOLD}{Colors.FG_GREEN}System Status: HEALTHY{Colors.RESET}"


def format_concise_record(report: HealthReport) -> str:
    """
    Format a health record on a single line.

    Example: ``[2024-01-01T12:00:00] CPU: 12% | MEM: 40% | DISK: 71% | HEALTHY``
    """
    snapshot = report.snapshot
    threshold = report.threshold_percent
    parts = []
    for label, value in (("CPU", snapshot.cpu_percent),
                         ("MEM", snapshot.memory_percent),
                         ("DISK", snapshot.disk_percent)):
        parts.append(f"{label}: {usage_color(value, threshold)}{value:.0f}%{Colors.RESET}")
    status_color = Colors.FG_RED if report.is_warning else Colors.FG_GREEN
    status = f"{status_color}{report.status.name}{Colors.RESET}"
    return f"[{format_timestamp(snapshot.taken_at)}] {' | '.join(parts)} | {status}"


def format_detailed_record(report: HealthReport, next_check_ms: int = 0) -> str:
    """
    Format a health record over several lines with a bar per metric.

    Args:
        report: The record to format
        next_check_ms: When positive, a trailing hint with the time until
            the next check is added
    """
    snapshot = report.snapshot
    lines: List[str] = [
        f"{Colors.DIM}[{format_timestamp(snapshot.taken_at)}]{Colors.RESET} "
        f"{Colors.BOLD}=== DETAILED HEALTH CHECK ==={Colors.RESET}",
    ]
    for name, value in snapshot.as_dict().items():
        label = f"{METRIC_LABELS[name]:<13}"
        bar = create_progress_bar(value, report.threshold_percent)
        color = usage_color(value, report.threshold_percent)
        lines.append(f"  {label} {bar} {color}{value:6.2f}%{Colors.RESET}")
    lines.append(format_status(report))
    if next_check_ms > 0:
        lines.append(f"{Colors.DIM}Next check in {next_check_ms}ms{Colors.RESET}")
    return "\n".join(lines)


def format_sample_failure(message: str, moment: datetime) -> str:
    return (f"[{format_timestamp(moment)}] {Colors.FG_YELLOW}"
            f"Health check skipped: {message}{Colors.RESET}")


def format_memory_usage(usage: MemoryUsage) -> str:
    """Format a memory introspection record."""
    return "\n".join([
        f"{Colors.BOLD}--- Memory Usage (pid {usage.pid}) ---{Colors.RESET}",
        f"RSS: {usage.rss_mb:.2f} MB",
        f"VMS: {usage.vms_mb:.2f} MB",
        f"Share of system memory: {usage.percent:.2f}%",
    ])


def format_banner(config: EffectiveConfig) -> str:
    """
    Format the startup banner.

    The metrics endpoint is only shown in debug mode and the alert threshold
    only when verbose.
    """
    rule = "=" * 33
    lines = [
        rule,
        f"{Colors.BOLD}Health Monitor {config.version}{Colors.RESET}",
        f"Mode: {config.profile.value.upper()}",
        rule,
    ]
    if config.debug_mode:
        lines.append("Development Mode: ENABLED")
        lines.append(f"Metrics endpoint: {config.metrics_endpoint}")
    lines.append(f"Monitoring every {config.interval_ms}ms")
    if config.verbose:
        lines.append(f"Alert threshold: {config.alert_threshold_percent:g}%")
    if config.memory_logging_enabled:
        lines.append(f"Memory usage logged every {config.memory_log_interval_ms}ms")
    return "\n".join(lines)
