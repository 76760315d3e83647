"""
Periodic health-check sampling.

This package resolves a runtime profile into an immutable configuration,
samples CPU, memory and disk usage from a pluggable collector, classifies
each snapshot against an alert threshold, and manages the recurring tasks
that drive it all until a termination signal arrives.
"""

from .base import HealthReport, HealthStatus, MetricsCollector, MetricsSnapshot
from .config import EffectiveConfig, Profile, resolve, resolve_from_env
from .collectors import SimulatedMetricsCollector, SystemMetricsCollector, create_collector
from .sampler import Sampler
from .alerts.thresholds import ThresholdEvaluator, classify
from .errors import FatalStartupError, MonitorError, SampleFailure, SampleTimeoutError
from .lifecycle import LifecycleState, MonitorController

__all__ = [
    'HealthReport',
    'HealthStatus',
    'MetricsCollector',
    'MetricsSnapshot',
    'EffectiveConfig',
    'Profile',
    'resolve',
    'resolve_from_env',
    'SimulatedMetricsCollector',
    'SystemMetricsCollector',
    'create_collector',
    'Sampler',
    'ThresholdEvaluator',
    'classify',
    'FatalStartupError',
    'MonitorError',
    'SampleFailure',
    'SampleTimeoutError',
    'LifecycleState',
    'MonitorController',
]
