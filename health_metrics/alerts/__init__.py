"""
Threshold evaluation for health snapshots.
"""

from .thresholds import ThresholdEvaluator, classify

__all__ = [
    'ThresholdEvaluator',
    'classify',
]
