"""Strategy module for cycle discovery and evaluation."""

from triscan.strategy.evaluator import CycleEvaluator
from triscan.strategy.graph import CycleEnumerator
from triscan.strategy.rates import RateEstimator


__all__ = [
    "CycleEnumerator",
    "CycleEvaluator",
    "RateEstimator",
]
