"""Calendar reasoning: hierarchy checks, recess detection and period resolution."""

from __future__ import annotations

from .hierarchy import find_period, iter_periods, validate_hierarchy
from .recess import container_gaps, gaps
from .resolver import (
    classify_period,
    concluded_periods,
    display_period,
    period_message,
    resolve,
    with_current_flags,
)

__all__ = [
    "find_period",
    "iter_periods",
    "validate_hierarchy",
    "container_gaps",
    "gaps",
    "classify_period",
    "concluded_periods",
    "display_period",
    "period_message",
    "resolve",
    "with_current_flags",
]
