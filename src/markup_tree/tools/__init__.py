"""Developer tools for markup-tree.

This module provides stage profiling for parsing and live tree building.
"""

from .profiling import (
    PerformanceProfiler,
    PerformanceReport,
    ProfilingSession,
    StagePerformance,
    profile_markup,
)

__all__ = [
    "PerformanceProfiler",
    "PerformanceReport",
    "ProfilingSession",
    "StagePerformance",
    "profile_markup",
]
