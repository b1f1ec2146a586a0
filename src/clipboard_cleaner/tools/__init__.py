"""Developer tools for Clipboard Cleaner.

Currently provides stage-level performance profiling of sanitize runs.
"""

from .profiling import PerformanceProfiler, PerformanceReport, ProfilingSession

__all__ = [
    "PerformanceProfiler",
    "PerformanceReport",
    "ProfilingSession",
]
