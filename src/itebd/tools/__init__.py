"""
Profiling tools.
"""

from itebd.tools.profiling import Timer, TimingStats

__all__ = ["Timer", "TimingStats"]
