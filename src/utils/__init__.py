"""
Utilities package - Helper functions and classes.

Contains implementations for:
- Run statistics collection
- Drop traces
- Logging utilities
"""

from .statistics import StatisticsCollector, RunStatistics
from .trace import DropTrace, TraceEntry
from .logger import SimulationLogger, LogLevel

__all__ = [
    'StatisticsCollector',
    'RunStatistics',
    'DropTrace',
    'TraceEntry',
    'SimulationLogger',
    'LogLevel'
]
