"""
Simulation Logger

This module provides logging utilities for the simulation,
with configurable verbosity levels and structured output.
"""

from typing import Optional, TextIO
from datetime import datetime
from enum import IntEnum
import os

from config import DEFAULT_LOG_LEVEL


class LogLevel(IntEnum):
    """Log level enumeration."""
    DEBUG = 0
    INFO = 1
    WARNING = 2
    ERROR = 3
    CRITICAL = 4


class SimulationLogger:
    """
    Logger for simulation events.
    
    Provides structured logging with timestamps and categories.
    Messages can be stamped with the index of the window being
    processed instead of wall-clock time.
    
    Attributes:
        name: Logger name
        level: Minimum log level
        file: Optional file for logging
    """
    
    # Color codes for terminal output
    COLORS = {
        LogLevel.DEBUG: '\033[36m',     # Cyan
        LogLevel.INFO: '\033[32m',      # Green
        LogLevel.WARNING: '\033[33m',   # Yellow
        LogLevel.ERROR: '\033[31m',     # Red
        LogLevel.CRITICAL: '\033[35m',  # Magenta
    }
    RESET = '\033[0m'
    
    def __init__(
        self,
        name: str = "Simulator",
        level: int = DEFAULT_LOG_LEVEL,
        log_file: Optional[str] = None,
        use_colors: bool = True,
        include_timestamp: bool = True
    ):
        """
        Initialize logger.
        
        Args:
            name: Logger name
            level: Minimum log level
            log_file: Optional file path for logging
            use_colors: Use ANSI colors in output
            include_timestamp: Include timestamps in log messages
        """
        self.name = name
        self.level = level
        self.use_colors = use_colors
        self.include_timestamp = include_timestamp
        
        self.file: Optional[TextIO] = None
        if log_file:
            directory = os.path.dirname(log_file)
            if directory:
                os.makedirs(directory, exist_ok=True)
            self.file = open(log_file, 'w')
        
        # Window index stamped on messages while a run is in progress
        self.window_index: Optional[int] = None
        
        self.message_counts = {level: 0 for level in LogLevel}
    
    def set_window(self, index: Optional[int]):
        """Set the window index shown in log messages."""
        self.window_index = index
    
    def set_level(self, level: int):
        """Set minimum log level."""
        self.level = level
    
    def is_enabled(self, level: LogLevel) -> bool:
        return level >= self.level
    
    def _format_message(
        self,
        level: LogLevel,
        message: str,
        category: Optional[str] = None
    ) -> str:
        """Format a log message."""
        parts = []
        
        if self.include_timestamp:
            if self.window_index is not None:
                parts.append(f"[w{self.window_index:06d}]")
            else:
                parts.append(f"[{datetime.now().strftime('%H:%M:%S.%f')[:-3]}]")
        
        level_str = level.name.ljust(8)
        if self.use_colors:
            level_str = f"{self.COLORS[level]}{level_str}{self.RESET}"
        parts.append(level_str)
        
        parts.append(f"[{self.name}]")
        
        if category:
            parts.append(f"[{category}]")
        
        parts.append(message)
        
        return " ".join(parts)
    
    def _log(
        self,
        level: LogLevel,
        message: str,
        category: Optional[str] = None
    ):
        """Log a message."""
        if level < self.level:
            return
        
        self.message_counts[level] += 1
        formatted = self._format_message(level, message, category)
        
        print(formatted)
        
        if self.file:
            # Strip color codes for file
            clean = formatted
            for color in self.COLORS.values():
                clean = clean.replace(color, '')
            clean = clean.replace(self.RESET, '')
            self.file.write(clean + '\n')
            self.file.flush()
    
    def debug(self, message: str, category: Optional[str] = None):
        """Log debug message."""
        self._log(LogLevel.DEBUG, message, category)
    
    def info(self, message: str, category: Optional[str] = None):
        """Log info message."""
        self._log(LogLevel.INFO, message, category)
    
    def warning(self, message: str, category: Optional[str] = None):
        """Log warning message."""
        self._log(LogLevel.WARNING, message, category)
    
    def error(self, message: str, category: Optional[str] = None):
        """Log error message."""
        self._log(LogLevel.ERROR, message, category)
    
    def critical(self, message: str, category: Optional[str] = None):
        """Log critical message."""
        self._log(LogLevel.CRITICAL, message, category)
    
    # Convenience methods for simulation events
    def window_done(self, index: int, outcome, estimate: Optional[float] = None):
        """Log the outcome of one window."""
        msg = (
            f"Window {index}: sent={outcome.source_sent}+{outcome.repair_sent}, "
            f"dropped={outcome.source_dropped}+{outcome.repair_dropped}, "
            f"recovered={outcome.recovered}, lost={outcome.lost}"
        )
        if estimate is not None:
            msg += f", p_hat={estimate:.4f}"
        self.debug(msg, "WINDOW")
    
    def window_failed(self, index: int, lost: int):
        """Log a window left with missing source symbols."""
        self.debug(f"Window {index} not fully decoded, {lost} symbols lost", "FEC")
    
    def loss_model(self, description: str):
        """Log the loss model in use."""
        self.info(f"Loss model: {description}", "LOSS")
    
    def simulation_start(self, params: dict):
        """Log simulation start."""
        param_str = ", ".join(f"{k}={v}" for k, v in params.items())
        self.info(f"Simulation started: {param_str}", "SIM")
    
    def simulation_end(self, stats: dict):
        """Log simulation end."""
        self.info(
            f"Simulation ended: repair={stats.get('n_repair', 0)}, "
            f"lost={stats.get('n_lost', 0)}, "
            f"recovered={stats.get('n_recovered', 0)}, "
            f"ratio_post={stats.get('ratio_post', 0.0):.6f}",
            "SIM"
        )
    
    def get_summary(self) -> dict:
        """Get logging summary."""
        return {
            'message_counts': dict(self.message_counts),
            'total_messages': sum(self.message_counts.values())
        }
    
    def close(self):
        """Close log file if open."""
        if self.file:
            self.file.close()
            self.file = None
    
    def __del__(self):
        """Cleanup on deletion."""
        self.close()
