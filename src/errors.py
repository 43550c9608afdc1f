"""
Simulator Exceptions

Errors raised by the loss models, FEC schemes and statistics collector.
A window that cannot be decoded is not an error: it is counted as lost.
"""


class SimulatorError(Exception):
    """Base class for all simulator errors."""


class ConfigError(SimulatorError, ValueError):
    """Invalid run parameter, detected before the run starts."""


class SchemeError(SimulatorError):
    """
    A FEC scheme or its linear coder produced inconsistent results.
    
    Raised on a repair count mismatch, an outcome that breaks the
    recovery invariants, or an XOR recovery that does not match the
    missing symbol. Aborts the current run only.
    """


class UseAfterFinalizeError(SimulatorError, RuntimeError):
    """A statistics collector was mutated after its snapshot was taken."""


def check_probability(name: str, value: float) -> float:
    """Validate that a probability lies in [0, 1]."""
    if value is None or not 0.0 <= value <= 1.0:
        raise ConfigError(f"{name} must be in [0, 1], got {value!r}")
    return float(value)


def check_positive(name: str, value) -> int:
    """Validate a strictly positive integer dimension."""
    if value is None or int(value) != value or value <= 0:
        raise ConfigError(f"{name} must be a positive integer, got {value!r}")
    return int(value)
