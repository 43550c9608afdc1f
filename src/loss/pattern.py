"""
Pattern Loss Model

Drops a fixed set of transmission indices. Used to replay a recorded
drop trace and to script exact loss patterns in tests. Makes no random
draws.
"""

from typing import Iterable, Optional

from src.errors import ConfigError
from src.loss.base import LossModel


class PatternLoss(LossModel):
    """
    Deterministic loss model.
    
    The decision for the i-th transmitted symbol is `i in to_drop`, or
    `(i % cycle_len) in to_drop` when a cycle length is set.
    """
    
    name = "pattern"
    
    def __init__(self, to_drop: Iterable[int] = (), cycle_len: Optional[int] = None):
        """
        Initialize the pattern loss model.
        
        Args:
            to_drop: Transmission indices to drop
            cycle_len: Repeat the pattern every `cycle_len` decisions
        """
        super().__init__()
        if cycle_len is not None and cycle_len <= 0:
            raise ConfigError(f"cycle_len must be positive, got {cycle_len!r}")
        self.to_drop = set(to_drop)
        self.cycle_len = cycle_len
    
    def add_to_drop(self, indices: Iterable[int]):
        """Add transmission indices to the drop set."""
        self.to_drop.update(indices)
    
    @classmethod
    def from_trace(cls, trace) -> "PatternLoss":
        """Build a pattern that replays the drops of a recorded trace."""
        return cls(entry.index for entry in trace if entry.is_dropped)
    
    def _should_drop(self) -> bool:
        idx = self.decisions
        if self.cycle_len is not None:
            idx %= self.cycle_len
        return idx in self.to_drop
    
    def describe(self) -> str:
        return f"pattern_{len(self.to_drop)}"
