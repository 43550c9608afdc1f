"""
Loss Model Base

Common contract of every loss model: one keep/drop decision per
transmitted symbol, in transmission order.
"""

from abc import ABC, abstractmethod
from typing import Iterator


class LossModel(ABC):
    """
    Abstract loss model.
    
    Subclasses implement `_should_drop`; `decide` wraps it with the
    decision counters. A loss model is also an infinite lazy iterator
    of decisions.
    """
    
    name = "loss"
    
    def __init__(self):
        self.decisions = 0
        self.drops = 0
    
    @abstractmethod
    def _should_drop(self) -> bool:
        """Draw the next decision."""
    
    @abstractmethod
    def describe(self) -> str:
        """Short tag used in output file names."""
    
    def decide(self, symbol_id: int) -> bool:
        """
        Decide whether a transmitted symbol is dropped.
        
        Args:
            symbol_id: Transmission index of the symbol
            
        Returns:
            True if the symbol is dropped
        """
        dropped = self._should_drop()
        self.decisions += 1
        if dropped:
            self.drops += 1
        return dropped
    
    def __iter__(self) -> Iterator[bool]:
        while True:
            yield self.decide(self.decisions)
    
    @property
    def observed_loss_rate(self) -> float:
        """Fraction of decisions that were drops."""
        if self.decisions == 0:
            return 0.0
        return self.drops / self.decisions
    
    def get_statistics(self) -> dict:
        """Get decision statistics."""
        return {
            'decisions': self.decisions,
            'drops': self.drops,
            'observed_loss_rate': self.observed_loss_rate,
        }
    
    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.describe()})"
