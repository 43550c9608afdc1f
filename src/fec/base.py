"""
FEC Scheme Base

Contract shared by both schemes. The simulator drives every scheme
through next_window -> encode -> decode -> feedback.
"""

from abc import ABC, abstractmethod
from itertools import islice
from typing import Iterator, List, Optional, Sequence

from src.fec.symbol import RecoveryOutcome, Symbol, Window


class FecScheme(ABC):
    """
    Abstract FEC scheme.
    
    Attributes:
        windows: Number of windows pulled so far
        repair_generated: Total number of repair symbols emitted
    """
    
    name = "fec"
    
    def __init__(self):
        self.windows = 0
        self.repair_generated = 0
        self._next_repair_id = 0
    
    @property
    @abstractmethod
    def window_size(self) -> int:
        """Number of source symbols per full window."""
    
    def next_window(self, source: Iterator[Symbol]) -> Optional[Window]:
        """
        Pull the next window of source symbols.
        
        Args:
            source: Iterator of source symbols
            
        Returns:
            The next window (possibly short), or None when exhausted
        """
        symbols = tuple(islice(source, self.window_size))
        if not symbols:
            return None
        window = Window(index=self.windows, symbols=symbols)
        self.windows += 1
        return window
    
    def _new_repair(self, payload=None) -> Symbol:
        symbol = Symbol.repair(self._next_repair_id, payload)
        self._next_repair_id += 1
        self.repair_generated += 1
        return symbol
    
    @abstractmethod
    def encode(self, window: Window) -> List[Symbol]:
        """Generate the repair symbols of a window."""
    
    @abstractmethod
    def decode(
        self,
        window: Window,
        received_source: Sequence[Symbol],
        received_repair: Sequence[Symbol]
    ) -> RecoveryOutcome:
        """Recover what can be recovered from the surviving symbols."""
    
    def feedback(self, outcome: RecoveryOutcome):
        """Observe the outcome of a window. No-op unless the scheme adapts."""
    
    @abstractmethod
    def describe(self) -> str:
        """Short tag used in output file names."""
    
    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.describe()})"
