"""
Symbols, Windows and Recovery Outcomes

The simulator tracks symbol identity and survival only; payloads are
opaque to everything except the scheme that produced them.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterator, Tuple

from src.errors import SchemeError


class SymbolKind(Enum):
    """Symbol kind enumeration."""
    SOURCE = 0
    REPAIR = 1


@dataclass(frozen=True)
class Symbol:
    """
    A single transmitted unit.
    
    Source symbols carry their own index as payload. Repair payloads
    are scheme specific (XOR value, coefficient vector, or None).
    """
    index: int
    kind: SymbolKind = SymbolKind.SOURCE
    payload: Any = field(default=None, compare=False)
    
    @classmethod
    def source(cls, index: int) -> "Symbol":
        return cls(index=index, kind=SymbolKind.SOURCE, payload=index)
    
    @classmethod
    def repair(cls, index: int, payload: Any = None) -> "Symbol":
        return cls(index=index, kind=SymbolKind.REPAIR, payload=payload)
    
    @property
    def is_repair(self) -> bool:
        return self.kind == SymbolKind.REPAIR


@dataclass(frozen=True)
class Window:
    """An ordered group of source symbols encoded together."""
    index: int
    symbols: Tuple[Symbol, ...]
    
    @property
    def size(self) -> int:
        return len(self.symbols)
    
    @property
    def first_index(self) -> int:
        return self.symbols[0].index
    
    def position(self, symbol: Symbol) -> int:
        """Position of a source symbol inside the window."""
        return symbol.index - self.first_index
    
    def __iter__(self) -> Iterator[Symbol]:
        return iter(self.symbols)
    
    def __len__(self) -> int:
        return len(self.symbols)


def symbol_source(num_symbols: int, start: int = 0) -> Iterator[Symbol]:
    """Lazily generate `num_symbols` source symbols with increasing indices."""
    for index in range(start, start + num_symbols):
        yield Symbol.source(index)


@dataclass(frozen=True)
class RecoveryOutcome:
    """
    Per-window result of transmission and decoding.
    
    Invariants: recovered + lost == source_dropped, and no more symbols
    are recovered than repair symbols were received.
    """
    source_sent: int
    repair_sent: int
    source_dropped: int
    repair_dropped: int
    recovered: int
    lost: int
    
    def __post_init__(self):
        if self.recovered + self.lost != self.source_dropped:
            raise SchemeError(
                f"recovered ({self.recovered}) + lost ({self.lost}) != "
                f"source dropped ({self.source_dropped})"
            )
        if self.recovered > self.repair_received:
            raise SchemeError(
                f"recovered {self.recovered} symbols from only "
                f"{self.repair_received} received repair symbols"
            )
        if min(self.source_dropped, self.repair_dropped, self.recovered) < 0:
            raise SchemeError("negative counter in recovery outcome")
    
    @classmethod
    def build(cls, window: Window, repair_sent: int, received_source: int,
              received_repair: int, recovered: int) -> "RecoveryOutcome":
        """Derive an outcome from what was sent and received."""
        source_dropped = window.size - received_source
        return cls(
            source_sent=window.size,
            repair_sent=repair_sent,
            source_dropped=source_dropped,
            repair_dropped=repair_sent - received_repair,
            recovered=recovered,
            lost=source_dropped - recovered,
        )
    
    @property
    def sent(self) -> int:
        return self.source_sent + self.repair_sent
    
    @property
    def dropped(self) -> int:
        return self.source_dropped + self.repair_dropped
    
    @property
    def repair_received(self) -> int:
        return self.repair_sent - self.repair_dropped
    
    @property
    def recoverable(self) -> int:
        """Upper bound on recoverable symbols: one per received repair symbol."""
        return min(self.source_dropped, self.repair_received)
    
    @property
    def decoded(self) -> bool:
        """True when no source symbol of the window is left missing."""
        return self.lost == 0
