"""
Interleaved-Parity FEC Scheme

Classic row/column XOR parity. Source symbols fill a `rows x cols`
block row-major; one parity protects each row, and optionally one more
protects each column (symbols `cols` apart, which spreads a burst over
several groups). Extra interleave layers add further offset groupings:
a layer of stride `s` puts the symbol at block position `p` into bin
`p % s` and sends one parity per bin. Decoding iterates over every
group until no group can recover anything more.
"""

from dataclasses import dataclass
from functools import reduce
from operator import xor
from typing import Dict, List, Sequence, Tuple

from config import PARITY_COLS, PARITY_ROWS
from src.errors import SchemeError, check_positive
from src.fec.base import FecScheme
from src.fec.symbol import RecoveryOutcome, Symbol, Window


@dataclass(frozen=True)
class ParityGroup:
    """Source indices covered by one parity symbol, and their XOR."""
    kind: str
    position: int
    members: Tuple[int, ...]
    value: int


class InterleavedParityScheme(FecScheme):
    """
    Interleaved-parity scheme (Scheme B).

    Block size is fixed; there is no loss estimate and no feedback.

    Attributes:
        rows: Rows per block (one parity each)
        cols: Symbols per row
        column_parity: Also emit one parity per column
        layers: Strides of the extra interleave layers
    """

    name = "parity"

    def __init__(
        self,
        rows: int = PARITY_ROWS,
        cols: int = PARITY_COLS,
        column_parity: bool = False,
        layers: Sequence[int] = ()
    ):
        super().__init__()
        self.rows = check_positive("rows", rows)
        self.cols = check_positive("cols", cols)
        self.column_parity = column_parity
        self.layers = tuple(check_positive("layer", stride) for stride in layers)
        self._in_flight: Dict[int, int] = {}
        self.passes_per_block: List[int] = []

    @property
    def window_size(self) -> int:
        return self.rows * self.cols

    def _groups(self, window: Window) -> List[ParityGroup]:
        """Rows, then columns, then each extra layer. Empty groups are skipped."""
        indices = [s.index for s in window]
        groups = []
        for r in range(self.rows):
            members = tuple(indices[r * self.cols:(r + 1) * self.cols])
            if members:
                groups.append(ParityGroup("row", r, members, reduce(xor, members, 0)))
        strides = [("col", self.cols)] if self.column_parity else []
        strides += [(f"layer{stride}", stride) for stride in self.layers]
        for kind, stride in strides:
            for b in range(stride):
                members = tuple(indices[b::stride])
                if members:
                    groups.append(ParityGroup(kind, b, members, reduce(xor, members, 0)))
        return groups

    def encode(self, window: Window) -> List[Symbol]:
        """One XOR parity per non-empty row (and column if enabled)."""
        repairs = [self._new_repair(group) for group in self._groups(window)]
        self._in_flight[window.index] = len(repairs)
        return repairs

    def decode(
        self,
        window: Window,
        received_source: Sequence[Symbol],
        received_repair: Sequence[Symbol]
    ) -> RecoveryOutcome:
        if window.index not in self._in_flight:
            raise SchemeError(f"block {window.index} was never encoded")
        repair_sent = self._in_flight.pop(window.index)

        known = {s.index: s.payload for s in received_source}
        missing = {s.index for s in window} - set(known)
        groups = [r.payload for r in received_repair]
        recovered = 0
        passes = 0

        while missing:
            passes += 1
            progress = False
            for group in groups:
                absent = [i for i in group.members if i in missing]
                if len(absent) != 1:
                    continue
                target = absent[0]
                value = reduce(
                    xor, (known[i] for i in group.members if i != target), group.value
                )
                if value != target:
                    raise SchemeError(
                        f"{group.kind} {group.position} of block {window.index} "
                        f"rebuilt {value} instead of {target}"
                    )
                known[target] = value
                missing.discard(target)
                recovered += 1
                progress = True
            if not progress:
                break

        self.passes_per_block.append(passes)
        return RecoveryOutcome.build(
            window,
            repair_sent=repair_sent,
            received_source=len(received_source),
            received_repair=len(received_repair),
            recovered=recovered,
        )

    def describe(self) -> str:
        suffix = "_col" if self.column_parity else ""
        if self.layers:
            suffix += "_L" + "_".join(str(stride) for stride in self.layers)
        return f"parity_{self.rows}x{self.cols}{suffix}"
