"""
Run Statistics Collection

This module accumulates the per-window recovery outcomes of a run into
the run-level counters written to the output CSV.
"""

from dataclasses import dataclass, asdict
from typing import Dict, List

from src.errors import UseAfterFinalizeError
from src.fec.symbol import RecoveryOutcome


@dataclass(frozen=True)
class RunStatistics:
    """Immutable end-of-run counters."""
    n_source: int
    n_repair: int
    n_lost: int
    n_recovered: int
    n_ss_drop: int
    n_drop: int
    ratio_post: float
    windows: int = 0
    failed_windows: int = 0

    @property
    def overhead(self) -> float:
        """Repair symbols per source symbol."""
        return self.n_repair / self.n_source if self.n_source else 0.0

    @property
    def residual_loss_rate(self) -> float:
        """Fraction of source symbols lost after decoding."""
        return self.n_lost / self.n_source if self.n_source else 0.0

    def to_csv_row(self) -> List:
        """Values in the order of the run CSV header."""
        return [
            self.n_repair,
            self.n_lost,
            self.n_recovered,
            self.n_ss_drop,
            self.n_drop,
            repr(float(self.ratio_post)),
        ]

    def to_dict(self) -> Dict:
        summary = asdict(self)
        summary['overhead'] = self.overhead
        summary['residual_loss_rate'] = self.residual_loss_rate
        return summary


class StatisticsCollector:
    """
    Collects recovery outcomes for one run.

    Counters are only mutated by `record`. Once `snapshot` has been
    taken the collector is frozen.

    Attributes:
        n_source: Source symbols sent
        n_repair: Repair symbols sent
        n_ss_drop: Source symbols dropped by the loss model
        n_recovered: Source symbols rebuilt by decoding
        n_lost: Source symbols still missing after decoding
        n_drop: All symbols dropped (source and repair)
    """

    def __init__(self):
        """Initialize statistics collector."""
        self.n_source = 0
        self.n_repair = 0
        self.n_lost = 0
        self.n_recovered = 0
        self.n_ss_drop = 0
        self.n_drop = 0

        self.windows = 0
        self.failed_windows = 0

        self._snapshot = None

    @property
    def finalized(self) -> bool:
        return self._snapshot is not None

    def record(self, outcome: RecoveryOutcome):
        """
        Fold one window outcome into the counters.

        Args:
            outcome: Recovery outcome of a window

        Raises:
            UseAfterFinalizeError: if the snapshot was already taken
        """
        if self.finalized:
            raise UseAfterFinalizeError("record() called after snapshot()")

        self.n_source += outcome.source_sent
        self.n_repair += outcome.repair_sent
        self.n_ss_drop += outcome.source_dropped
        self.n_recovered += outcome.recovered
        self.n_lost += outcome.source_dropped - outcome.recovered
        self.n_drop += outcome.source_dropped + outcome.repair_dropped

        self.windows += 1
        if not outcome.decoded:
            self.failed_windows += 1

    def calculate_ratio_post(self) -> float:
        """
        Posterior drop ratio.

        ratio_post = Dropped Symbols / (Source Symbols + Repair Symbols)
        """
        total = self.n_source + self.n_repair
        if total <= 0:
            return 0.0
        return self.n_drop / total

    def snapshot(self) -> RunStatistics:
        """
        Freeze the collector and return the final counters.

        Returns:
            RunStatistics (the same object on repeated calls)
        """
        if self._snapshot is None:
            self._snapshot = RunStatistics(
                n_source=self.n_source,
                n_repair=self.n_repair,
                n_lost=self.n_lost,
                n_recovered=self.n_recovered,
                n_ss_drop=self.n_ss_drop,
                n_drop=self.n_drop,
                ratio_post=self.calculate_ratio_post(),
                windows=self.windows,
                failed_windows=self.failed_windows,
            )
        return self._snapshot
