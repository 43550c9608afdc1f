"""
Adaptive-Linear FEC Scheme

Window-based linear coding whose redundancy follows an online estimate
of the transport loss rate. Each window of `n` source symbols gets
`k = ceil(beta * n * p_hat)` repair symbols from the injected linear
coder, and the estimate is smoothed after every window:

    p_hat <- alpha * observed + (1 - alpha) * p_hat

With `repair_step` set the estimate is ignored and the scheme sends one
repair symbol per `repair_step` source symbols (fixed redundancy).
"""

import math
from typing import Dict, List, Optional, Sequence

from config import ALPHA_FEC, BETA_FEC, FEC_WINDOW
from src.errors import ConfigError, SchemeError, check_positive, check_probability
from src.fec.base import FecScheme
from src.fec.linear_coder import IdealLinearCoder, LinearCoder
from src.fec.symbol import RecoveryOutcome, Symbol, Window


class AdaptiveLinearScheme(FecScheme):
    """
    Adaptive-linear scheme (Scheme A).

    Attributes:
        alpha: Smoothing factor; high alpha reacts faster
        beta: Safety multiplier on the expected losses per window
        initial_loss: Seed of the estimate; a positive seed keeps at
            least one repair symbol per window for the whole run
        repair_step: Source symbols per repair symbol in fixed mode, or None
        loss_estimate: Current loss-rate estimate p_hat
        coder: Linear coding capability
    """

    name = "adaptive"

    def __init__(
        self,
        window_size: int = FEC_WINDOW,
        alpha: float = ALPHA_FEC,
        beta: float = BETA_FEC,
        initial_loss: float = 0.0,
        coder: Optional[LinearCoder] = None,
        repair_step: Optional[int] = None
    ):
        """
        Initialize the adaptive scheme.

        Args:
            window_size: Number of source symbols per window
            alpha: Smoothing factor in (0, 1]
            beta: Redundancy multiplier, > 0
            initial_loss: Starting estimate for p_hat
            coder: Linear coder (defaults to the ideal full-rank coder)
            repair_step: Fixed mode, one repair per `repair_step` source symbols
        """
        super().__init__()
        self._window_size = check_positive("window_size", window_size)
        if alpha is None or not 0.0 < alpha <= 1.0:
            raise ConfigError(f"alpha must be in (0, 1], got {alpha!r}")
        if beta is None or beta <= 0:
            raise ConfigError(f"beta must be positive, got {beta!r}")
        self.alpha = float(alpha)
        self.beta = float(beta)
        self.initial_loss = check_probability("initial_loss", initial_loss)
        self.loss_estimate = self.initial_loss
        self.repair_step = (
            check_positive("repair_step", repair_step) if repair_step is not None else None
        )
        self.coder = coder if coder is not None else IdealLinearCoder()

        self._in_flight: Dict[int, int] = {}
        self.estimate_history: List[float] = []

    @property
    def window_size(self) -> int:
        return self._window_size

    @property
    def seeded(self) -> bool:
        return self.initial_loss > 0

    def repair_count(self, window: Window, estimated_loss_rate: float) -> int:
        """
        Number of repair symbols for a window.

        Args:
            window: Window to protect
            estimated_loss_rate: Loss-rate estimate p_hat

        Returns:
            ceil(n / repair_step) in fixed mode. Otherwise 0 when p_hat
            is 0 and the scheme is unseeded, else max(1, ceil(beta * n * p_hat))
        """
        if self.repair_step is not None:
            return math.ceil(window.size / self.repair_step)
        if estimated_loss_rate <= 0 and not self.seeded:
            return 0
        budget = self.beta * window.size * estimated_loss_rate
        return max(1, math.ceil(budget))

    def encode(self, window: Window) -> List[Symbol]:
        k = self.repair_count(window, self.loss_estimate)
        coded = self.coder.encode(window, k) if k > 0 else []
        if len(coded) != k:
            raise SchemeError(
                f"coder returned {len(coded)} repair symbols for window "
                f"{window.index}, expected {k}"
            )
        self._in_flight[window.index] = k
        return [self._new_repair(r.payload) for r in coded]

    def decode(
        self,
        window: Window,
        received_source: Sequence[Symbol],
        received_repair: Sequence[Symbol]
    ) -> RecoveryOutcome:
        if window.index not in self._in_flight:
            raise SchemeError(f"window {window.index} was never encoded")
        repair_sent = self._in_flight.pop(window.index)

        missing = window.size - len(received_source)
        recovered = 0
        if missing > 0 and received_repair:
            try:
                _, recovered = self.coder.attempt_decode(
                    window, list(received_source) + list(received_repair)
                )
            except ValueError as e:
                raise SchemeError(str(e)) from e
            if recovered > missing:
                raise SchemeError(
                    f"coder recovered {recovered} symbols but only {missing} "
                    f"were missing in window {window.index}"
                )

        return RecoveryOutcome.build(
            window,
            repair_sent=repair_sent,
            received_source=len(received_source),
            received_repair=len(received_repair),
            recovered=recovered,
        )

    def feedback(self, outcome: RecoveryOutcome):
        """Update p_hat from the raw source loss rate of the window."""
        if outcome.source_sent == 0:
            return
        observed = outcome.source_dropped / outcome.source_sent
        self.loss_estimate = self.alpha * observed + (1 - self.alpha) * self.loss_estimate
        self.estimate_history.append(self.loss_estimate)

    def describe(self) -> str:
        if self.repair_step is not None:
            return f"step_{self.repair_step}_{self.window_size}_{self.coder.name}"
        tag = f"adaptive_{self.alpha}_{self.beta}_{self.window_size}_{self.coder.name}"
        if self.seeded:
            tag += f"_init{self.initial_loss}"
        return tag
