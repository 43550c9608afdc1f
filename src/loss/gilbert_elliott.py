"""
Gilbert-Elliott Burst Loss Model

This module implements the two-state Markov chain model for simulating
bursty symbol losses. The chain alternates between a "Good" state (low
loss probability) and a "Bad" state (high loss probability).
"""

from enum import Enum
from typing import Tuple, List

import numpy as np

from config import GOOD_STATE_LOSS, BAD_STATE_LOSS
from src.errors import ConfigError, check_probability
from src.loss.base import LossModel
from src.loss.random_source import RandomSource


class ChannelState(Enum):
    """Channel state enumeration."""
    GOOD = 0
    BAD = 1


class GilbertElliottLoss(LossModel):
    """
    Gilbert-Elliott two-state Markov loss model.

    Every decision first transitions the hidden state, then draws the
    loss against the probability of the resulting state. Both draws are
    always taken, so the number of draws per decision is fixed.

    Attributes:
        p_gb: Transition probability from Good to Bad
        p_bg: Transition probability from Bad to Good
        p_g: Loss probability in Good state
        p_b: Loss probability in Bad state
        state: Current channel state
    """

    name = "ge"

    def __init__(
        self,
        p_gb: float,
        p_bg: float,
        source: RandomSource,
        p_g: float = GOOD_STATE_LOSS,
        p_b: float = BAD_STATE_LOSS,
        stationary_start: bool = False
    ):
        """
        Initialize the Gilbert-Elliott loss model.

        Args:
            p_gb: Probability of transitioning from Good to Bad
            p_bg: Probability of transitioning from Bad to Good
            source: Random source shared by the run
            p_g: Loss probability while Good (default from config)
            p_b: Loss probability while Bad (default from config)
            stationary_start: Draw the first state from the stationary
                distribution instead of starting Good
        """
        super().__init__()
        self.p_gb = check_probability("p_gb", p_gb)
        self.p_bg = check_probability("p_bg", p_bg)
        self.p_g = check_probability("p_g", p_g)
        self.p_b = check_probability("p_b", p_b)
        self.source = source
        self.stationary_start = stationary_start

        # Statistics tracking
        self.state_transitions = 0
        self.time_in_good = 0
        self.time_in_bad = 0

        self._initialize_state()

    @classmethod
    def from_loss_and_burst(
        cls,
        loss_rate: float,
        burst_length: float,
        source: RandomSource,
        p_g: float = GOOD_STATE_LOSS,
        p_b: float = BAD_STATE_LOSS,
        stationary_start: bool = False
    ) -> "GilbertElliottLoss":
        """
        Build the chain from an average loss rate and mean burst length.

        p_bg = 1 / burst_length
        π_B  = (loss_rate - p_g) / (p_b - p_g)
        p_gb = π_B * p_bg / (1 - π_B)

        Args:
            loss_rate: Target average loss rate, p_g <= loss_rate < p_b
            burst_length: Mean sojourn in the Bad state (>= 1 symbol)
            source: Random source shared by the run
            p_g: Loss probability while Good
            p_b: Loss probability while Bad
            stationary_start: Draw the first state from the stationary distribution
        """
        check_probability("loss_rate", loss_rate)
        if burst_length is None or burst_length < 1:
            raise ConfigError(f"burst_length must be >= 1, got {burst_length!r}")
        if not p_g <= loss_rate < p_b:
            raise ConfigError(
                f"loss_rate must satisfy p_g <= loss_rate < p_b, "
                f"got {p_g} <= {loss_rate} < {p_b}"
            )
        p_bg = 1.0 / burst_length
        pi_bad = (loss_rate - p_g) / (p_b - p_g)
        p_gb = pi_bad * p_bg / (1.0 - pi_bad)
        if p_gb > 1.0:
            raise ConfigError(
                f"loss_rate {loss_rate} is unreachable with burst_length {burst_length}"
            )
        return cls(p_gb, p_bg, source, p_g=p_g, p_b=p_b,
                   stationary_start=stationary_start)

    def _initialize_state(self):
        """Initialize channel state, optionally from steady-state probabilities."""
        self.state = ChannelState.GOOD
        if self.stationary_start and (self.p_gb + self.p_bg) > 0:
            pi_good, _ = self.get_steady_state_probabilities()
            if not self.source.uniform() < pi_good:
                self.state = ChannelState.BAD

    def get_steady_state_probabilities(self) -> Tuple[float, float]:
        """
        Calculate steady-state probabilities for Good and Bad states.

        Returns:
            Tuple of (π_Good, π_Bad)
        """
        sum_transitions = self.p_gb + self.p_bg
        if sum_transitions == 0:
            return 1.0, 0.0
        pi_good = self.p_bg / sum_transitions
        pi_bad = self.p_gb / sum_transitions
        return pi_good, pi_bad

    def get_average_loss_rate(self) -> float:
        """
        Calculate average loss rate based on steady-state probabilities.

        Returns:
            Average loss probability
        """
        pi_good, pi_bad = self.get_steady_state_probabilities()
        return pi_good * self.p_g + pi_bad * self.p_b

    def get_mean_burst_length(self) -> float:
        """Mean number of consecutive symbols spent in the Bad state."""
        return 1.0 / self.p_bg if self.p_bg > 0 else float('inf')

    def get_current_loss(self) -> float:
        """Get the loss probability for the current channel state."""
        return self.p_g if self.state == ChannelState.GOOD else self.p_b

    def transition_state(self):
        """Perform one state transition based on transition probabilities."""
        u = self.source.uniform()
        if self.state == ChannelState.GOOD:
            if u < self.p_gb:
                self.state = ChannelState.BAD
                self.state_transitions += 1
        else:
            if u < self.p_bg:
                self.state = ChannelState.GOOD
                self.state_transitions += 1

    def _should_drop(self) -> bool:
        self.transition_state()

        if self.state == ChannelState.GOOD:
            self.time_in_good += 1
        else:
            self.time_in_bad += 1

        return self.source.uniform() < self.get_current_loss()

    @property
    def bad_state_fraction(self) -> float:
        """Fraction of decisions drawn while in the Bad state."""
        total = self.time_in_good + self.time_in_bad
        return self.time_in_bad / total if total > 0 else 0.0

    def describe(self) -> str:
        tag = f"ge_{self.p_gb}_{self.p_bg}_{self.p_g}_{self.p_b}"
        if self.stationary_start:
            tag += "_stationary"
        return tag

    def get_statistics(self) -> dict:
        """
        Get channel statistics.

        Returns:
            Dictionary with decision and state statistics
        """
        stats = super().get_statistics()
        stats.update({
            'state_transitions': self.state_transitions,
            'time_in_good': self.time_in_good,
            'time_in_bad': self.time_in_bad,
            'fraction_in_bad': self.bad_state_fraction,
            'theoretical_loss_rate': self.get_average_loss_rate()
        })
        return stats


# Utility functions
def simulate_loss_pattern(model: LossModel, num_symbols: int) -> List[bool]:
    """
    Draw a sequence of decisions from a loss model.

    Args:
        model: Loss model instance
        num_symbols: Number of decisions to draw

    Returns:
        List of booleans (True = dropped)
    """
    start = model.decisions
    return [model.decide(start + i) for i in range(num_symbols)]


def analyze_burst_lengths(loss_pattern: List[bool]) -> dict:
    """
    Analyze burst lengths in a loss pattern.

    Args:
        loss_pattern: List of drop indicators

    Returns:
        Dictionary with burst statistics
    """
    if not loss_pattern:
        return {'avg_burst_length': 0, 'max_burst_length': 0, 'num_bursts': 0}

    bursts = []
    current_burst = 0

    for dropped in loss_pattern:
        if dropped:
            current_burst += 1
        elif current_burst > 0:
            bursts.append(current_burst)
            current_burst = 0

    if current_burst > 0:
        bursts.append(current_burst)

    if bursts:
        return {
            'avg_burst_length': float(np.mean(bursts)),
            'max_burst_length': max(bursts),
            'num_bursts': len(bursts),
            'burst_lengths': bursts
        }
    return {'avg_burst_length': 0, 'max_burst_length': 0, 'num_bursts': 0}
