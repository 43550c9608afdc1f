"""
Linear Coders

The linear-coding capability consumed by the adaptive scheme. A coder
builds repair symbols for a window and reports, for a partially received
window, whether every missing source symbol can be rebuilt and how many
actually are.
"""

from abc import ABC, abstractmethod
from typing import List, Sequence, Tuple

import numpy as np

from config import DEFAULT_SEED
from src.fec.gf256 import FIELD_SIZE, solvable_unknowns
from src.fec.symbol import Symbol, Window


class LinearCoder(ABC):
    """Encode/decode capability of a linear code over a window."""

    name = "coder"

    @abstractmethod
    def encode(self, window: Window, k: int) -> List[Symbol]:
        """
        Build `k` repair symbols protecting the whole window.

        Args:
            window: Window of source symbols
            k: Number of repair symbols requested

        Returns:
            List of repair symbols
        """

    @abstractmethod
    def attempt_decode(self, window: Window, received: Sequence[Symbol]) -> Tuple[bool, int]:
        """
        Try to rebuild the missing source symbols of a window.

        Args:
            window: Window of source symbols that was sent
            received: Surviving source and repair symbols

        Returns:
            Tuple of (fully_recovered, count_recovered)
        """

    @staticmethod
    def split(window: Window, received: Sequence[Symbol]) -> Tuple[List[int], List[Symbol]]:
        """Missing window positions and received repair symbols."""
        present = {s.index for s in received if not s.is_repair}
        missing = [window.position(s) for s in window if s.index not in present]
        repairs = [s for s in received if s.is_repair]
        return missing, repairs


class IdealLinearCoder(LinearCoder):
    """
    Full-rank stand-in for a linear code.

    Every set of received repair symbols is linearly independent, so a
    window is rebuilt iff at least as many repair symbols as missing
    source symbols arrive. There is no partial recovery.
    """

    name = "ideal"

    def encode(self, window: Window, k: int) -> List[Symbol]:
        return [Symbol.repair(-1) for _ in range(k)]

    def attempt_decode(self, window: Window, received: Sequence[Symbol]) -> Tuple[bool, int]:
        missing, repairs = self.split(window, received)
        if len(repairs) >= len(missing):
            return True, len(missing)
        return False, 0


class GF256LinearCoder(LinearCoder):
    """
    Random linear code over GF(2^8).

    Each repair symbol carries a random coefficient vector over the
    window. Decoding eliminates the received source symbols and solves
    for the missing ones; rank-deficient systems may still rebuild some
    of them.

    Attributes:
        rng: Generator for coefficients, independent of the loss draws
    """

    name = "gf256"

    def __init__(self, seed: int = DEFAULT_SEED):
        """
        Initialize the coder.

        Args:
            seed: Seed for coefficient generation
        """
        self.seed = seed
        self.rng = np.random.default_rng(seed)

    def _coefficients(self, n: int) -> np.ndarray:
        return self.rng.integers(1, FIELD_SIZE, size=n, dtype=np.uint8)

    def encode(self, window: Window, k: int) -> List[Symbol]:
        return [Symbol.repair(-1, self._coefficients(window.size)) for _ in range(k)]

    def attempt_decode(self, window: Window, received: Sequence[Symbol]) -> Tuple[bool, int]:
        missing, repairs = self.split(window, received)
        if not missing:
            return True, 0
        if not repairs:
            return False, 0

        for r in repairs:
            if r.payload is None or len(r.payload) != window.size:
                raise ValueError(
                    f"repair coefficients do not cover window {window.index}"
                )

        # Received source symbols are known; only missing columns remain
        system = np.stack([r.payload for r in repairs])[:, missing]
        count = len(solvable_unknowns(system))
        return count == len(missing), count
