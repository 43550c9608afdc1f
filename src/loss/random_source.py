"""
Deterministic Random Source

Seeded uniform draws shared by every loss decision of a run. Two sources
built with the same seed hand out the same sequence, bit for bit.
"""

from typing import Optional

import numpy as np

from config import DEFAULT_SEED, RANDOM_BLOCK_SIZE


class RandomSource:
    """
    Seeded generator of uniform values in [0, 1).
    
    Draws are pulled from numpy in blocks and handed out one at a time,
    so the per-symbol cost stays low on million-symbol runs.
    
    Attributes:
        seed: Seed of the underlying generator
        draws: Number of values handed out so far
    """
    
    def __init__(self, seed: int = DEFAULT_SEED, block_size: int = RANDOM_BLOCK_SIZE):
        """
        Initialize the random source.
        
        Args:
            seed: 64-bit seed
            block_size: Number of values pre-drawn at once
        """
        self.seed = seed
        self.block_size = block_size
        self.rng = np.random.default_rng(seed)
        self.draws = 0
        
        self._block = np.empty(0)
        self._pos = 0
    
    def _refill(self):
        self._block = self.rng.random(self.block_size)
        self._pos = 0
    
    def uniform(self) -> float:
        """Return the next uniform value in [0, 1)."""
        if self._pos >= len(self._block):
            self._refill()
        value = float(self._block[self._pos])
        self._pos += 1
        self.draws += 1
        return value
    
    def bernoulli(self, p: float) -> bool:
        """Draw one value and return True with probability p."""
        return self.uniform() < p
    
    def reset(self, seed: Optional[int] = None):
        """
        Restart the sequence from the beginning.
        
        Args:
            seed: New seed (optional, defaults to the current one)
        """
        if seed is not None:
            self.seed = seed
        self.rng = np.random.default_rng(self.seed)
        self.draws = 0
        self._block = np.empty(0)
        self._pos = 0
