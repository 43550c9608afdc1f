"""
Loss package - Symbol loss models.

Contains implementations for:
- Deterministic seeded random source
- Uniform (Bernoulli) loss
- Gilbert-Elliott burst loss
- Scripted pattern loss (trace replay)
"""

from .random_source import RandomSource
from .base import LossModel
from .uniform import UniformLoss
from .gilbert_elliott import GilbertElliottLoss, ChannelState
from .pattern import PatternLoss

__all__ = [
    'RandomSource',
    'LossModel',
    'UniformLoss',
    'GilbertElliottLoss',
    'ChannelState',
    'PatternLoss'
]
