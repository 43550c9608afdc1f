"""
FEC package - Forward erasure correction schemes.

Contains implementations for:
- Symbol, window and recovery outcome types
- Adaptive-linear scheme (Scheme A) and its linear coders
- Interleaved-parity scheme (Scheme B)
"""

from .symbol import Symbol, SymbolKind, Window, RecoveryOutcome, symbol_source
from .base import FecScheme
from .linear_coder import LinearCoder, IdealLinearCoder, GF256LinearCoder
from .adaptive_linear import AdaptiveLinearScheme
from .interleaved_parity import InterleavedParityScheme

__all__ = [
    'Symbol',
    'SymbolKind',
    'Window',
    'RecoveryOutcome',
    'symbol_source',
    'FecScheme',
    'LinearCoder',
    'IdealLinearCoder',
    'GF256LinearCoder',
    'AdaptiveLinearScheme',
    'InterleavedParityScheme'
]
