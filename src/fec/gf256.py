"""
GF(2^8) Arithmetic

Vectorised finite-field arithmetic over numpy uint8 arrays, with the
primitive polynomial x^8 + x^4 + x^3 + x^2 + 1 (0x11D). Provides the
Gaussian elimination used by the random linear coder.
"""

from typing import List, Tuple

import numpy as np

PRIMITIVE_POLY = 0x11D
FIELD_SIZE = 256


def _build_tables() -> Tuple[np.ndarray, np.ndarray]:
    exp = np.zeros(2 * FIELD_SIZE, dtype=np.uint8)
    log = np.zeros(FIELD_SIZE, dtype=np.int32)
    x = 1
    for i in range(FIELD_SIZE - 1):
        exp[i] = x
        log[x] = i
        x <<= 1
        if x & 0x100:
            x ^= PRIMITIVE_POLY
    # Doubled so log[a] + log[b] never needs a modulo
    exp[FIELD_SIZE - 1:2 * (FIELD_SIZE - 1)] = exp[:FIELD_SIZE - 1]
    return exp, log


EXP, LOG = _build_tables()


def gf_mul(a, b) -> np.ndarray:
    """Element-wise product, broadcasting like numpy."""
    a = np.asarray(a, dtype=np.uint8)
    b = np.asarray(b, dtype=np.uint8)
    product = EXP[LOG[a] + LOG[b]]
    return np.where((a == 0) | (b == 0), 0, product).astype(np.uint8)


def gf_inv(a) -> np.ndarray:
    """Multiplicative inverse. Zero has no inverse."""
    a = np.asarray(a, dtype=np.uint8)
    if np.any(a == 0):
        raise ZeroDivisionError("0 has no inverse in GF(2^8)")
    return EXP[(FIELD_SIZE - 1) - LOG[a]].astype(np.uint8)


def rref(matrix: np.ndarray) -> Tuple[np.ndarray, List[int]]:
    """
    Reduced row echelon form over GF(2^8).

    Args:
        matrix: 2-D uint8 array

    Returns:
        Tuple of (non-zero rows in RREF, pivot column of each row)
    """
    A = np.array(matrix, dtype=np.uint8, copy=True)
    if A.ndim != 2:
        raise ValueError("rref expects a 2-D matrix")
    n_rows, n_cols = A.shape
    pivots: List[int] = []
    row = 0

    for col in range(n_cols):
        if row >= n_rows:
            break
        candidates = np.nonzero(A[row:, col])[0]
        if candidates.size == 0:
            continue
        pivot = row + int(candidates[0])
        if pivot != row:
            A[[row, pivot]] = A[[pivot, row]]

        A[row] = gf_mul(A[row], gf_inv(A[row, col]))

        # Eliminate the pivot column from every other row
        factors = A[:, col].copy()
        factors[row] = 0
        A ^= gf_mul(factors[:, None], A[row][None, :])

        pivots.append(col)
        row += 1

    return A[:row], pivots


def rank(matrix: np.ndarray) -> int:
    """Rank of a matrix over GF(2^8)."""
    if np.asarray(matrix).size == 0:
        return 0
    return len(rref(matrix)[1])


def solvable_unknowns(matrix: np.ndarray) -> List[int]:
    """
    Columns whose unknown is uniquely determined by the system.

    An unknown is determined iff its unit vector lies in the row space,
    i.e. its pivot row in RREF has no other non-zero entry.
    """
    if np.asarray(matrix).size == 0:
        return []
    reduced, pivots = rref(matrix)
    return [
        col for row, col in zip(reduced, pivots)
        if np.count_nonzero(row) == 1
    ]
