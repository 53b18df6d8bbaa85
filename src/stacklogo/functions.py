import numpy as np
from numba import njit

from stacklogo.errors import DegenerateInput, InvalidMatrix


@njit(cache=True)
def _column_counts_jit(encoded, n_symbols):
    """Count symbol occurrences per column of an integer-encoded alignment."""
    n_records, length = encoded.shape
    counts = np.zeros((length, n_symbols), dtype=np.int64)
    for i in range(n_records):
        for p in range(length):
            counts[p, encoded[i, p]] += 1
    return counts


@njit(cache=True)
def _uncertainty_jit(frequencies):
    """Shannon uncertainty in bits of every row; zero frequencies contribute nothing."""
    n_rows, n_cols = frequencies.shape
    result = np.zeros(n_rows, dtype=np.float64)
    for p in range(n_rows):
        total = 0.0
        for j in range(n_cols):
            f = frequencies[p, j]
            if f > 0.0:
                total -= f * np.log2(f)
        result[p] = total
    return result


def column_counts(encoded: np.ndarray, n_symbols: int) -> np.ndarray:
    """Return a (positions, n_symbols) count table for an encoded (records, positions) array."""
    encoded = np.ascontiguousarray(encoded, dtype=np.int64)
    if encoded.ndim != 2:
        raise ValueError(f"Encoded alignment must be 2-dimensional, got shape {encoded.shape}")
    if encoded.size and (encoded.min() < 0 or encoded.max() >= n_symbols):
        raise ValueError(f"Encoded symbols must lie in [0, {n_symbols})")
    return _column_counts_jit(encoded, n_symbols)


def shannon_uncertainty(frequencies: np.ndarray) -> np.ndarray:
    """Per-row uncertainty ``-sum f * log2(f)`` of a frequency matrix."""
    frequencies = np.ascontiguousarray(np.atleast_2d(frequencies), dtype=np.float64)
    return _uncertainty_jit(frequencies)


def error_correction(n_symbols: int, nsites: float) -> float:
    """Small-sample correction ``(s - 1) / (2 * n)``."""
    if nsites <= 0:
        raise DegenerateInput(f"nsites must be positive, got {nsites}")
    return (n_symbols - 1) / (2.0 * nsites)


def max_entropy(n_symbols: int) -> float:
    """Entropy in bits of a uniform distribution over ``n_symbols``."""
    if n_symbols <= 0:
        raise DegenerateInput("Alphabet is empty")
    return float(np.log2(n_symbols))


def stack_heights_from_frequencies(frequencies: np.ndarray, nsites: float) -> np.ndarray:
    """Information content in bits of every position.

    The result is ``log2(s) - H(p) - e(n)`` and is not clamped, so positions
    backed by very few sites may come out negative.
    """
    frequencies = np.ascontiguousarray(frequencies, dtype=np.float64)
    if frequencies.ndim != 2:
        raise InvalidMatrix(f"Frequency matrix must be 2-dimensional, got shape {frequencies.shape}")
    n_positions, n_symbols = frequencies.shape
    if n_positions == 0:
        raise DegenerateInput("Frequency matrix has no positions")

    correction = error_correction(n_symbols, nsites)
    return max_entropy(n_symbols) - _uncertainty_jit(frequencies) - correction


def letter_heights_from_frequencies(frequencies: np.ndarray, stack_heights: np.ndarray) -> np.ndarray:
    """Apportion each stack height among symbols by frequency."""
    frequencies = np.asarray(frequencies, dtype=np.float64)
    stack_heights = np.asarray(stack_heights, dtype=np.float64)
    if stack_heights.shape != (frequencies.shape[0],):
        raise InvalidMatrix(
            f"Expected {frequencies.shape[0]} stack heights for the frequency matrix, got shape {stack_heights.shape}"
        )
    return frequencies * stack_heights[:, None]


def check_frequency_rows(frequencies: np.ndarray, tolerance: float = 1e-9) -> None:
    """Raise InvalidMatrix unless every row is finite, within [0, 1] and sums to 1."""
    frequencies = np.asarray(frequencies, dtype=np.float64)
    if frequencies.ndim != 2:
        raise InvalidMatrix(f"Frequency matrix must be 2-dimensional, got shape {frequencies.shape}")
    if frequencies.size == 0:
        return

    if not np.all(np.isfinite(frequencies)):
        bad = int(np.where(~np.isfinite(frequencies).all(axis=1))[0][0])
        raise InvalidMatrix(f"Row {bad} contains non-finite values")

    out_of_range = (frequencies < 0.0) | (frequencies > 1.0)
    if np.any(out_of_range):
        bad = int(np.where(out_of_range.any(axis=1))[0][0])
        raise InvalidMatrix(f"Row {bad} contains values outside [0, 1]: {frequencies[bad].tolist()}")

    sums = frequencies.sum(axis=1)
    off = np.abs(sums - 1.0) > tolerance
    if np.any(off):
        bad = int(np.where(off)[0][0])
        raise InvalidMatrix(f"Row {bad} sums to {sums[bad]:.6f}, expected 1 (tolerance {tolerance})")
