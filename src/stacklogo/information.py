"""
information
===========

Information content of a :class:`~stacklogo.records.SequenceRecord`.

The stack height of position ``l`` is

    R(l) = log2(s) - (H(l) + e(n))

where ``s`` is the alphabet size, ``H(l) = -sum f(b, l) * log2 f(b, l)`` is
the uncertainty at ``l`` and ``e(n) = (s - 1) / (2 * n)`` is the small-sample
correction for ``n`` sites (Schneider et al., 1986).  The height of symbol
``b`` is ``f(b, l) * R(l)``.

Both derived arrays are refreshed together by :func:`update_state`.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import numpy as np

from stacklogo import functions
from stacklogo.errors import DegenerateInput, InvalidMatrix

if TYPE_CHECKING:
    from stacklogo.records import SequenceRecord


def _checked_frequencies(record: SequenceRecord) -> np.ndarray:
    """Return the record's frequencies after checking them against its alphabet."""
    frequencies = record.frequency_matrix.frequencies
    n_symbols = len(record.alphabet)
    if n_symbols == 0:
        raise DegenerateInput(f"Record {record.identifier!r} has an empty alphabet")
    if frequencies.ndim != 2 or frequencies.shape[1] != n_symbols:
        raise InvalidMatrix(
            f"Record {record.identifier!r}: alphabet has {n_symbols} symbols but the frequency "
            f"matrix has shape {frequencies.shape}"
        )
    if frequencies.shape[0] == 0:
        raise DegenerateInput(f"Record {record.identifier!r} has no positions")
    if record.nsites <= 0:
        raise DegenerateInput(f"Record {record.identifier!r} has nsites={record.nsites}")
    return frequencies


def max_entropy(record: SequenceRecord) -> float:
    """Upper bound of the stack height, ``log2(len(alphabet))``."""
    return functions.max_entropy(len(record.alphabet))


def stack_height(record: SequenceRecord, position: int) -> float:
    """Information content in bits at a single position."""
    frequencies = _checked_frequencies(record)
    if not 0 <= position < frequencies.shape[0]:
        raise IndexError(f"Position {position} out of range for record of length {frequencies.shape[0]}")
    return float(functions.stack_heights_from_frequencies(frequencies[position : position + 1], record.nsites)[0])


def update_stack_heights(record: SequenceRecord) -> None:
    """Store the stack height of every position in ``record.stack_heights``."""
    frequencies = _checked_frequencies(record)
    record.stack_heights = functions.stack_heights_from_frequencies(frequencies, record.nsites)


def update_letter_heights(record: SequenceRecord) -> None:
    """Store ``frequency * stack_height`` in ``record.letter_heights``."""
    frequencies = _checked_frequencies(record)
    if record.stack_heights is None:
        raise ValueError("Stack heights must be computed before letter heights")
    record.letter_heights = functions.letter_heights_from_frequencies(frequencies, record.stack_heights)


def update_state(record: SequenceRecord) -> SequenceRecord:
    """Refresh both derived fields of ``record``.

    Must be called after parsing and after every change of the frequency
    matrix.  On failure neither derived field is left half-updated.
    """
    logger = logging.getLogger(__name__)

    record.stack_heights = None
    record.letter_heights = None
    try:
        update_stack_heights(record)
        update_letter_heights(record)
    except Exception:
        record.stack_heights = None
        record.letter_heights = None
        raise

    logger.debug(
        f"Refreshed {record.identifier!r}: {record.length} position(s), "
        f"total information {float(np.sum(record.stack_heights)):.4f} bits"
    )
    return record
