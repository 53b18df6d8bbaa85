"""
layout
======

Turns per-position letter heights into drawable vertical intervals.

For one position the symbols are first measured in declaration order, then
ordered by descending height (stable, so ties keep declaration order) and
stacked upwards from ``max_entropy - stack_height``.
"""

from __future__ import annotations

from typing import List, NamedTuple, Sequence

import numpy as np
import pandas as pd

from stacklogo.alphabet import index_of, letter_of
from stacklogo.errors import InvalidMatrix
from stacklogo.records import SequenceRecord


class LayoutInterval(NamedTuple):
    """Vertical span ``[lower, upper)`` of one symbol at one position."""

    lower: float
    upper: float
    symbol_index: int

    @property
    def height(self) -> float:
        return self.upper - self.lower


def compute_offsets(
    position: int,
    alphabet: Sequence[str],
    letter_heights: Sequence[float],
    stack_height: float,
    max_entropy: float,
) -> List[LayoutInterval]:
    """Stack the symbols of a single position.

    Parameters
    ----------
    position : int
        Sequence position, used in error messages only.
    alphabet : sequence of str
        Symbols in declaration order.
    letter_heights : sequence of float
        Height of each alphabet symbol at ``position``.
    stack_height : float
        Total height of the position.
    max_entropy : float
        ``log2(len(alphabet))``; the stack starts at ``max_entropy - stack_height``.

    Returns
    -------
    list of LayoutInterval
        Tallest symbol first.  Symbols without positive height are left out.
    """
    if len(letter_heights) != len(alphabet):
        raise InvalidMatrix(
            f"Position {position}: {len(letter_heights)} letter height(s) for an alphabet of {len(alphabet)}"
        )

    spans = []
    total = 0.0
    for j, height in enumerate(letter_heights):
        upper = total + float(height)
        spans.append((total, upper, upper - total, j))
        total = upper

    spans.sort(key=lambda span: span[2], reverse=True)

    offsets = []
    baseline = max_entropy - stack_height
    for _, _, diff, j in spans:
        if diff <= 0:
            continue
        offsets.append(LayoutInterval(baseline, baseline + diff, index_of(alphabet[j])))
        baseline += diff

    return offsets


def compute_layout(record: SequenceRecord) -> List[List[LayoutInterval]]:
    """Compute the intervals of every position of a refreshed record."""
    if not record.is_refreshed:
        raise ValueError("Record heights are stale; call update_state() before computing a layout")

    max_entropy = record.max_entropy
    return [
        compute_offsets(position, record.alphabet, record.letter_heights[position], stack_height, max_entropy)
        for position, stack_height in enumerate(np.asarray(record.stack_heights, dtype=np.float64))
    ]


def layout_frame(layout: Sequence[Sequence[LayoutInterval]]) -> pd.DataFrame:
    """Flatten a layout into one row per drawn interval."""
    rows = [
        {
            "position": position,
            "symbol": letter_of(interval.symbol_index),
            "symbol_index": interval.symbol_index,
            "lower": interval.lower,
            "upper": interval.upper,
            "height": interval.height,
        }
        for position, intervals in enumerate(layout)
        for interval in intervals
    ]
    return pd.DataFrame(rows, columns=["position", "symbol", "symbol_index", "lower", "upper", "height"])
