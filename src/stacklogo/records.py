"""
records
=======

Data containers shared by both parsers.  A :class:`SequenceRecord` carries
the alphabet and the position-major :class:`FrequencyMatrix` produced by a
parser, together with the derived ``stack_heights`` and ``letter_heights``
fields filled in by :func:`stacklogo.information.update_state`.

Derived fields are not tracked: after changing ``frequency_matrix`` they stay
stale until ``update_state`` runs again.
"""

from __future__ import annotations

from dataclasses import dataclass
from dataclasses import field as dc_field
from typing import Any, Dict, List, Optional, Tuple

import numpy as np
import pandas as pd

from stacklogo import information
from stacklogo.alphabet import validate_alphabet
from stacklogo.errors import InvalidMatrix
from stacklogo.functions import check_frequency_rows


@dataclass(frozen=True)
class FastaEntry:
    """One FASTA record after normalization."""

    header: str
    sequence: str


@dataclass(frozen=True)
class MotifMetadata:
    """Optional MEME document metadata.

    Attributes
    ----------
    version : str, optional
        Value of the ``MEME version`` line.
    strands : tuple of str, optional
        Strand orientations, e.g. ``("+", "-")``.
    background_frequencies : dict, optional
        Symbol to background probability.
    alternate_name : str, optional
        Second token of the ``MOTIF`` line.
    url : str, optional
        First URL found in the document.
    """

    version: Optional[str] = None
    strands: Optional[Tuple[str, ...]] = None
    background_frequencies: Optional[Dict[str, float]] = None
    alternate_name: Optional[str] = None
    url: Optional[str] = None


@dataclass
class FrequencyMatrix:
    """Position-major probability table with its attributes.

    ``frequencies`` has one row per sequence position and one column per
    alphabet symbol.  ``attributes`` always holds ``nsites``.
    """

    frequencies: np.ndarray
    attributes: Dict[str, Any] = dc_field(default_factory=dict)

    def __post_init__(self):
        self.frequencies = np.asarray(self.frequencies, dtype=np.float64)
        if self.frequencies.ndim != 2:
            raise InvalidMatrix(f"Frequency matrix must be 2-dimensional, got shape {self.frequencies.shape}")
        self.attributes.setdefault("nsites", 0)

    @property
    def nsites(self) -> float:
        return self.attributes["nsites"]

    @property
    def n_positions(self) -> int:
        return self.frequencies.shape[0]

    @property
    def n_symbols(self) -> int:
        return self.frequencies.shape[1]

    def validate(self, tolerance: float = 1e-9) -> None:
        """Check the row contract (finite, in [0, 1], summing to 1)."""
        check_frequency_rows(self.frequencies, tolerance)


@dataclass
class SequenceRecord:
    """Common intermediate produced by the FASTA and MEME parsers.

    Attributes
    ----------
    identifier : str
        Record name (FASTA identifier or MEME motif name).
    alphabet : tuple of str
        Column order of ``frequency_matrix``.
    frequency_matrix : FrequencyMatrix
        Per-position symbol probabilities.
    stack_heights : np.ndarray, optional
        Information content per position; ``None`` until refreshed.
    letter_heights : np.ndarray, optional
        Per-position, per-symbol heights; ``None`` until refreshed.
    entries : list of FastaEntry
        Parsed FASTA records (empty for MEME input).
    metadata : MotifMetadata, optional
        MEME document metadata.
    """

    identifier: Optional[str]
    alphabet: Tuple[str, ...]
    frequency_matrix: FrequencyMatrix
    stack_heights: Optional[np.ndarray] = None
    letter_heights: Optional[np.ndarray] = None
    entries: List[FastaEntry] = dc_field(default_factory=list)
    metadata: Optional[MotifMetadata] = None

    def __post_init__(self):
        self.alphabet = validate_alphabet(self.alphabet)
        if self.frequency_matrix.n_positions and self.frequency_matrix.n_symbols != len(self.alphabet):
            raise InvalidMatrix(
                f"Alphabet has {len(self.alphabet)} symbols but frequency rows have "
                f"{self.frequency_matrix.n_symbols} values"
            )

    @property
    def length(self) -> int:
        """Number of sequence positions."""
        return self.frequency_matrix.n_positions

    @property
    def nsites(self) -> float:
        return self.frequency_matrix.nsites

    @property
    def max_entropy(self) -> float:
        return information.max_entropy(self)

    @property
    def is_refreshed(self) -> bool:
        return self.stack_heights is not None and self.letter_heights is not None

    def update_state(self) -> "SequenceRecord":
        """Recompute stack and letter heights from the frequency matrix."""
        information.update_state(self)
        return self

    def frequency_frame(self) -> pd.DataFrame:
        """Return the frequency matrix as a DataFrame (positions x alphabet)."""
        frame = pd.DataFrame(self.frequency_matrix.frequencies, columns=list(self.alphabet))
        frame.index.name = "position"
        return frame

    def heights_frame(self) -> pd.DataFrame:
        """Return letter heights and the stack height per position as a DataFrame."""
        if not self.is_refreshed:
            raise ValueError("Record heights are stale; call update_state() first")
        frame = pd.DataFrame(self.letter_heights, columns=list(self.alphabet))
        frame["stack_height"] = self.stack_heights
        frame.index.name = "position"
        return frame

    def to_dict(self) -> Dict[str, Any]:
        """JSON-ready representation of the record."""
        result: Dict[str, Any] = {
            "identifier": self.identifier,
            "alphabet": list(self.alphabet),
            "attributes": {k: _plain(v) for k, v in self.frequency_matrix.attributes.items()},
            "frequencies": self.frequency_matrix.frequencies.tolist(),
            "stack_heights": None if self.stack_heights is None else self.stack_heights.tolist(),
            "letter_heights": None if self.letter_heights is None else self.letter_heights.tolist(),
        }
        if self.entries:
            result["entries"] = [{"header": e.header, "sequence": e.sequence} for e in self.entries]
        if self.metadata is not None:
            result["metadata"] = {
                "version": self.metadata.version,
                "strands": list(self.metadata.strands) if self.metadata.strands else None,
                "background_frequencies": self.metadata.background_frequencies,
                "alternate_name": self.metadata.alternate_name,
                "url": self.metadata.url,
            }
        return result


def _plain(value: Any) -> Any:
    """Convert numpy scalars to builtin numbers."""
    if isinstance(value, np.generic):
        return value.item()
    return value
