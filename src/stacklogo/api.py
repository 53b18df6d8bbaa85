"""High-level public API: from raw input to layout data for a renderer."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import pandas as pd

from stacklogo.config import DisplayConfig, ParserConfig
from stacklogo.io import parse_fasta, parse_meme
from stacklogo.layout import LayoutInterval, compute_layout, layout_frame
from stacklogo.records import SequenceRecord

_MODE_EXTENSIONS = {
    ".fa": "fasta",
    ".fas": "fasta",
    ".fasta": "fasta",
    ".fna": "fasta",
    ".faa": "fasta",
    ".meme": "meme",
    ".txt": "meme",
}


@dataclass(frozen=True)
class FastaInput:
    """Aligned FASTA text together with the identifier of the set."""

    identifier: str
    text: str


@dataclass(frozen=True)
class MemeInput:
    """Single-motif MEME document."""

    text: str


LogoInput = Union[FastaInput, MemeInput]


@dataclass
class LogoData:
    """Everything a rendering adapter needs to draw one logo."""

    record: SequenceRecord
    layout: List[List[LayoutInterval]]
    display: DisplayConfig = field(default_factory=DisplayConfig)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "record": self.record.to_dict(),
            "max_entropy": self.record.max_entropy,
            "layout": [[list(interval) for interval in intervals] for intervals in self.layout],
            "display": self.display.display_attributes(),
        }

    def to_frame(self) -> pd.DataFrame:
        return layout_frame(self.layout)


def parse_input(source: LogoInput, config: Optional[ParserConfig] = None) -> SequenceRecord:
    """Parse a tagged input and refresh the derived heights of the result."""

    if isinstance(source, FastaInput):
        record = parse_fasta(source.identifier, source.text, config)
    elif isinstance(source, MemeInput):
        record = parse_meme(source.text, config)
    else:
        raise TypeError(f"Unsupported input type: {type(source)!r}")

    return record.update_state()


def build_logo(
    source: LogoInput,
    parser_config: Optional[ParserConfig] = None,
    display: Optional[DisplayConfig] = None,
) -> LogoData:
    """Single-call entry point: parse, refresh and lay out one input."""

    record = parse_input(source, parser_config)
    return LogoData(record=record, layout=compute_layout(record), display=display or DisplayConfig())


def load_input(path: Union[str, Path], mode: Optional[str] = None) -> LogoInput:
    """Read a FASTA or MEME file into a tagged input.

    ``mode`` is ``"fasta"`` or ``"meme"``; when omitted it is inferred from
    the file extension.  FASTA inputs are identified by the file stem.
    """

    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Input file not found: {path}")

    if mode is None:
        mode = _MODE_EXTENSIONS.get(path.suffix.lower())
        if mode is None:
            raise ValueError(f"Cannot infer input mode from {path.name!r}; pass mode='fasta' or mode='meme'")

    text = path.read_text()
    if mode == "fasta":
        return FastaInput(identifier=path.stem, text=text)
    if mode == "meme":
        return MemeInput(text=text)
    raise ValueError(f"Unknown input mode: {mode!r}. Available: fasta, meme")
