"""
stacklogo
==================

Sequence logo computation for FASTA alignments and MEME motifs.  Raw text is
parsed into a common record holding the alphabet and a position-major
frequency matrix; an information model then derives per-position stack
heights and per-symbol letter heights, and a layout engine turns those into
ordered, non-overlapping intervals ready for a rendering layer.

The top level modules expose the following key components:

``alphabet``
    Fixed symbol <-> index registry used to select glyphs and colours.

``io``
    Parsers for aligned FASTA records and single-motif MEME documents.

``records``
    :class:`SequenceRecord` and :class:`FrequencyMatrix` containers.

``information``
    Stack height and letter height computation (``update_state``).

``layout``
    Per-position interval stacking (``compute_offsets``).

``api``
    Tagged inputs and the single-call :func:`build_logo` entry point.

``cli``
    A thin command line wrapper printing the layout as JSON or TSV.

Drawing glyphs, colour tables and axes are left to the rendering layer.
"""

from stacklogo.api import FastaInput, LogoData, MemeInput, build_logo, load_input, parse_input
from stacklogo.config import DisplayConfig, ParserConfig, create_display_config, create_parser_config
from stacklogo.errors import DegenerateInput, InvalidMatrix, LogoError, MalformedInput, UnknownSymbol
from stacklogo.information import stack_height, update_letter_heights, update_stack_heights, update_state
from stacklogo.io import parse_fasta, parse_meme
from stacklogo.layout import LayoutInterval, compute_layout, compute_offsets
from stacklogo.records import FastaEntry, FrequencyMatrix, MotifMetadata, SequenceRecord

__all__ = [
    "FastaInput",
    "MemeInput",
    "LogoData",
    "build_logo",
    "load_input",
    "parse_input",
    "DisplayConfig",
    "ParserConfig",
    "create_display_config",
    "create_parser_config",
    "LogoError",
    "MalformedInput",
    "InvalidMatrix",
    "DegenerateInput",
    "UnknownSymbol",
    "stack_height",
    "update_stack_heights",
    "update_letter_heights",
    "update_state",
    "parse_fasta",
    "parse_meme",
    "LayoutInterval",
    "compute_layout",
    "compute_offsets",
    "FastaEntry",
    "FrequencyMatrix",
    "MotifMetadata",
    "SequenceRecord",
]
