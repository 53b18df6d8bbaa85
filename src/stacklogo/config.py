"""Configuration values for parsing and for the rendering adapter."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict

DEFAULT_NSITES = 20

LOGO_TYPES = ("nucleotide", "protein", "epilogos")

COLOR_SCHEMES = (
    "classic",
    "nucleotide",
    "base_pairing",
    "hydrophobicity",
    "chemistry",
    "charge",
    "taylor",
    "epilogos-15state-human",
)


@dataclass(frozen=True)
class ParserConfig:
    """Immutable options shared by the FASTA and MEME parsers.

    Attributes
    ----------
    default_nsites : int
        Number of sites assumed for a MEME matrix header without ``nsites``.
    row_tolerance : float
        Allowed deviation of a frequency row sum from 1.
    validate_rows : bool
        Whether parsed frequency rows are checked against the row contract.
    gap_symbol : str
        FASTA character treated as a gap.
    unknown_symbol : str
        Symbol that replaces gaps in FASTA sequences.
    """

    default_nsites: int = DEFAULT_NSITES
    row_tolerance: float = 1e-2
    validate_rows: bool = True
    gap_symbol: str = "-"
    unknown_symbol: str = "N"


@dataclass(frozen=True)
class DisplayConfig:
    """Immutable display options handed to the rendering adapter."""

    logo_type: str = "nucleotide"
    color_scheme: str = "classic"
    svg_width: int = 800
    svg_height: int = 300
    svg_letter_width: int = 710
    svg_letter_height: int = 210

    def display_attributes(self) -> Dict[str, Any]:
        """Return the options as the flat mapping the adapter consumes."""
        attributes = asdict(self)
        attributes["type"] = attributes.pop("logo_type")
        return attributes


def create_parser_config(
    default_nsites: int = DEFAULT_NSITES,
    row_tolerance: float = 1e-2,
    validate_rows: bool = True,
    gap_symbol: str = "-",
    unknown_symbol: str = "N",
) -> ParserConfig:
    """Build a validated parser config."""

    if int(default_nsites) <= 0:
        raise ValueError(f"default_nsites must be positive, got {default_nsites}")
    if row_tolerance < 0:
        raise ValueError(f"row_tolerance must be non-negative, got {row_tolerance}")
    for name, symbol in (("gap_symbol", gap_symbol), ("unknown_symbol", unknown_symbol)):
        if len(symbol) != 1:
            raise ValueError(f"{name} must be a single character, got {symbol!r}")

    return ParserConfig(
        default_nsites=int(default_nsites),
        row_tolerance=float(row_tolerance),
        validate_rows=bool(validate_rows),
        gap_symbol=gap_symbol.upper(),
        unknown_symbol=unknown_symbol.upper(),
    )


def create_display_config(
    logo_type: str = "nucleotide",
    color_scheme: str = "classic",
    svg_width: int = 800,
    svg_height: int = 300,
    svg_letter_width: int = 710,
    svg_letter_height: int = 210,
) -> DisplayConfig:
    """Build a validated display config."""

    if logo_type not in LOGO_TYPES:
        raise ValueError(f"Unknown logo type: {logo_type!r}. Available: {', '.join(LOGO_TYPES)}")
    if color_scheme not in COLOR_SCHEMES:
        raise ValueError(f"Unknown color scheme: {color_scheme!r}. Available: {', '.join(COLOR_SCHEMES)}")

    dimensions = {
        "svg_width": svg_width,
        "svg_height": svg_height,
        "svg_letter_width": svg_letter_width,
        "svg_letter_height": svg_letter_height,
    }
    for name, value in dimensions.items():
        if int(value) <= 0:
            raise ValueError(f"{name} must be positive, got {value}")

    return DisplayConfig(logo_type=logo_type, color_scheme=color_scheme, **{k: int(v) for k, v in dimensions.items()})
