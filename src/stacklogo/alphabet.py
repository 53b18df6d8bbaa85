"""
alphabet
========

Fixed registry of the symbols a rendering layer knows how to draw.  Each
symbol has a stable integer index which downstream code uses to select a
glyph and colour.  The registry covers nucleotides and amino acids together
with the ambiguity codes, 26 symbols in all.

Parsers never consult this table: they only need the alphabet observed in,
or declared for, their input.
"""

from __future__ import annotations

from typing import Dict, Iterable, Tuple

from stacklogo.errors import MalformedInput, UnknownSymbol

SYMBOLS: Tuple[str, ...] = (
    "A",
    "C",
    "G",
    "T",
    "U",
    "D",
    "E",
    "F",
    "H",
    "I",
    "K",
    "L",
    "M",
    "N",
    "P",
    "Q",
    "R",
    "S",
    "V",
    "W",
    "Y",
    "B",
    "J",
    "O",
    "X",
    "Z",
)

_INDEX: Dict[str, int] = {symbol: index for index, symbol in enumerate(SYMBOLS)}


def index_of(symbol: str) -> int:
    """Return the registry index of ``symbol``."""
    try:
        return _INDEX[symbol]
    except KeyError:
        raise UnknownSymbol(f"Symbol {symbol!r} is not in the alphabet registry") from None


def letter_of(index: int) -> str:
    """Return the symbol stored at registry ``index``."""
    if not 0 <= index < len(SYMBOLS):
        raise UnknownSymbol(f"Index {index} is outside the alphabet registry (0..{len(SYMBOLS) - 1})")
    return SYMBOLS[index]


def is_known(symbol: str) -> bool:
    return symbol in _INDEX


def registry_indices(alphabet: Iterable[str]) -> Tuple[int, ...]:
    """Map every symbol of ``alphabet`` to its registry index."""
    return tuple(index_of(symbol) for symbol in alphabet)


def validate_alphabet(alphabet: Iterable[str]) -> Tuple[str, ...]:
    """Check that an alphabet holds unique single-character symbols.

    Returns the alphabet as a tuple, preserving order.
    """
    symbols = tuple(alphabet)
    for symbol in symbols:
        if not isinstance(symbol, str) or len(symbol) != 1:
            raise MalformedInput(f"Alphabet symbols must be single characters, got {symbol!r}")
    if len(set(symbols)) != len(symbols):
        duplicates = sorted({s for s in symbols if symbols.count(s) > 1})
        raise MalformedInput(f"Alphabet contains duplicate symbols: {duplicates}")
    return symbols
