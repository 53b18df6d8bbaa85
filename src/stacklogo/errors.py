"""Exception types raised by parsers, the information model and the layout engine."""

from __future__ import annotations

from typing import Any, Optional


class LogoError(Exception):
    """Base class for all stacklogo errors."""


class MalformedInput(LogoError, ValueError):
    """Raw FASTA or MEME text that cannot be turned into a record.

    Attributes
    ----------
    entry : Any, optional
        The offending FASTA entry, when the failure is tied to one record.
    """

    def __init__(self, message: str, entry: Optional[Any] = None):
        super().__init__(message)
        self.entry = entry


class InvalidMatrix(LogoError, ValueError):
    """Frequency matrix violating the row or shape contract."""


class DegenerateInput(LogoError, ValueError):
    """Input with no records, no positions or no observations."""


class UnknownSymbol(LogoError, KeyError):
    """Symbol or index outside the alphabet registry."""

    def __str__(self) -> str:
        return str(self.args[0]) if self.args else ""
