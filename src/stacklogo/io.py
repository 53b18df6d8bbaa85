"""Parsers turning FASTA records and MEME motif text into sequence records."""

from __future__ import annotations

import logging
import re
from typing import Dict, List, Optional, Tuple, Union

import numpy as np

from stacklogo.alphabet import validate_alphabet
from stacklogo.config import ParserConfig
from stacklogo.errors import DegenerateInput, MalformedInput
from stacklogo.functions import check_frequency_rows, column_counts
from stacklogo.records import FastaEntry, FrequencyMatrix, MotifMetadata, SequenceRecord

_HEADER_RE = re.compile(r"^>(.*)$")

_VERSION_RE = re.compile(r"^MEME version (\S+)")
_ALPHABET_RE = re.compile(r"^ALPHABET=\s*(\S+)\s*$")
_STRANDS_RE = re.compile(r"^strands:\s*([+\-\s]+)$")
_BACKGROUND_RE = re.compile(r"^Background letter frequencies")
_MOTIF_RE = re.compile(r"^MOTIF\s+(.+)$")
_URL_RE = re.compile(r"https?://\S+", re.IGNORECASE)
_MATRIX_RE = re.compile(r"^letter-probability matrix:(.*)$")
_ATTRIBUTE_RE = re.compile(r"([A-Za-z]\w*)=\s*(\S+)")

_SECTION_RES = (_VERSION_RE, _ALPHABET_RE, _STRANDS_RE, _BACKGROUND_RE, _MOTIF_RE, _MATRIX_RE)


def _normalize_sequence_line(line: str, config: ParserConfig) -> str:
    """Uppercase, drop whitespace and replace gaps with the unknown symbol."""
    sequence = "".join(line.upper().split())
    return sequence.replace(config.gap_symbol, config.unknown_symbol)


def _complete_entry(
    entries: List[FastaEntry], header: str, parts: List[str], sequence_length: Optional[int]
) -> Optional[int]:
    """Append a finished FASTA entry, enforcing a common sequence length."""
    logger = logging.getLogger(__name__)
    sequence = "".join(parts)
    entry = FastaEntry(header=header, sequence=sequence)

    if not sequence:
        logger.warning(f"Skipping FASTA record {header!r} without sequence data")
        return sequence_length
    if not sequence.isascii():
        raise MalformedInput(f"Non-ASCII characters in sequence of record {header!r}", entry=entry)
    if sequence_length is not None and len(sequence) != sequence_length:
        raise MalformedInput(
            f"Invalid sequence length for record {header!r}: expected {sequence_length}, got {len(sequence)}",
            entry=entry,
        )

    entries.append(entry)
    logger.debug(f"Read FASTA record {header!r} (length={len(sequence)})")
    return len(sequence)


def parse_fasta(identifier: str, text: str, config: Optional[ParserConfig] = None) -> SequenceRecord:
    """Parse aligned FASTA text into a sequence record.

    All records must share one sequence length.  The alphabet is the set of
    characters observed, in order of first appearance, and ``nsites`` is the
    number of records.  Text without records yields a record with an empty
    matrix and ``nsites == 0``.

    Raises
    ------
    MalformedInput
        If record lengths differ or sequence data precedes the first header.
    """
    config = config or ParserConfig()
    logger = logging.getLogger(__name__)

    entries: List[FastaEntry] = []
    sequence_length: Optional[int] = None
    header: Optional[str] = None
    parts: List[str] = []

    for line in text.splitlines():
        line = line.strip()
        if not line:
            continue

        match = _HEADER_RE.match(line)
        if match:
            if header is not None:
                sequence_length = _complete_entry(entries, header, parts, sequence_length)
            header = match.group(1).strip()
            parts = []
        else:
            if header is None:
                raise MalformedInput(f"FASTA sequence found before header in {identifier!r}")
            parts.append(_normalize_sequence_line(line, config))

    if header is not None:
        sequence_length = _complete_entry(entries, header, parts, sequence_length)

    if not entries:
        logger.warning(f"No FASTA records found in {identifier!r}")
        return SequenceRecord(
            identifier=identifier,
            alphabet=(),
            frequency_matrix=FrequencyMatrix(np.zeros((0, 0), dtype=np.float64), {"nsites": 0}),
        )

    alphabet = tuple(dict.fromkeys(symbol for entry in entries for symbol in entry.sequence))

    trans_table = bytearray(256)
    for code, symbol in enumerate(alphabet):
        trans_table[ord(symbol)] = code
    joined = "".join(entry.sequence for entry in entries).encode("ascii").translate(trans_table)
    encoded = np.frombuffer(joined, dtype=np.uint8).reshape(len(entries), sequence_length)

    counts = column_counts(encoded, len(alphabet))
    frequencies = counts / float(len(entries))
    if config.validate_rows:
        check_frequency_rows(frequencies, config.row_tolerance)

    logger.info(
        f"Parsed {len(entries)} FASTA record(s) from {identifier!r}: "
        f"length={sequence_length}, alphabet={''.join(alphabet)}"
    )

    return SequenceRecord(
        identifier=identifier,
        alphabet=alphabet,
        frequency_matrix=FrequencyMatrix(frequencies, {"nsites": len(entries)}),
        entries=entries,
    )


def _parse_attribute_value(value: str) -> Union[int, float, str]:
    for cast in (int, float):
        try:
            return cast(value)
        except ValueError:
            continue
    return value


def _parse_background(tokens: List[str]) -> Dict[str, float]:
    """Turn ``symbol value symbol value ...`` tokens into a mapping."""
    if len(tokens) % 2:
        raise MalformedInput(f"Background frequencies must be symbol/value pairs, got {' '.join(tokens)!r}")
    background = {}
    for symbol, value in zip(tokens[::2], tokens[1::2], strict=False):
        try:
            background[symbol.upper()] = float(value)
        except ValueError:
            raise MalformedInput(f"Invalid background frequency for {symbol!r}: {value!r}") from None
    return background


def _is_number(token: str) -> bool:
    try:
        float(token)
    except ValueError:
        return False
    return True


def _read_matrix_rows(lines: List[str], start: int, n_symbols: int) -> Tuple[List[List[float]], int]:
    """Read probability rows from ``lines[start:]``.

    Returns the rows and the index of the first line not consumed.  Reading
    stops at a blank line, a non-numeric line or the end of input.
    """
    rows: List[List[float]] = []
    idx = start
    while idx < len(lines):
        tokens = lines[idx].split()
        if not tokens or not _is_number(tokens[0]):
            break
        if len(tokens) < n_symbols:
            raise MalformedInput(
                f"Probability row {len(rows)} has {len(tokens)} value(s), alphabet needs {n_symbols}"
            )
        try:
            rows.append([float(token) for token in tokens[:n_symbols]])
        except ValueError:
            raise MalformedInput(f"Non-numeric value in probability row {len(rows)}: {lines[idx].strip()!r}") from None
        idx += 1
    return rows, idx


def parse_meme(text: str, config: Optional[ParserConfig] = None) -> SequenceRecord:
    """Parse a single-motif MEME document into a sequence record.

    The alphabet declaration fixes the column order.  Rows of the
    ``letter-probability matrix`` block are used as given (no
    renormalization).  When the matrix header carries no usable ``nsites`` the
    configured default (20) is used and ``E`` is set to 0.

    Raises
    ------
    MalformedInput
        If the matrix precedes the alphabet, no matrix is present or a row
        cannot be read.
    DegenerateInput
        If the matrix block holds no rows.
    InvalidMatrix
        If a row violates the frequency contract.
    """
    config = config or ParserConfig()
    logger = logging.getLogger(__name__)

    lines = text.splitlines()
    version: Optional[str] = None
    alphabet: Optional[Tuple[str, ...]] = None
    strands: Optional[Tuple[str, ...]] = None
    background: Optional[Dict[str, float]] = None
    identifier: Optional[str] = None
    alternate_name: Optional[str] = None
    url: Optional[str] = None
    attributes: Optional[Dict[str, Union[int, float, str]]] = None
    rows: List[List[float]] = []

    idx = 0
    while idx < len(lines):
        line = lines[idx].strip()
        idx += 1
        if not line:
            continue

        match = _VERSION_RE.match(line)
        if match:
            version = match.group(1)
            continue

        match = _ALPHABET_RE.match(line)
        if match:
            alphabet = validate_alphabet(match.group(1).upper())
            continue

        match = _STRANDS_RE.match(line)
        if match:
            strands = tuple(match.group(1).split())
            continue

        if _BACKGROUND_RE.match(line):
            tokens: List[str] = []
            while idx < len(lines) and lines[idx].strip():
                if any(pattern.match(lines[idx].strip()) for pattern in _SECTION_RES):
                    break
                tokens.extend(lines[idx].split())
                idx += 1
            if tokens:
                background = _parse_background(tokens)
            elif alphabet is not None:
                background = {symbol: 1.0 / len(alphabet) for symbol in alphabet}
            else:
                raise MalformedInput("Uniform background frequencies require a preceding alphabet")
            continue

        match = _MOTIF_RE.match(line)
        if match:
            if attributes is not None:
                logger.warning("Only the first motif of a MEME document is parsed; ignoring the rest")
                break
            names = match.group(1).split()
            identifier = names[0]
            alternate_name = names[1] if len(names) > 1 else None
            continue

        match = _URL_RE.search(line)
        if match:
            url = match.group(0)
            continue

        match = _MATRIX_RE.match(line)
        if match:
            if alphabet is None:
                raise MalformedInput("alphabet must precede probability matrix")
            if attributes is not None:
                logger.warning("Only the first probability matrix of a MEME document is parsed")
                break

            attributes = {key: _parse_attribute_value(value) for key, value in _ATTRIBUTE_RE.findall(match.group(1))}
            nsites = attributes.get("nsites")
            if nsites is not None and (isinstance(nsites, str) or not np.isfinite(nsites)):
                logger.warning(f"Motif {identifier!r} has unusable nsites={nsites!r}; treating it as absent")
                del attributes["nsites"]
            if "nsites" not in attributes:
                logger.warning(
                    f"Motif {identifier!r} declares no nsites; assuming nsites={config.default_nsites}"
                )
                attributes["nsites"] = config.default_nsites
                attributes["E"] = 0

            rows, idx = _read_matrix_rows(lines, idx, len(alphabet))
            continue

        logger.debug(f"Ignoring MEME line: {line!r}")

    if attributes is None or alphabet is None:
        raise MalformedInput("No letter-probability matrix found in MEME input")
    if not rows:
        raise DegenerateInput(f"Probability matrix of motif {identifier!r} has no rows")

    if "alength" in attributes and attributes["alength"] != len(alphabet):
        logger.warning(f"Matrix alength={attributes['alength']} differs from alphabet size {len(alphabet)}")
    if "w" in attributes and attributes["w"] != len(rows):
        logger.warning(f"Matrix w={attributes['w']} differs from the {len(rows)} row(s) read")

    frequencies = np.array(rows, dtype=np.float64)
    if config.validate_rows:
        check_frequency_rows(frequencies, config.row_tolerance)

    logger.info(f"Parsed MEME motif {identifier!r}: {len(rows)} position(s), alphabet={''.join(alphabet)}")

    return SequenceRecord(
        identifier=identifier,
        alphabet=alphabet,
        frequency_matrix=FrequencyMatrix(frequencies, attributes),
        metadata=MotifMetadata(
            version=version,
            strands=strands,
            background_frequencies=background,
            alternate_name=alternate_name,
            url=url,
        ),
    )
