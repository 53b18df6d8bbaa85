"""
Pytest configuration and common fixtures for stacklogo tests.
"""
from pathlib import Path

import pytest


@pytest.fixture
def temp_dir(tmp_path):
    """Temporary directory for test outputs."""
    return tmp_path


@pytest.fixture
def test_data_dir():
    """Return path to test data directory."""
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def two_record_fasta():
    """Two aligned records differing at the last position."""
    return ">a\nACGT\n>b\nACGA\n"


@pytest.fixture
def uniform_meme():
    """MEME document with one uniform row and no nsites attribute."""
    return "\n".join(
        [
            "MEME version 4",
            "",
            "ALPHABET= ACGT",
            "",
            "MOTIF uniform",
            "letter-probability matrix: alength= 4 w= 1",
            "0.25 0.25 0.25 0.25",
            "",
        ]
    )
