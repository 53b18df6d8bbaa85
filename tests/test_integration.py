"""
Integration tests for stacklogo: parsing raw FASTA and MEME text, refreshing
records through the public API and running the command line interface.
"""

import json
import subprocess
import sys

import numpy as np
import pytest

from stacklogo.api import FastaInput, LogoData, MemeInput, build_logo, load_input, parse_input
from stacklogo.config import create_display_config, create_parser_config
from stacklogo.errors import DegenerateInput, InvalidMatrix, MalformedInput
from stacklogo.io import parse_fasta, parse_meme


def run_cli(args: list[str]) -> subprocess.CompletedProcess:
    """Run CLI through current Python env to avoid global PATH contamination."""
    return subprocess.run([sys.executable, "-m", "stacklogo.cli", *args], capture_output=True, text=True)


def test_fasta_two_records(two_record_fasta):
    """Test alphabet order, frequencies and nsites of a minimal alignment"""
    record = parse_fasta("pair", two_record_fasta)

    assert record.identifier == "pair"
    assert record.alphabet == ("A", "C", "G", "T")
    assert record.length == 4
    assert record.nsites == 2
    np.testing.assert_allclose(record.frequency_matrix.frequencies[3], [0.5, 0.0, 0.0, 0.5])
    np.testing.assert_allclose(record.frequency_matrix.frequencies[0], [1.0, 0.0, 0.0, 0.0])
    assert record.stack_heights is None
    assert record.letter_heights is None


def test_fasta_rows_sum_to_one(test_data_dir):
    record = parse_fasta("sites", (test_data_dir / "sites.fa").read_text())

    np.testing.assert_allclose(record.frequency_matrix.frequencies.sum(axis=1), 1.0, atol=1e-9)


def test_fasta_length_mismatch_last_record():
    """Test that a short final record is rejected"""
    with pytest.raises(MalformedInput) as excinfo:
        parse_fasta("bad", ">a\nACGT\n>b\nACG\n")

    assert excinfo.value.entry.header == "b"
    assert excinfo.value.entry.sequence == "ACG"


def test_fasta_length_mismatch_middle_record():
    with pytest.raises(MalformedInput) as excinfo:
        parse_fasta("bad", ">a\nACGT\n>b\nACGTT\n>c\nACGT\n")

    assert excinfo.value.entry.header == "b"


def test_fasta_normalization():
    """Test uppercasing, whitespace removal and gap replacement"""
    record = parse_fasta("norm", ">x\nac-t\n>y\nA C G T\n")

    assert [entry.sequence for entry in record.entries] == ["ACNT", "ACGT"]
    assert record.alphabet == ("A", "C", "N", "T", "G")
    np.testing.assert_allclose(record.frequency_matrix.frequencies[2], [0.0, 0.0, 0.5, 0.0, 0.5])


def test_fasta_multiline_file(test_data_dir):
    """Test a FASTA file with wrapped sequences, lowercase and gaps"""
    record = parse_fasta("sites", (test_data_dir / "sites.fa").read_text())

    assert record.alphabet == ("A", "C", "G", "T", "N")
    assert record.length == 7
    assert record.nsites == 4
    assert record.entries[0].header == "site_1 chr1:100-107"
    assert record.entries[3].sequence == "ACGTCAT"

    frame = record.frequency_frame()
    assert frame.loc[3, "T"] == pytest.approx(0.75)
    assert frame.loc[3, "N"] == pytest.approx(0.25)
    assert frame.loc[4, "G"] == pytest.approx(0.75)
    assert frame.loc[4, "C"] == pytest.approx(0.25)


def test_fasta_sequence_before_header():
    with pytest.raises(MalformedInput):
        parse_fasta("bad", "ACGT\n>a\nACGT\n")


def test_fasta_empty_records_are_dropped():
    record = parse_fasta("gaps", ">a\n>b\nACGT\n\n>c\nAGGT\n")

    assert [entry.header for entry in record.entries] == ["b", "c"]
    assert record.nsites == 2


def test_fasta_without_records_is_degenerate():
    """Test that empty input parses but cannot be refreshed"""
    record = parse_fasta("empty", "\n\n")

    assert record.alphabet == ()
    assert record.length == 0
    assert record.nsites == 0

    with pytest.raises(DegenerateInput):
        parse_input(FastaInput("empty", ""))


def test_meme_uniform_default_nsites(uniform_meme):
    """Test the nsites fallback and the resulting negative stack height"""
    record = parse_meme(uniform_meme)

    assert record.identifier == "uniform"
    assert record.alphabet == ("A", "C", "G", "T")
    assert record.nsites == 20
    assert record.frequency_matrix.attributes["E"] == 0

    record.update_state()
    assert record.stack_heights[0] == pytest.approx(2 - 2 - 3 / 40)
    assert record.stack_heights[0] == pytest.approx(-0.075)


def test_meme_custom_default_nsites(uniform_meme):
    record = parse_meme(uniform_meme, create_parser_config(default_nsites=5))

    assert record.nsites == 5


def test_meme_full_document(test_data_dir):
    """Test metadata parsing of a complete MEME document"""
    record = parse_meme((test_data_dir / "gata.meme").read_text())

    assert record.identifier == "MA0035.4"
    assert record.metadata.alternate_name == "GATA1"
    assert record.metadata.version == "4"
    assert record.metadata.strands == ("+", "-")
    assert record.metadata.background_frequencies == {"A": 0.3, "C": 0.2, "G": 0.2, "T": 0.3}
    assert record.metadata.url == "http://jaspar.genereg.net/matrix/MA0035.4"
    assert record.nsites == 40
    assert record.frequency_matrix.attributes["w"] == 5
    assert record.length == 5

    record.update_state()
    assert record.stack_heights[1] == pytest.approx(2.0 - 3 / 80)
    np.testing.assert_allclose(record.letter_heights.sum(axis=1), record.stack_heights, atol=1e-12)


def test_meme_uniform_background(test_data_dir):
    record = parse_meme((test_data_dir / "uniform.meme").read_text())

    assert record.metadata.version == "5.4.1"
    assert record.metadata.background_frequencies == {"A": 0.25, "C": 0.25, "G": 0.25, "T": 0.25}
    assert record.metadata.alternate_name is None


def test_meme_matrix_before_alphabet():
    """Test that a matrix without a preceding alphabet is rejected"""
    text = "MOTIF m\nletter-probability matrix: nsites= 5\n0.5 0.5\n\nALPHABET= AC\n"

    with pytest.raises(MalformedInput, match="alphabet must precede probability matrix"):
        parse_meme(text)


def test_meme_without_matrix():
    with pytest.raises(MalformedInput):
        parse_meme("MEME version 4\n\nALPHABET= ACGT\n\nMOTIF m\n")


def test_meme_short_row():
    text = "ALPHABET= ACGT\nletter-probability matrix: nsites= 5\n0.5 0.5\n"

    with pytest.raises(MalformedInput):
        parse_meme(text)


def test_meme_row_sum_validation():
    text = "ALPHABET= ACGT\nletter-probability matrix: nsites= 5\n0.5 0.5 0.5 0.5\n"

    with pytest.raises(InvalidMatrix):
        parse_meme(text)

    record = parse_meme(text, create_parser_config(validate_rows=False))
    np.testing.assert_allclose(record.frequency_matrix.frequencies, [[0.5, 0.5, 0.5, 0.5]])


def test_meme_rows_truncated_to_alphabet():
    text = "ALPHABET= ACGT\nletter-probability matrix: nsites= 5\n0.25 0.25 0.25 0.25 9.0\n"

    record = parse_meme(text)

    np.testing.assert_allclose(record.frequency_matrix.frequencies, [[0.25, 0.25, 0.25, 0.25]])


def test_meme_rows_used_as_given():
    """Test that rows within tolerance are not renormalized"""
    text = "ALPHABET= ACG\nletter-probability matrix: nsites= 9\n0.333333 0.333333 0.333333\n"

    record = parse_meme(text)

    np.testing.assert_array_equal(record.frequency_matrix.frequencies, [[0.333333, 0.333333, 0.333333]])


def test_meme_empty_matrix_block():
    with pytest.raises(DegenerateInput):
        parse_meme("ALPHABET= ACGT\nMOTIF m\nletter-probability matrix: nsites= 5\n\n")


def test_meme_only_first_motif(test_data_dir):
    text = (test_data_dir / "gata.meme").read_text()
    second = "\nMOTIF second\nletter-probability matrix: nsites= 3\n0.25 0.25 0.25 0.25\n"

    record = parse_meme(text + second)

    assert record.identifier == "MA0035.4"
    assert record.length == 5


def test_parse_input_dispatch(two_record_fasta, uniform_meme):
    """Test dispatch over the tagged input types and the automatic refresh"""
    fasta_record = parse_input(FastaInput("pair", two_record_fasta))
    meme_record = parse_input(MemeInput(uniform_meme))

    assert fasta_record.is_refreshed
    assert meme_record.is_refreshed

    with pytest.raises(TypeError):
        parse_input(two_record_fasta)


def test_build_logo_fasta_layout(two_record_fasta):
    """Test the layout of a conserved and a mixed position"""
    logo = build_logo(FastaInput("pair", two_record_fasta))

    assert isinstance(logo, LogoData)
    assert len(logo.layout) == 4

    conserved = logo.layout[0]
    assert len(conserved) == 1
    assert conserved[0].symbol_index == 0
    assert conserved[0].lower == pytest.approx(0.75)
    assert conserved[0].upper == pytest.approx(2.0)

    mixed = logo.layout[3]
    assert [interval.symbol_index for interval in mixed] == [0, 3]
    assert mixed[0].lower == pytest.approx(1.75)
    assert mixed[1].upper == pytest.approx(2.0)


def test_build_logo_to_dict_is_json_ready(test_data_dir):
    display = create_display_config(logo_type="nucleotide", color_scheme="base_pairing")
    logo = build_logo(MemeInput((test_data_dir / "gata.meme").read_text()), display=display)

    document = json.loads(json.dumps(logo.to_dict()))

    assert document["record"]["identifier"] == "MA0035.4"
    assert document["max_entropy"] == pytest.approx(2.0)
    assert document["display"]["color_scheme"] == "base_pairing"
    assert len(document["layout"]) == 5
    assert document["record"]["metadata"]["strands"] == ["+", "-"]


def test_load_input(test_data_dir, temp_dir):
    fasta = load_input(test_data_dir / "sites.fa")
    assert isinstance(fasta, FastaInput)
    assert fasta.identifier == "sites"

    meme = load_input(test_data_dir / "gata.meme")
    assert isinstance(meme, MemeInput)

    odd = temp_dir / "motif.dat"
    odd.write_text((test_data_dir / "gata.meme").read_text())
    with pytest.raises(ValueError):
        load_input(odd)
    assert isinstance(load_input(odd, mode="meme"), MemeInput)

    with pytest.raises(FileNotFoundError):
        load_input(temp_dir / "missing.fa")


def test_cli_json_output(test_data_dir):
    """Test CLI output for a FASTA file"""
    result = run_cli([str(test_data_dir / "sites.fa")])
    assert result.returncode == 0, f"Command failed with stderr: {result.stderr}"

    output = json.loads(result.stdout)
    expected_keys = ["record", "max_entropy", "layout", "display"]
    for key in expected_keys:
        assert key in output, f"Missing key '{key}' in output"
    assert output["record"]["alphabet"] == ["A", "C", "G", "T", "N"]


def test_cli_tsv_output(test_data_dir):
    result = run_cli([str(test_data_dir / "gata.meme"), "--format", "tsv", "--type", "nucleotide"])
    assert result.returncode == 0, f"Command failed with stderr: {result.stderr}"

    header = result.stdout.splitlines()[0].split("\t")
    assert header == ["position", "symbol", "symbol_index", "lower", "upper", "height"]


def test_cli_reports_malformed_input(temp_dir):
    """Test that a parse failure is reported instead of crashing"""
    path = temp_dir / "ragged.fa"
    path.write_text(">a\nACGT\n>b\nACG\n")

    result = run_cli([str(path)])

    assert result.returncode == 1
    assert "ERROR" in result.stderr
    assert result.stdout == ""


@pytest.mark.parametrize("value", ["NA", "nan", "inf"])
def test_meme_unusable_nsites_falls_back_to_default(value):
    """Test that a non-numeric or non-finite nsites is treated as absent"""
    text = (
        "ALPHABET= ACGT\nMOTIF m\n"
        f"letter-probability matrix: alength= 4 w= 1 nsites= {value} E= 0.5\n"
        "0.25 0.25 0.25 0.25\n"
    )

    record = parse_meme(text)

    assert record.nsites == 20
    assert record.frequency_matrix.attributes["E"] == 0
    assert parse_input(MemeInput(text)).stack_heights[0] == pytest.approx(-0.075)


def test_cli_unusable_nsites(temp_dir):
    path = temp_dir / "motif.meme"
    path.write_text(
        "ALPHABET= ACGT\nMOTIF m\nletter-probability matrix: alength= 4 w= 1 nsites= NA E= 0\n0.25 0.25 0.25 0.25\n"
    )

    result = run_cli([str(path)])

    assert result.returncode == 0, f"Command failed with stderr: {result.stderr}"
    assert "Traceback" not in result.stderr
    assert json.loads(result.stdout)["record"]["attributes"]["nsites"] == 20


def test_fasta_lowercase_gap_symbol():
    """Test that a letter configured as the gap symbol matches uppercased input"""
    config = create_parser_config(gap_symbol="x")

    record = parse_fasta("gapped", ">a\nACxT\n>b\nacgt\n", config)

    assert config.gap_symbol == "X"
    assert [entry.sequence for entry in record.entries] == ["ACNT", "ACGT"]
