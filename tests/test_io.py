from __future__ import annotations

import gzip
from pathlib import Path

import numpy as np
import pytest

from rtmap.io import (
    SampleFormatError,
    SeedFormatError,
    iter_seed_hits,
    read_samples,
    read_seed_hits,
    write_samples,
    write_seed_hits,
)
from rtmap_core import SeedHit


@pytest.mark.parametrize("name", ["hits.tsv", "hits.csv", "hits.jsonl", "hits.tsv.gz", "hits.jsonl.gz"])
def test_seed_tables_round_trip(tmp_path: Path, example_hits: list[SeedHit], name: str) -> None:
    destination = tmp_path / name

    write_seed_hits(example_hits, destination)

    assert read_seed_hits(destination) == example_hits


def test_whitespace_table_with_comments_and_header(tmp_path: Path) -> None:
    source = tmp_path / "hits.txt"
    source.write_text(
        "# read 42 vs chr1\n"
        "ref_start ref_end evt_start evt_end length\n"
        "100 110 5 6 10\n"
        "\n"
        "111   121 6 7 10   \n",
        encoding="utf8",
    )

    hits = list(iter_seed_hits(source))

    assert hits == [SeedHit(100, 110, 5, 6, 10), SeedHit(111, 121, 6, 7, 10)]


def test_tsv_without_header_is_accepted(tmp_path: Path) -> None:
    source = tmp_path / "hits.tsv"
    source.write_text("500\t510\t50\t51\t10\n", encoding="utf8")

    assert read_seed_hits(source) == [SeedHit(500, 510, 50, 51, 10)]


def test_malformed_seed_row_reports_line(tmp_path: Path) -> None:
    source = tmp_path / "hits.tsv"
    source.write_text(
        "ref_start\tref_end\tevt_start\tevt_end\tlength\n"
        "100\t110\t5\t6\t10\n"
        "111\t121\t6\n",
        encoding="utf8",
    )

    with pytest.raises(SeedFormatError) as excinfo:
        read_seed_hits(source)

    assert excinfo.value.line == 3
    assert "5 fields" in excinfo.value.reason
    assert str(excinfo.value).startswith(f"{source}:3:")


def test_non_numeric_seed_field_is_a_format_error(tmp_path: Path) -> None:
    source = tmp_path / "hits.csv"
    source.write_text("100,110,5,six,10\n", encoding="utf8")

    with pytest.raises(SeedFormatError) as excinfo:
        read_seed_hits(source)

    assert excinfo.value.line == 1


@pytest.mark.parametrize(
    "line, reason",
    [
        ("{not json}", "invalid JSON"),
        ("[1, 2, 3, 4, 5]", "expected a JSON object"),
        ('{"ref_start": 1, "ref_end": 2}', "missing"),
    ],
)
def test_jsonl_errors(tmp_path: Path, line: str, reason: str) -> None:
    source = tmp_path / "hits.jsonl"
    source.write_text('{"ref_start": 1, "ref_end": 5, "evt_start": 0, "evt_end": 1, "length": 4}\n' + line + "\n", encoding="utf8")

    with pytest.raises(SeedFormatError) as excinfo:
        read_seed_hits(source)

    assert excinfo.value.line == 2
    assert reason in excinfo.value.reason


def test_text_samples_accept_commas_comments_and_gzip(tmp_path: Path) -> None:
    plain = tmp_path / "signal.txt"
    plain.write_text("# raw current\n88.5, 90.25\n\n91 92.75  # trailing\n", encoding="utf8")
    compressed = tmp_path / "signal.txt.gz"
    with gzip.open(compressed, "wt", encoding="utf8") as handle:
        handle.write("88.5\n90.25\n91\n92.75\n")

    expected = [88.5, 90.25, 91.0, 92.75]
    np.testing.assert_allclose(read_samples(plain), expected)
    np.testing.assert_allclose(read_samples(compressed), expected)


def test_samples_written_as_text_and_npy(tmp_path: Path) -> None:
    values = np.array([101.125, 99.5, -3.0, 0.000001])

    write_samples(values, tmp_path / "out.txt")
    write_samples(values, tmp_path / "out.npy")

    assert (tmp_path / "out.txt").read_text(encoding="utf8").splitlines()[0] == "101.125000"
    np.testing.assert_allclose(read_samples(tmp_path / "out.txt"), values, atol=1e-6)
    np.testing.assert_array_equal(read_samples(tmp_path / "out.npy"), values)


def test_invalid_samples_raise_format_error(tmp_path: Path) -> None:
    source = tmp_path / "signal.txt"
    source.write_text("1.0\n2.0 abc\n", encoding="utf8")

    with pytest.raises(SampleFormatError, match=r":2: invalid sample 'abc'"):
        read_samples(source)

    matrix = tmp_path / "matrix.npy"
    np.save(matrix, np.zeros((2, 2)))
    with pytest.raises(SampleFormatError):
        read_samples(matrix)


def test_undecodable_seed_line_reports_its_number(tmp_path: Path) -> None:
    source = tmp_path / "hits.tsv.gz"
    with gzip.open(source, "wb") as handle:
        handle.write(b"100\t110\t5\t6\t10\n\xff\xfe\t1\n")

    with pytest.raises(SeedFormatError) as excinfo:
        read_seed_hits(source)

    assert excinfo.value.line == 2
    assert "not UTF-8 text" in excinfo.value.reason


def test_non_numeric_npy_is_a_format_error(tmp_path: Path) -> None:
    labels = tmp_path / "labels.npy"
    np.save(labels, np.array(["a", "b"]))

    with pytest.raises(SampleFormatError, match="not numeric"):
        read_samples(labels)
