"""Tests for FASTA/FASTQ handling."""

import gzip
from types import SimpleNamespace

import pytest
from fastx_dedup.fastx import (
    check_record,
    FastxFormatError,
    FastxRecord,
    fastx_type,
    FastxType,
    FastxWriter,
    paired_records,
    PairedInputError,
    PairedRecord,
    read_records,
)


FASTA = ">id_a\nACGT\n>id_b desc\nTTTT\n"
FASTQ = "@id_a\nACGT\n+\nIIII\n@id_b desc\nTTTT\n+\nIIII\n"


def read(name, sequence="ACGT", quality=None):
    """Make a minimal record."""
    return SimpleNamespace(name=name, sequence=sequence, quality=quality)


@pytest.mark.parametrize(
    "filename, content, expected",
    [
        ("reads.fasta", FASTA, FastxType.Fasta),
        ("reads.fastq", FASTQ, FastxType.Fastq),
        ("reads.txt", "hello\n", FastxType.Invalid),
        ("reads.fastq", "", FastxType.Invalid),
    ],
)
def test_fastx_type(tmp_path, filename, content, expected):
    """Test detection by first character."""
    path = tmp_path / filename
    path.write_text(content)
    assert fastx_type(path) is expected


def test_fastx_type_gzipped(tmp_path):
    """Gzipped files are inspected after decompression."""
    path = tmp_path / "reads.fastq.gz"
    with gzip.open(path, "wt") as fh:
        fh.write(FASTQ)
    assert fastx_type(path) is FastxType.Fastq


def test_fastx_type_str():
    """Types print in lower case."""
    assert str(FastxType.Fasta) == "fasta"
    assert str(FastxType.Fastq) == "fastq"
    assert str(FastxType.Invalid) == "invalid"


@pytest.mark.parametrize(
    "record, message",
    [
        (read(""), "Expecting id"),
        (read("id_a", "ACGÅ"), "Non-ascii character found in sequence"),
        (read("id_a", "ACGT", "IIIÅ"), "Non-ascii character found in qualities"),
        (read("id_a", "ACGT", "III"), "Unequal length"),
        (read("id_a", "AC\x00T"), "Control character found in sequence"),
        (read("id_a", "ACGT", "II\tI"), "Control character found in qualities"),
    ],
)
def test_check_record_invalid(record, message):
    """Invalid records raise."""
    with pytest.raises(FastxFormatError, match=message):
        check_record(record)


@pytest.mark.parametrize(
    "record", [read("id_a"), read("id_a", "ACGT", "IIII"), read("id_a", "")]
)
def test_check_record_valid(record):
    """Valid records pass silently."""
    check_record(record)


@pytest.mark.parametrize("gzipped", [False, True])
def test_read_records(tmp_path, gzipped):
    """Records are read from plain and gzipped files."""
    path = tmp_path / ("reads.fastq.gz" if gzipped else "reads.fastq")
    opener = gzip.open if gzipped else open
    with opener(path, "wt") as fh:
        fh.write(FASTQ)
    records = list(read_records(path))
    assert [r.name for r in records] == ["id_a", "id_b"]
    assert [r.sequence for r in records] == ["ACGT", "TTTT"]
    assert records[1].comment == "desc"


@pytest.mark.parametrize(
    "name_r1, name_r2, expected",
    [
        ("id_a", "id_a", "id_a"),
        ("id_a/1", "id_a/2", "id_a"),
        ("id_a/1", "id_a", "id_a"),
    ],
)
def test_paired_record_id(name_r1, name_r2, expected):
    """Mates share an id, ignoring /1 and /2."""
    assert PairedRecord(read(name_r1), read(name_r2)).id() == expected


def test_paired_record_mismatched_ids():
    """Mates with different ids are refused."""
    with pytest.raises(PairedInputError, match="different ids"):
        PairedRecord(read("id_a"), read("id_b"))


def test_paired_records():
    """Mates are zipped in order."""
    pairs = list(paired_records(
        [read("id_a", "AA"), read("id_b", "CC")],
        [read("id_a", "GG"), read("id_b", "TT")],
    ))
    assert [p.id() for p in pairs] == ["id_a", "id_b"]
    assert [(p.r1.sequence, p.r2.sequence) for p in pairs] == [
        ("AA", "GG"), ("CC", "TT")]


@pytest.mark.parametrize("n_r1, n_r2", [(2, 1), (1, 2), (0, 1)])
def test_paired_records_uneven(n_r1, n_r2):
    """Inputs of different length raise once the shorter runs out."""
    records_r1 = [read(f"id_{i}") for i in range(n_r1)]
    records_r2 = [read(f"id_{i}") for i in range(n_r2)]
    with pytest.raises(PairedInputError, match="different numbers of records"):
        list(paired_records(records_r1, records_r2))


@pytest.mark.parametrize("filename, content", [
    ("reads.fasta", FASTA), ("reads.fastq", FASTQ)])
def test_writer(tmp_path, filename, content):
    """Records are written back in their own format."""
    path = tmp_path / filename
    path.write_text(content)
    output = tmp_path / f"out_{filename}"
    with FastxWriter(output) as writer:
        for record in read_records(path):
            writer.write_record(record)
    assert output.read_text() == content


@pytest.mark.parametrize(
    "content",
    [
        # quality line shorter than the sequence
        "@a\nACGT\n+\nII\n@b\nTTTT\n+\nIIII\n@c\nGGGG\n+\nIIII\n",
        # quality line longer than the sequence
        "@a\nACGT\n+\nIIIIII\n@b\nTTTT\n+\nIIII\n",
        # missing quality section
        "@a\nACGT\n",
    ],
)
def test_read_records_bad_qualities(tmp_path, content):
    """Malformed FASTQ stops reading instead of swallowing the next record."""
    path = tmp_path / "reads.fastq"
    path.write_text(content)
    with pytest.raises(FastxFormatError, match="Malformed record"):
        list(read_records(path))


def test_read_records_undecodable(tmp_path):
    """Bytes that are not text are a format error."""
    path = tmp_path / "reads.fasta"
    path.write_bytes(b">a\nAC\xffT\n")
    assert fastx_type(path) is FastxType.Fasta
    with pytest.raises(FastxFormatError, match="Malformed record"):
        list(read_records(path))


def test_read_records_control_character(tmp_path):
    """NUL bytes in a sequence are refused."""
    path = tmp_path / "reads.fasta"
    path.write_bytes(b">a\nAC\x00T\n")
    with pytest.raises(FastxFormatError, match="Control character"):
        list(read_records(path))


def test_read_records_missing_id(tmp_path):
    """A header without an id is refused."""
    path = tmp_path / "reads.fasta"
    path.write_text(">\nACGT\n")
    with pytest.raises(FastxFormatError, match="Expecting id"):
        list(read_records(path))


def test_read_records_invalid_type(tmp_path):
    """Files that are neither FASTA nor FASTQ are refused."""
    path = tmp_path / "reads.txt"
    path.write_text("ACGT\n")
    with pytest.raises(FastxFormatError, match="not a valid FASTA or FASTQ"):
        list(read_records(path))


def test_read_records_multiline_fasta(tmp_path):
    """Wrapped FASTA sequences are joined."""
    path = tmp_path / "reads.fasta"
    path.write_text(">a some comment\nACGT\nTTGA\n>b\nCC\n")
    records = list(read_records(path))
    assert [(r.name, r.comment, r.sequence) for r in records] == [
        ("a", "some comment", "ACGTTTGA"), ("b", None, "CC")]
    assert str(records[0]) == ">a some comment\nACGTTTGA"


@pytest.mark.parametrize(
    "title, quality, expected",
    [
        ("id_a", None, ">id_a\nACGT"),
        ("id_a 1:N:0", None, ">id_a 1:N:0\nACGT"),
        ("id_a", "IIII", "@id_a\nACGT\n+\nIIII"),
        ("id_a x y", "IIII", "@id_a x y\nACGT\n+\nIIII"),
    ],
)
def test_fastx_record_str(title, quality, expected):
    """Records format as they were read."""
    assert str(FastxRecord.from_title(title, "ACGT", quality)) == expected
