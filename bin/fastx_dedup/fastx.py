"""Reading, pairing, validating and writing FASTA/FASTQ records."""

import enum
import gzip

from Bio.SeqIO.FastaIO import SimpleFastaParser
from Bio.SeqIO.QualityIO import FastqGeneralIterator


class FastxFormatError(ValueError):
    """Raised for malformed records or unrecognised input files."""


class PairedInputError(ValueError):
    """Raised when two paired inputs cannot be synchronized."""


class FastxType(enum.Enum):
    """Enumeration of detectable input file types."""

    Fasta = "fasta"
    Fastq = "fastq"
    Invalid = "invalid"

    def __str__(self):
        """Lower case name, as used in messages."""
        return self.value


class FastxRecord:
    """A single FASTA or FASTQ read."""

    __slots__ = ("name", "comment", "sequence", "quality")

    def __init__(self, name, sequence, quality=None, comment=None):
        """Initialize a record, `quality` is None for FASTA."""
        self.name = name
        self.comment = comment
        self.sequence = sequence
        self.quality = quality

    @classmethod
    def from_title(cls, title, sequence, quality=None):
        """Create a record from a header line without its leading marker."""
        name, *comment = title.split(None, 1) or [""]
        return cls(name, sequence, quality, comment[0] if comment else None)

    def __str__(self):
        """Format the record as FASTA or FASTQ, without a final newline."""
        header = self.name if self.comment is None else f"{self.name} {self.comment}"
        if self.quality is None:
            return f">{header}\n{self.sequence}"
        return f"@{header}\n{self.sequence}\n+\n{self.quality}"


def open_binary(path):
    """Open a plain or gzipped file for reading bytes."""
    if str(path).endswith(".gz"):
        return gzip.open(path, "rb")
    return open(path, "rb")


def open_text(path):
    """Open a plain or gzipped text file for reading."""
    if str(path).endswith(".gz"):
        return gzip.open(path, "rt", encoding="utf-8")
    return open(path, "r", encoding="utf-8")


def fastx_type(path):
    """Detect the type of a FASTA/FASTQ file from its first byte."""
    with open_binary(path) as fh:
        first = fh.read(1)
    if first == b">":
        return FastxType.Fasta
    if first == b"@":
        return FastxType.Fastq
    return FastxType.Invalid


def _check_text(text, what, name):
    if not text.isascii():
        raise FastxFormatError(f"Non-ascii character found in {what} of '{name}'.")
    if not text.isprintable():
        raise FastxFormatError(f"Control character found in {what} of '{name}'.")


def check_record(record):
    """Check a record is usable, raising FastxFormatError if not.

    :param record: object with `name`, `sequence` and `quality` attributes,
        `quality` being None for FASTA records.
    """
    if not record.name:
        raise FastxFormatError("Expecting id for FastX record.")
    _check_text(record.sequence, "sequence", record.name)
    if record.quality is not None:
        _check_text(record.quality, "qualities", record.name)
        if len(record.quality) != len(record.sequence):
            raise FastxFormatError(
                f"Unequal length of sequence and qualities for '{record.name}'.")


def _parse(handle, input_type):
    if input_type is FastxType.Fasta:
        for title, sequence in SimpleFastaParser(handle):
            yield FastxRecord.from_title(title, sequence)
    else:
        for title, sequence, quality in FastqGeneralIterator(handle):
            yield FastxRecord.from_title(title, sequence, quality)


def read_records(path):
    """Yield validated records from a FASTA/FASTQ file, gzipped or not.

    :raises FastxFormatError: on the first malformed record.
    """
    input_type = fastx_type(path)
    if input_type is FastxType.Invalid:
        raise FastxFormatError(f"'{path}' is not a valid FASTA or FASTQ file")
    with open_text(path) as fh:
        try:
            for record in _parse(fh, input_type):
                check_record(record)
                yield record
        except FastxFormatError:
            raise
        except ValueError as e:
            # parser errors, including undecodable bytes
            raise FastxFormatError(f"Malformed record in '{path}': {e}") from e


def _strip_mate_suffix(read_id):
    if read_id[-2:] in ("/1", "/2"):
        return read_id[:-2]
    return read_id


class PairedRecord:
    """A synchronized pair of mate records."""

    def __init__(self, r1, r2):
        """Pair two mates, which must share a read id.

        A trailing `/1` or `/2` on the mate ids is ignored.
        """
        read_id = _strip_mate_suffix(r1.name)
        if read_id != _strip_mate_suffix(r2.name):
            raise PairedInputError(
                f"paired records have different ids r1: {r1.name}, "
                f"r2: {r2.name}")
        self.r1 = r1
        self.r2 = r2
        self._id = read_id

    def id(self):
        """Read id of the pair, as written in cluster reports."""
        return self._id


def paired_records(records_r1, records_r2):
    """Zip two record iterables into PairedRecords.

    :raises PairedInputError: if one input runs out before the other.
    """
    records_r1 = iter(records_r1)
    records_r2 = iter(records_r2)
    while True:
        r1 = next(records_r1, None)
        r2 = next(records_r2, None)
        if r1 is None and r2 is None:
            return
        if r1 is None or r2 is None:
            raise PairedInputError(
                "paired inputs have different numbers of records")
        yield PairedRecord(r1, r2)


class FastxWriter:
    """Write records, unchanged, in the format they were read."""

    def __init__(self, path):
        """Open the output file."""
        self.path = path
        self._handle = open(path, "w")

    def write_record(self, record):
        """Write a single record."""
        self._handle.write(f"{str(record)}\n")

    def close(self):
        """Flush and close the output."""
        self._handle.close()

    def __enter__(self):
        """Enter the context."""
        return self

    def __exit__(self, *args):
        """Exit the context."""
        self.close()
