"""Deduplicate single or paired FASTA/FASTQ reads by sequence.

Reads are kept only the first time their (optionally strand canonicalised
and prefix truncated) sequence is seen. Which reads were merged, and how
large each cluster grew, can be reported as CSV.
"""

import os
import sys

from .clusters import Clusters  # noqa: ABS101
from .fastx import (  # noqa: ABS101
    FastxFormatError,
    fastx_type,
    FastxType,
    FastxWriter,
    paired_records,
    PairedInputError,
    read_records,
)
from .util import get_named_logger, positive_int, wf_parser  # noqa: ABS101

# bytes per record of a typical input, used to guess the number of clusters
BYTES_PER_RECORD = 400
PROGRESS_INTERVAL = 25000


def single(records, writer, clusters, strand_symmetric=False):
    """Deduplicate single reads, writing first occurrences to `writer`."""
    logger = get_named_logger("Dedup")
    for i, record in enumerate(records):
        if i and not i % PROGRESS_INTERVAL:
            logger.info(f"Processed {i} reads.")
        if clusters.insert_single(record, strand_symmetric):
            writer.write_record(record)


def pair(records, writer_r1, writer_r2, clusters, strand_symmetric=False):
    """Deduplicate mate pairs, writing first occurrences of both mates."""
    logger = get_named_logger("Dedup")
    for i, record in enumerate(records):
        if i and not i % PROGRESS_INTERVAL:
            logger.info(f"Processed {i} read pairs.")
        if clusters.insert_pair(record, strand_symmetric):
            writer_r1.write_record(record.r1)
            writer_r2.write_record(record.r2)


def check_input_types(inputs):
    """Detect the type shared by the inputs.

    :raises FastxFormatError: if the first input is not FASTA or FASTQ.
    :raises PairedInputError: if paired inputs differ in type.
    """
    fastx_type_r1 = fastx_type(inputs[0])
    if fastx_type_r1 is FastxType.Invalid:
        raise FastxFormatError("input file is not a valid FASTA or FASTQ file")
    if len(inputs) == 2:
        fastx_type_r2 = fastx_type(inputs[1])
        if fastx_type_r2 is not fastx_type_r1:
            raise PairedInputError(
                "paired inputs have different file types "
                f"r1: {fastx_type_r1}, r2: {fastx_type_r2}")
    return fastx_type_r1


def run_dedup(args):
    """Deduplicate the inputs described by `args`.

    :return: the filled cluster registry.
    :rtype: Clusters
    """
    logger = get_named_logger("Dedup")
    inputs, outputs = args.inputs, args.deduped_outputs
    if len(inputs) != len(outputs):
        raise PairedInputError("must have the same number of inputs and outputs")
    if len(inputs) > 2:
        raise PairedInputError("at most two (paired) inputs may be given")

    input_type = check_input_types(inputs)
    capacity = os.path.getsize(inputs[0]) // BYTES_PER_RECORD
    paired = len(inputs) == 2
    logger.info(
        f"Deduplicating {'paired' if paired else 'single'} {input_type} input, "
        f"reverse complement: {args.reverse_complement}, "
        f"prefix length: {args.prefix_length}.")

    with Clusters.from_file(
            args.cluster_output, args.prefix_length, capacity) as clusters:
        if paired:
            records = paired_records(
                read_records(inputs[0]), read_records(inputs[1]))
            with (
                FastxWriter(outputs[0]) as writer_r1,
                FastxWriter(outputs[1]) as writer_r2,
            ):
                pair(
                    records, writer_r1, writer_r2, clusters,
                    args.reverse_complement)
        else:
            with FastxWriter(outputs[0]) as writer:
                single(
                    read_records(inputs[0]), writer, clusters,
                    args.reverse_complement)

    if args.cluster_size_output is not None:
        with open(args.cluster_size_output, "w", newline="") as fh:
            clusters.write_sizes(fh)
    if args.summary_output is not None:
        clusters.summary().to_csv(args.summary_output, index=False)
    logger.info(
        f"Kept {clusters.unique_records()} of {clusters.total_records()} "
        "records.")
    return clusters


def main(args):
    """Run the entry point."""
    logger = get_named_logger("Dedup")
    try:
        clusters = run_dedup(args)
    except (FastxFormatError, PairedInputError) as e:
        logger.error(str(e))
        sys.exit(1)
    sys.stdout.write(f"duplicates:   {clusters.duplicate_records():>16}\n")
    sys.stdout.write(f"unique reads: {clusters.unique_records():>16}\n")
    sys.stdout.write(f"total reads:  {clusters.total_records():>16}\n")


def argparser():
    """Argument parser for entrypoint."""
    parser = wf_parser("deduplicate")
    parser.add_argument(
        "-i", "--inputs", required=True, nargs="+", action="extend",
        help="Input FASTA/FASTQ, optionally gzipped. Give two for paired reads.",
    )
    parser.add_argument(
        "-o", "--deduped-outputs", required=True, nargs="+", action="extend",
        help="Output deduplicated FASTA/FASTQ, one per input.",
    )
    parser.add_argument(
        "-c", "--cluster-output", default=None,
        help="Output CSV of representative read id and read id per read.",
    )
    parser.add_argument(
        "--cluster-size-output", default=None,
        help="Output CSV of representative read id and cluster size.",
    )
    parser.add_argument(
        "--summary-output", default=None,
        help="Output CSV of duplicate, unique and total read counts.",
    )
    parser.add_argument(
        "-l", "--prefix-length", type=positive_int, default=None,
        help="Only consider this many leading bases of each read.",
    )
    parser.add_argument(
        "-r", "--reverse-complement", action="store_true", default=False,
        help="Cluster reads with their reverse complement too.",
    )
    return parser
