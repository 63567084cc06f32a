"""Registry of read clusters keyed by sequence fingerprint.

Every inserted read either founds a new cluster, becoming its representative,
or joins the existing cluster with the same fingerprint. Insertions are
optionally streamed to a membership CSV as they happen, and the cluster sizes
can be written once the input is exhausted.
"""

import csv

import pandas as pd

from .canonical import canonicalize, canonicalize_pair  # noqa: ABS101
from .fingerprint import fingerprint, fingerprint_pair  # noqa: ABS101
from .util import get_named_logger  # noqa: ABS101


MEMBERSHIP_HEADER = ("representative read id", "read id")
SIZES_HEADER = ("representative read id", "cluster size")
REVCOMP_MARKER = " (rc)"


def csv_writer(handle):
    """Create a CSV writer with unix line endings."""
    return csv.writer(handle, lineterminator="\n")


class Cluster:
    """A representative read id and the number of reads sharing its content."""

    __slots__ = ("representative_id", "size")

    def __init__(self, representative_id, size=1):
        """Initialize a cluster."""
        self.representative_id = representative_id
        self.size = size


class Clusters:
    """Cluster registry for a single deduplication run."""

    def __init__(self, cluster_output=None, prefix_length=None, capacity=0):
        """Initialize an empty registry.

        :param cluster_output: writable text handle for the membership CSV,
            or None to skip membership reporting.
        :param prefix_length: only the leading bases of each (canonical)
            sequence are fingerprinted. None uses the whole sequence.
        :param capacity: expected number of clusters. Python containers
            grow on demand, so this is informational only.
        """
        self.logger = get_named_logger("Clusters")
        self.by_fingerprint = dict()
        self.first_seen_order = list()
        self.prefix_length = prefix_length
        self.capacity = capacity
        self._total_records = 0
        self._owned_handle = None
        self._cluster_csv = None
        if cluster_output is not None:
            self._cluster_csv = csv_writer(cluster_output)
            self._cluster_csv.writerow(MEMBERSHIP_HEADER)
        self.logger.debug(
            f"Registry created, prefix length: {prefix_length}, "
            f"expected clusters: {capacity}.")

    @classmethod
    def from_file(cls, cluster_output_path=None, prefix_length=None, capacity=0):
        """Create a registry writing its membership CSV to a path.

        The file is owned by the registry and closed by `close()`.
        """
        handle = None
        if cluster_output_path is not None:
            handle = open(cluster_output_path, "w", newline="")
        clusters = cls(handle, prefix_length=prefix_length, capacity=capacity)
        clusters._owned_handle = handle
        return clusters

    def insert_record(self, seq_hash, read_id, is_revcomp=False):
        """Add a read to the cluster with the given fingerprint.

        :param seq_hash: fingerprint of the read's canonical content.
        :param read_id: id of the read.
        :param is_revcomp: the read's canonical form is its reverse
            complement; its id is marked in the membership CSV if it joins
            an existing cluster.

        :return: True if the read founded a new cluster.
        """
        self._total_records += 1
        cluster = self.by_fingerprint.get(seq_hash)
        if cluster is None:
            self.by_fingerprint[seq_hash] = Cluster(read_id)
            self.first_seen_order.append(seq_hash)
            if self._cluster_csv is not None:
                self._cluster_csv.writerow((read_id, read_id))
            return True

        cluster.size += 1
        if self._cluster_csv is not None:
            member_id = f"{read_id}{REVCOMP_MARKER}" if is_revcomp else read_id
            self._cluster_csv.writerow((cluster.representative_id, member_id))
        return False

    def insert_single(self, record, strand_symmetric=False):
        """Insert a single read.

        :param record: object with `name` and `sequence` attributes.
        :param strand_symmetric: cluster a read with its reverse complement.

        :return: True if the read should be kept.
        """
        canonical_seq, is_revcomp = canonicalize(
            record.sequence, strand_symmetric)
        seq_hash = fingerprint(canonical_seq, self.prefix_length)
        return self.insert_record(seq_hash, record.name, is_revcomp)

    def insert_pair(self, record, strand_symmetric=False):
        """Insert a pair of mates.

        :param record: a `fastx.PairedRecord`.
        :param strand_symmetric: cluster a pair with its reverse complemented
            pair.

        :return: True if the pair should be kept.
        """
        (canon_r1, canon_r2), is_revcomp = canonicalize_pair(
            record.r1.sequence, record.r2.sequence, strand_symmetric)
        seq_hash = fingerprint_pair(canon_r1, canon_r2, self.prefix_length)
        return self.insert_record(seq_hash, record.id(), is_revcomp)

    def unique_records(self):
        """Count the clusters."""
        return len(self.by_fingerprint)

    def duplicate_records(self):
        """Count reads that joined an existing cluster."""
        return self._total_records - self.unique_records()

    def total_records(self):
        """Count all inserted reads."""
        return self._total_records

    def write_sizes(self, handle):
        """Write cluster sizes as CSV, in the order clusters were created.

        :param handle: writable text handle.
        """
        writer = csv_writer(handle)
        writer.writerow(SIZES_HEADER)
        for seq_hash in self.first_seen_order:
            cluster = self.by_fingerprint[seq_hash]
            writer.writerow((cluster.representative_id, cluster.size))

    def summary(self):
        """Summarise the run counters as a single row dataframe."""
        return pd.DataFrame(
            [(
                self.duplicate_records(),
                self.unique_records(),
                self.total_records(),
            )],
            columns=["Duplicates", "Unique reads", "Total reads"],
        )

    def close(self):
        """Close the membership CSV, if the registry opened it."""
        if self._owned_handle is not None:
            self._owned_handle.close()
            self._owned_handle = None

    def __enter__(self):
        """Enter the context."""
        return self

    def __exit__(self, *args):
        """Exit the context."""
        self.close()
