"""Deterministic 64-bit fingerprints of canonical sequences.

Fingerprints must be identical between runs and between processes, so the
built-in ``hash`` (salted per interpreter) cannot be used. A keyed BLAKE2b
digest with fixed keys is used instead.
"""

import hashlib


DIGEST_SIZE = 8
HASH_KEY = b"fastx-dedup"
HASH_PERSON = b"fxdedup:seq"
# sequences are validated printable ASCII, a NUL byte never occurs in one
MATE_SEPARATOR = b"\x00"


def truncate(sequence, prefix_length=None):
    """Return the leading `prefix_length` bases, or everything if None."""
    if prefix_length is None:
        return sequence
    return sequence[:min(prefix_length, len(sequence))]


def _new_hasher():
    return hashlib.blake2b(
        digest_size=DIGEST_SIZE, key=HASH_KEY, person=HASH_PERSON)


def _digest(hasher):
    return int.from_bytes(hasher.digest(), "little")


def fingerprint(sequence, prefix_length=None):
    """Fingerprint a single canonical sequence.

    :param sequence: canonical sequence.
    :param prefix_length: only consider this many leading bases.

    :return: unsigned 64-bit integer.
    """
    hasher = _new_hasher()
    hasher.update(truncate(sequence, prefix_length).encode("ascii"))
    return _digest(hasher)


def fingerprint_pair(seq_r1, seq_r2, prefix_length=None):
    """Fingerprint a canonical mate pair.

    Each mate is truncated independently, mate 1 is hashed, then the
    separator, then mate 2.
    """
    hasher = _new_hasher()
    hasher.update(truncate(seq_r1, prefix_length).encode("ascii"))
    hasher.update(MATE_SEPARATOR)
    hasher.update(truncate(seq_r2, prefix_length).encode("ascii"))
    return _digest(hasher)
