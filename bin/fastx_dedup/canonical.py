"""Strand canonicalisation of reads and read pairs.

A read and its reverse complement describe the same molecule. When
clustering is strand symmetric, each read (or mate pair) is replaced by
whichever of the two orientations sorts first, so both strands land in the
same cluster.
"""

from Bio.Seq import reverse_complement as _bio_reverse_complement


def reverse_complement(sequence):
    """Get the reverse complement of a DNA sequence.

    IUPAC ambiguity codes are complemented and case is preserved.
    """
    return _bio_reverse_complement(sequence)


def choose_canonical(original, flipped):
    """Choose the canonical candidate of an original/reverse-complement pair.

    Candidates may be anything with a total order, e.g. a sequence or a tuple
    of mate sequences. Ties keep the original.

    :param original: The candidate as read.
    :param flipped: The reverse complemented candidate.

    :return: The canonical candidate and whether it is the flipped one.
    :rtype: tuple[object, bool]
    """
    if flipped < original:
        return flipped, True
    return original, False


def canonicalize(sequence, strand_symmetric):
    """Return the canonical form of a single read sequence.

    :param sequence: ASCII read sequence.
    :param strand_symmetric: Consider the reverse strand when clustering.

    :return: The canonical sequence and whether it was reverse complemented.
    """
    if not strand_symmetric:
        return sequence, False
    return choose_canonical(sequence, reverse_complement(sequence))


def canonicalize_pair(seq_r1, seq_r2, strand_symmetric):
    """Return the canonical form of a mate pair.

    Both mates are flipped together or not at all, so the pair keeps its
    orientation. Pairs are ordered by mate 1 first, then mate 2.

    :return: The canonical mate sequences and whether they were flipped.
    :rtype: tuple[tuple[str, str], bool]
    """
    original = (seq_r1, seq_r2)
    if not strand_symmetric:
        return original, False
    flipped = (reverse_complement(seq_r1), reverse_complement(seq_r2))
    return choose_canonical(original, flipped)
