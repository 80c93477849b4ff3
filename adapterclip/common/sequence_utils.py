"""
This module contains some functions to compare, complement
and validate nucleotide sequences
"""
import re
from typing import Optional

NO_CALL_BASES = frozenset("Nn.")

_COMPLEMENT = str.maketrans("ACGTacgt", "TGCAtgca")

_INVALID_ADAPTER_BASES = re.compile("[^ACGTN]")


def is_no_call(base: str) -> bool:
    """
    Checks if a base is a wildcard (no-call) base that matches any other base.

    Args:
        base: A single base.

    Returns:
        True if the base is a no-call (N, n or .), False otherwise.
    """
    return base in NO_CALL_BASES


def bases_equal(lhs: str, rhs: str) -> bool:
    """
    Compares two bases ignoring their case.

    Args:
        lhs: First base.
        rhs: Second base.

    Returns:
        True if both bases denote the same nucleotide.
    """
    return lhs.upper() == rhs.upper()


def complement(sequence: str) -> str:
    """
    Complements a sequence base by base keeping the case.
    Bases other than A, C, G and T (e.g. N) are left untouched.

    Args:
        sequence: The sequence to complement.

    Returns:
        The complemented sequence.
    """
    return sequence.translate(_COMPLEMENT)


def reverse_complement(sequence: Optional[str]) -> Optional[str]:
    """
    Returns a reverse complemented copy of a sequence.

    Args:
        sequence: The sequence to reverse complement (None is allowed).

    Returns:
        The reverse complement of the sequence or None if the sequence was None.
    """
    if sequence is None:
        return None
    return complement(sequence)[::-1]


def validate_adapter_sequence(sequence: str) -> str:
    """
    Validates an adapter sequence and returns it in upper case.

    Args:
        sequence: The adapter sequence.

    Returns:
        The adapter sequence in upper case.

    Raises:
        ValueError: If the sequence is empty or contains bases other than A, C, G, T and N.
    """
    if not sequence:
        raise ValueError("Adapter sequence cannot be empty")
    sequence = sequence.upper()
    if _INVALID_ADAPTER_BASES.search(sequence) is not None:
        raise ValueError(f"Invalid adapter sequence {sequence}, only A, C, G, T and N are allowed")
    return sequence
