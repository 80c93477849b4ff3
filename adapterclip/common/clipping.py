"""
This module contains the functions to find adapter sequences in reads
and to decide where single and paired reads must be clipped.
The functions here do not modify the reads, they return the positions
to clip (1-based) and the adapter pair that was found.
"""
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

import pysam

from adapterclip.common.adapters import AdapterPair, MateRole
from adapterclip.common.sam_utils import get_mate_role, get_read_bases, get_read_length
from adapterclip.common.sequence_utils import bases_equal, is_no_call

# Minimum number of contiguous bases to match against in a single read
MIN_MATCH_BASES = 12
# Minimum number of contiguous bases to match against in a paired end read
MIN_MATCH_PE_BASES = 6
# Maximum error rate when matching read bases to the adapter
MAX_ERROR_RATE = 0.10
# Maximum error rate when matching paired end read bases to the adapter
MAX_PE_ERROR_RATE = 0.10


@dataclass(frozen=True)
class ClippingParameters:
    """
    Thresholds used when matching reads to adapter sequences.
    """

    min_match_bases: int = MIN_MATCH_BASES
    max_error_rate: float = MAX_ERROR_RATE

    def __post_init__(self) -> None:
        if self.min_match_bases < 1:
            raise ValueError(f"The minimum number of matching bases must be positive, got {self.min_match_bases}")
        if not 0.0 <= self.max_error_rate <= 1.0:
            raise ValueError(f"The maximum error rate must be between 0 and 1, got {self.max_error_rate}")


SINGLE_END_PARAMETERS = ClippingParameters(MIN_MATCH_BASES, MAX_ERROR_RATE)
PAIRED_END_PARAMETERS = ClippingParameters(MIN_MATCH_PE_BASES, MAX_PE_ERROR_RATE)


@dataclass(frozen=True)
class AdapterMatch:
    """
    An adapter found in a single read and the 1-based position where it starts.
    """

    adapter: AdapterPair
    position: int


@dataclass(frozen=True)
class PairedClip:
    """
    An adapter found in a pair of reads and the 1-based positions
    where each read must be clipped (None if the read is not clipped).
    """

    adapter: AdapterPair
    read1_position: Optional[int]
    read2_position: Optional[int]


def find_clip_index(
    read: Optional[str],
    adapter: str,
    min_match_bases: int,
    max_error_rate: float,
) -> Optional[int]:
    """
    Finds the index of the adapter sequence in the read requiring at least
    min_match_bases of pairwise alignment with a maximum number of mismatches
    given by max_error_rate.

    Start positions are tried from the end of the read backwards and the first
    one within the mismatch budget is returned, so the result is the largest
    valid index. For each start the adapter is compared over
    min(len(read) - start, len(adapter)) bases and up to
    floor(length * max_error_rate) mismatches are allowed.
    No-call bases in the adapter match anything.

    Args:
        read: The bases of the read in sequencing order (None is allowed).
        adapter: The adapter sequence in read order.
        min_match_bases: Minimum number of bases of overlap.
        max_error_rate: Maximum fraction of mismatching bases.

    Returns:
        The 0-based index where the adapter starts or None if not found.
    """
    if read is None or len(read) < min_match_bases:
        return None

    read_length = len(read)
    for start in range(read_length - min_match_bases, -1, -1):
        length = min(read_length - start, len(adapter))
        mismatches_allowed = int(length * max_error_rate)
        mismatches = 0
        for i in range(length):
            if is_no_call(adapter[i]) or bases_equal(adapter[i], read[start + i]):
                continue
            mismatches += 1
            if mismatches > mismatches_allowed:
                break
        else:
            return start

    return None


def select_adapter(
    bases: Optional[str],
    adapters: Sequence[AdapterPair],
    role: MateRole = MateRole.FIRST,
    parameters: ClippingParameters = SINGLE_END_PARAMETERS,
) -> Optional[AdapterMatch]:
    """
    Tries the adapters in the given order and returns the first one
    found in the bases.

    Args:
        bases: The bases of the read in sequencing order.
        adapters: The adapter pairs to try, in order of priority.
        role: The role of the read in its pair, it selects the adapter sequence.
        parameters: The matching thresholds.

    Returns:
        The adapter found and its 1-based position or None.
    """
    for adapter in adapters:
        index = find_clip_index(bases, adapter.fragment(role), parameters.min_match_bases, parameters.max_error_rate)
        if index is not None:
            return AdapterMatch(adapter, index + 1)
    return None


def find_adapter_and_index(
    bases: Optional[str],
    template_index: int,
    adapters: Sequence[AdapterPair],
    parameters: ClippingParameters = SINGLE_END_PARAMETERS,
) -> Optional[AdapterMatch]:
    """
    Same as select_adapter but the role of the read is given
    as a template index (1 or 2, 1 for single end reads).

    Raises:
        ValueError: If the template index is not 1 or 2.
    """
    role = MateRole.from_template_index(template_index)
    return select_adapter(bases, adapters, role, parameters)


def select_adapter_for_read(
    read: pysam.AlignedSegment,
    adapters: Sequence[AdapterPair],
    parameters: ClippingParameters = SINGLE_END_PARAMETERS,
) -> Optional[AdapterMatch]:
    """
    Finds the first adapter present in a SAM/BAM record.
    Reads on the negative strand are searched on their reverse complement.
    """
    return select_adapter(get_read_bases(read), adapters, get_mate_role(read), parameters)


def confirm_one_sided(
    read1_length: int,
    read2_length: int,
    index1: Optional[int],
    index2: Optional[int],
    stricter_min_match_bases: int,
) -> Optional[Tuple[Optional[int], Optional[int]]]:
    """
    When the adapter was found in only one read of a pair the match
    is accepted only if the rest of that read from the match index is at
    least stricter_min_match_bases long. Both reads are then clipped at the
    matched index provided they are long enough.

    Args:
        read1_length: Number of bases of the first read.
        read2_length: Number of bases of the second read.
        index1: 0-based index of the adapter in the first read or None.
        index2: 0-based index of the adapter in the second read or None.
        stricter_min_match_bases: Minimum number of bases from the index to the end of the read.

    Returns:
        A tuple with the 1-based positions to clip each read (None for a read
        that is too short) or None if the match is not confirmed.
    """
    if index1 is None:
        matched_index, matched_length = index2, read2_length
    else:
        matched_index, matched_length = index1, read1_length
    if matched_index is None:
        return None

    if matched_length - matched_index < stricter_min_match_bases:
        return None

    position = matched_index + 1
    return (
        position if read1_length > matched_index else None,
        position if read2_length > matched_index else None,
    )


def reconcile_pair(
    read1: pysam.AlignedSegment,
    read2: pysam.AlignedSegment,
    adapters: Sequence[AdapterPair],
    parameters: ClippingParameters = PAIRED_END_PARAMETERS,
) -> Optional[PairedClip]:
    """
    Finds where a pair of reads must be clipped.

    Each adapter pair is tried in order, the first read is searched for the 3'
    adapter and the second read for the 5' adapter in read order.
    If both reads match at the same index that adapter is returned straight away.
    If only one read matches the match is checked with twice the minimum number
    of matching bases (see confirm_one_sided) and kept as a candidate, but later
    adapters are still tried and a later agreement of both reads wins.
    Reads matching at different indexes are ignored.

    Args:
        read1: First read of the pair.
        read2: Second read of the pair.
        adapters: The adapter pairs to try, in order of priority.
        parameters: The matching thresholds.

    Returns:
        The adapter found and the positions to clip each read or None.
    """
    bases1 = get_read_bases(read1)
    bases2 = get_read_bases(read2)
    min_match, max_error = parameters.min_match_bases, parameters.max_error_rate
    matched = None

    for adapter in adapters:
        index1 = find_clip_index(bases1, adapter.fragment(MateRole.FIRST), min_match, max_error)
        index2 = find_clip_index(bases2, adapter.fragment(MateRole.SECOND), min_match, max_error)

        if index1 == index2:
            if index1 is not None:
                return PairedClip(adapter, index1 + 1, index2 + 1)
        elif index1 is None or index2 is None:
            positions = confirm_one_sided(
                get_read_length(read1), get_read_length(read2), index1, index2, 2 * min_match
            )
            if positions is not None:
                matched = PairedClip(adapter, *positions)

    return matched
