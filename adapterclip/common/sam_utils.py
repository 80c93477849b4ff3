"""
This module contains some functions and utilities for SAM/BAM records
"""
from typing import Optional

import pysam

from adapterclip.common.adapters import MateRole
from adapterclip.common.sequence_utils import reverse_complement

# Reserved SAM tag holding the 1-based position where the adapter starts
CLIP_TAG = "XT"


def get_read_bases(read: pysam.AlignedSegment) -> Optional[str]:
    """
    Returns the bases of a read in sequencing order, reverse complementing
    a copy of them if the read is on the negative strand.

    Args:
        read: The SAM/BAM record.

    Returns:
        The bases of the read or None if the read has no sequence.
    """
    if not read.is_reverse:
        return read.query_sequence
    return reverse_complement(read.query_sequence)


def get_read_length(read: pysam.AlignedSegment) -> int:
    """
    Returns the number of bases of a read (0 if the read has no sequence).
    """
    return len(read.query_sequence) if read.query_sequence is not None else 0


def get_mate_role(read: pysam.AlignedSegment) -> MateRole:
    """
    Returns the role of the read in its pair, unpaired reads are FIRST.
    """
    if read.is_paired and read.is_read2:
        return MateRole.SECOND
    return MateRole.FIRST


def set_clip_position(read: pysam.AlignedSegment, position: int) -> None:
    """
    Stores the 1-based adapter clipping position in the read.

    Args:
        read: The SAM/BAM record.
        position: 1-based position where the adapter starts.
    """
    read.set_tag(CLIP_TAG, position, value_type="i")


def get_clip_position(read: pysam.AlignedSegment) -> Optional[int]:
    """
    Returns the 1-based adapter clipping position stored in the read or None.
    """
    if read.has_tag(CLIP_TAG):
        return read.get_tag(CLIP_TAG)
    return None


def convert_to_AlignedSegment(
    header: str,
    sequence: str,
    quality: Optional[str],
    mate_role: Optional[MateRole] = None,
) -> pysam.AlignedSegment:
    """
    Converts a FASTQ record to an unaligned `pysam.AlignedSegment`.

    Args:
        header: Header information for the segment.
        sequence: DNA/RNA sequence.
        quality: Base calling quality values (None for FASTA records).
        mate_role: The role of the read in its pair, None for single end reads.

    Returns:
        A new AlignedSegment object with the provided data.
    """
    aligned_segment = pysam.AlignedSegment()
    aligned_segment.query_name = header.split()[0]
    aligned_segment.query_sequence = sequence
    if quality:
        aligned_segment.query_qualities = pysam.qualitystring_to_array(quality)
    aligned_segment.flag |= pysam.FUNMAP
    if mate_role is not None:
        aligned_segment.flag |= pysam.FPAIRED | pysam.FMUNMAP
        aligned_segment.flag |= pysam.FREAD1 if mate_role is MateRole.FIRST else pysam.FREAD2
    aligned_segment.set_tag("RG", "0")
    return aligned_segment
