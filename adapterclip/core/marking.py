"""
This module contains the functions to mark the adapters
found in single or paired reads (BAM or FASTQ input).
The reads are not trimmed, the position where the adapter
starts is stored in the XT tag of the clipped reads.
"""
import logging
import os
from typing import Iterator, List, Optional, Sequence, Tuple

import dnaio
import pysam

from adapterclip.common.adapters import AdapterPair, MateRole
from adapterclip.common.clipping import (
    PAIRED_END_PARAMETERS,
    SINGLE_END_PARAMETERS,
    ClippingParameters,
    PairedClip,
    reconcile_pair,
    select_adapter_for_read,
)
from adapterclip.common.sam_utils import convert_to_AlignedSegment, get_read_length, set_clip_position
from adapterclip.common.stats import Stats

logger = logging.getLogger("AdapterClip")

bam_header = {"HD": {"VN": "1.5", "SO": "unsorted"}, "RG": [{"ID": "0", "SM": "unknown_sample", "PL": "ILLUMINA"}]}


def clip_single_read(
    read: pysam.AlignedSegment,
    adapters: Sequence[AdapterPair],
    parameters: ClippingParameters = SINGLE_END_PARAMETERS,
) -> Optional[AdapterPair]:
    """
    Tries the adapters in order and stores the position of the first one
    found in the XT tag of the read.

    Args:
        read: The SAM/BAM record.
        adapters: The adapter pairs to try, in order of priority.
        parameters: The matching thresholds.

    Returns:
        The adapter found or None.
    """
    match = select_adapter_for_read(read, adapters, parameters)
    if match is None:
        return None
    set_clip_position(read, match.position)
    return match.adapter


def clip_paired_reads(
    read1: pysam.AlignedSegment,
    read2: pysam.AlignedSegment,
    adapters: Sequence[AdapterPair],
    parameters: ClippingParameters = PAIRED_END_PARAMETERS,
) -> Optional[AdapterPair]:
    """
    Finds the adapter in a pair of reads and stores the clipping
    position in the XT tag of the reads that must be clipped.

    Args:
        read1: First read of the pair.
        read2: Second read of the pair.
        adapters: The adapter pairs to try, in order of priority.
        parameters: The matching thresholds.

    Returns:
        The adapter found or None.
    """
    clip = reconcile_pair(read1, read2, adapters, parameters)
    if clip is None:
        return None
    _apply_paired_clip(read1, read2, clip)
    return clip.adapter


def _apply_paired_clip(read1: pysam.AlignedSegment, read2: pysam.AlignedSegment, clip: PairedClip) -> None:
    if clip.read1_position is not None:
        set_clip_position(read1, clip.read1_position)
    if clip.read2_position is not None:
        set_clip_position(read2, clip.read2_position)


def _iter_pairs(records: Iterator[pysam.AlignedSegment]) -> Iterator[Tuple[pysam.AlignedSegment, pysam.AlignedSegment]]:
    """
    Groups consecutive records of a query name grouped BAM file in pairs
    with the first read of the pair first.
    """
    for rec1 in records:
        rec2 = next(records, None)
        if rec2 is None:
            error = f"Error marking adapters, read {rec1.query_name} has no mate"
            logger.error(error)
            raise RuntimeError(error)
        if not rec1.is_paired or not rec2.is_paired:
            error = f"Error marking adapters, found unpaired read {rec1.query_name} in paired mode"
            logger.error(error)
            raise RuntimeError(error)
        if rec1.query_name != rec2.query_name:
            error = f"Error marking adapters, consecutive reads with different names {rec1.query_name} {rec2.query_name}"
            logger.error(error)
            raise RuntimeError(error)
        if rec1.is_read1 == rec2.is_read1:
            error = f"Error marking adapters, the reads of the pair {rec1.query_name} have the same mate role"
            logger.error(error)
            raise RuntimeError(error)
        if rec1.is_read1:
            yield rec1, rec2
        else:
            yield rec2, rec1


def _mark_pairs(
    pairs: Iterator[Tuple[pysam.AlignedSegment, pysam.AlignedSegment]],
    out_file: pysam.AlignmentFile,
    adapters: Sequence[AdapterPair],
    parameters: ClippingParameters,
    stats: Stats,
) -> None:
    for read1, read2 in pairs:
        stats.input_pairs += 1
        stats.input_reads += 2
        clip = reconcile_pair(read1, read2, adapters, parameters)
        if clip is not None:
            _apply_paired_clip(read1, read2, clip)
            stats.pairs_clipped += 1
            stats.add_clip(clip.adapter.name, get_read_length(read1), clip.read1_position)
            stats.add_clip(clip.adapter.name, get_read_length(read2), clip.read2_position)
        out_file.write(read1)
        out_file.write(read2)


def _mark_reads(
    reads: Iterator[pysam.AlignedSegment],
    out_file: pysam.AlignmentFile,
    adapters: Sequence[AdapterPair],
    parameters: ClippingParameters,
    stats: Stats,
) -> None:
    for read in reads:
        stats.input_reads += 1
        match = select_adapter_for_read(read, adapters, parameters)
        if match is not None:
            set_clip_position(read, match.position)
            stats.add_clip(match.adapter.name, get_read_length(read), match.position)
        out_file.write(read)


def _log_stats(stats: Stats) -> None:
    logger.info(f"Adapter marking stats total reads: {stats.input_reads}")
    if stats.input_pairs > 0:
        logger.info(f"Adapter marking stats total pairs: {stats.input_pairs}")
        logger.info(f"Adapter marking stats pairs clipped: {stats.pairs_clipped}")
    logger.info(f"Adapter marking stats reads clipped: {stats.reads_clipped}")
    if stats.input_reads > 0:
        logger.info(f"Adapter marking stats {(stats.reads_clipped / stats.input_reads):.2%} of the reads were clipped")
    for name, count in stats.adapters_found.items():
        logger.info(f"Adapter marking stats adapter {name} found in {count} reads")


def mark_adapters_bam(
    in_file: str,
    out_file: str,
    adapters: Sequence[AdapterPair],
    paired: bool,
    single_parameters: ClippingParameters = SINGLE_END_PARAMETERS,
    paired_parameters: ClippingParameters = PAIRED_END_PARAMETERS,
) -> Stats:
    """
    Marks the adapters in the reads of an unaligned BAM file.
    In paired mode the BAM file must be grouped by query name
    (mates in consecutive records).
    All the records are written to the output file.

    Args:
        in_file: Path to the input BAM file.
        out_file: Path to the output BAM file.
        adapters: The adapter pairs to try, in order of priority.
        paired: True if the reads are paired.
        single_parameters: The matching thresholds for single reads.
        paired_parameters: The matching thresholds for paired reads.

    Returns:
        The marking stats.

    Raises:
        RuntimeError: If the input file is missing or the pairs are malformed.
    """
    if not os.path.isfile(in_file):
        error = f"Error marking adapters, input file not present {in_file}"
        logger.error(error)
        raise RuntimeError(error)

    stats = Stats()
    with pysam.AlignmentFile(in_file, "rb", check_sq=False) as input_bam:
        with pysam.AlignmentFile(out_file, "wb", template=input_bam) as output_bam:
            records = input_bam.fetch(until_eof=True)
            if paired:
                _mark_pairs(_iter_pairs(records), output_bam, adapters, paired_parameters, stats)
            else:
                _mark_reads(records, output_bam, adapters, single_parameters, stats)

    _log_stats(stats)
    return stats


def mark_adapters_fastq(
    fw_file: str,
    rv_file: Optional[str],
    out_file: str,
    adapters: Sequence[AdapterPair],
    single_parameters: ClippingParameters = SINGLE_END_PARAMETERS,
    paired_parameters: ClippingParameters = PAIRED_END_PARAMETERS,
) -> Stats:
    """
    Marks the adapters in the reads of one FASTQ file (single end) or two
    FASTQ files (paired end) and writes the reads to an unaligned BAM file.

    Args:
        fw_file: Path to the FASTQ file containing forward reads (R1).
        rv_file: Path to the FASTQ file containing reverse reads (R2) or None for single end reads.
        out_file: Path to the output BAM file.
        adapters: The adapter pairs to try, in order of priority.
        single_parameters: The matching thresholds for single reads.
        paired_parameters: The matching thresholds for paired reads.

    Returns:
        The marking stats.

    Raises:
        RuntimeError: If the input files are missing.
    """
    input_files: List[str] = [fw_file] if rv_file is None else [fw_file, rv_file]
    if not all(os.path.isfile(f) for f in input_files):
        error = f"Error marking adapters, input file/s not present {' '.join(input_files)}"
        logger.error(error)
        raise RuntimeError(error)

    stats = Stats()
    with pysam.AlignmentFile(out_file, "wb", header=bam_header) as output_bam:
        with dnaio.open(*input_files) as reader:
            if rv_file is None:
                reads = (convert_to_AlignedSegment(r.name, r.sequence, r.qualities) for r in reader)
                _mark_reads(reads, output_bam, adapters, single_parameters, stats)
            else:
                pairs = _convert_pairs(reader)
                _mark_pairs(pairs, output_bam, adapters, paired_parameters, stats)

    _log_stats(stats)
    return stats


def _convert_pairs(reader: Iterator) -> Iterator[Tuple[pysam.AlignedSegment, pysam.AlignedSegment]]:
    for r1, r2 in reader:
        if r1.name.split()[0] != r2.name.split()[0]:
            logger.warning(f"Pair reads found with different names {r1.name} and {r2.name}.")
        yield (
            convert_to_AlignedSegment(r1.name, r1.sequence, r1.qualities, MateRole.FIRST),
            convert_to_AlignedSegment(r2.name, r2.sequence, r2.qualities, MateRole.SECOND),
        )
