#! /usr/bin/env python
"""
Unit-test the package clipping
"""
import random

import pysam
import pytest

from adapterclip.common.adapters import AdapterPair, MateRole
from adapterclip.common.clipping import (
    PAIRED_END_PARAMETERS,
    SINGLE_END_PARAMETERS,
    AdapterMatch,
    ClippingParameters,
    PairedClip,
    confirm_one_sided,
    find_adapter_and_index,
    find_clip_index,
    reconcile_pair,
    select_adapter,
    select_adapter_for_read,
)
from adapterclip.common.sequence_utils import reverse_complement

ADAPTER = "ACGTTGCAAG"
INSERT = "GATTACAGATTACAGATTAC"

# 3' adapter searched in read 1 and the 5' adapter in read order searched in read 2
THREE_PRIME = "TTTGGGTGGTGT"
FIVE_PRIME_IN_READ_ORDER = "CCCAAACAACAC"


def make_read(sequence, is_reverse=False):
    read = pysam.AlignedSegment()
    read.query_name = "read"
    read.query_sequence = sequence
    read.is_unmapped = True
    read.is_reverse = is_reverse
    return read


@pytest.fixture
def adapter_pair():
    return AdapterPair("TEST", reverse_complement(FIVE_PRIME_IN_READ_ORDER), THREE_PRIME)


@pytest.fixture
def agreeing_reads():
    read1 = make_read("ACAC" * 5 + THREE_PRIME)
    read2 = make_read("GTGT" * 5 + FIVE_PRIME_IN_READ_ORDER)
    return read1, read2


def test_clipping_parameters_defaults():
    assert SINGLE_END_PARAMETERS == ClippingParameters(12, 0.10)
    assert PAIRED_END_PARAMETERS == ClippingParameters(6, 0.10)
    assert ClippingParameters() == SINGLE_END_PARAMETERS


def test_clipping_parameters_invalid():
    with pytest.raises(ValueError):
        ClippingParameters(0, 0.1)
    with pytest.raises(ValueError):
        ClippingParameters(12, -0.1)
    with pytest.raises(ValueError):
        ClippingParameters(12, 1.5)


def test_find_clip_index_exact_suffix():
    read = INSERT + ADAPTER
    assert find_clip_index(read, ADAPTER, 5, 0.0) == len(read) - len(ADAPTER)
    assert find_clip_index(read, ADAPTER, len(ADAPTER), 0.0) == 20


def test_find_clip_index_partial_adapter_at_end():
    # Only the first 7 bases of the adapter are present
    read = INSERT + ADAPTER[:7]
    assert find_clip_index(read, ADAPTER, 5, 0.0) == 20
    # Fewer bases than the minimum overlap
    assert find_clip_index(INSERT + ADAPTER[:4], ADAPTER, 5, 0.0) is None


def test_find_clip_index_short_read():
    assert find_clip_index("ACGT", "ACGT", 5, 0.1) is None
    assert find_clip_index("", ADAPTER, 1, 0.1) is None
    assert find_clip_index(None, ADAPTER, 5, 0.1) is None


def test_find_clip_index_no_match_unrelated():
    rng = random.Random(42)
    # Only A and C bases, the adapter only has G and T
    read = "".join(rng.choice("AC") for _ in range(100))
    assert find_clip_index(read, "GTTGTGGTTGTGTTGG", 12, 0.0) is None


def test_find_clip_index_mismatches():
    # One mismatch in 10 bases is allowed with a 10% error rate
    assert find_clip_index(INSERT + "ACGATGCAAG", ADAPTER, 5, 0.1) == 20
    assert find_clip_index(INSERT + "ACGATGCAAG", ADAPTER, 5, 0.0) is None
    # Two mismatches are too many
    assert find_clip_index(INSERT + "ACGATGCATG", ADAPTER, 5, 0.1) is None


def test_find_clip_index_wildcards():
    read = "ACAC" * 5 + THREE_PRIME
    assert find_clip_index(read, THREE_PRIME, 6, 0.0) == 20
    assert find_clip_index(read, "TTTNGGTGGTGT", 6, 0.0) == 20
    assert find_clip_index(read, "TTTGGGTGGTGN", 6, 0.0) == 20
    assert find_clip_index(read, "TTT.GGTGGTGT", 6, 0.0) == 20
    # Wildcards in the read are not wildcards
    assert find_clip_index("ACAC" * 5 + "TTTNGGTGGTGT", THREE_PRIME, 6, 0.0) is None


def test_find_clip_index_ignores_case():
    read = (INSERT + ADAPTER).lower()
    assert find_clip_index(read, ADAPTER, 5, 0.0) == 20


def test_find_clip_index_rightmost():
    read = "GATTACA" + ADAPTER + "CCCCCC" + ADAPTER + "TTT"
    assert find_clip_index(read, ADAPTER, 5, 0.0) == 23


def test_select_adapter_priority():
    params = ClippingParameters(5, 0.0)
    first = AdapterPair("FIRST", "ACGT", "CCTTAAGGTC")
    second = AdapterPair("SECOND", "ACGT", ADAPTER)
    bases = "GATTACA" + "CCTTAAGGTC" + "GGG" + ADAPTER

    assert select_adapter(bases, [first, second], MateRole.FIRST, params) == AdapterMatch(first, 8)
    assert select_adapter(bases, [second, first], MateRole.FIRST, params) == AdapterMatch(second, 21)


def test_select_adapter_no_match(adapter_pair):
    assert select_adapter("GTGT" * 10, [adapter_pair]) is None
    assert select_adapter(None, [adapter_pair]) is None
    assert select_adapter("ACAC" * 5 + THREE_PRIME, []) is None


def test_select_adapter_role(adapter_pair):
    params = ClippingParameters(6, 0.0)
    read1 = "ACAC" * 5 + THREE_PRIME
    read2 = "GTGT" * 5 + FIVE_PRIME_IN_READ_ORDER

    assert select_adapter(read1, [adapter_pair], MateRole.FIRST, params) == AdapterMatch(adapter_pair, 21)
    assert select_adapter(read2, [adapter_pair], MateRole.FIRST, params) is None
    assert select_adapter(read2, [adapter_pair], MateRole.SECOND, params) == AdapterMatch(adapter_pair, 21)


def test_find_adapter_and_index(adapter_pair):
    read2 = "GTGT" * 5 + FIVE_PRIME_IN_READ_ORDER
    assert find_adapter_and_index(read2, 2, [adapter_pair]) == AdapterMatch(adapter_pair, 21)
    assert find_adapter_and_index(read2, 1, [adapter_pair]) is None
    with pytest.raises(ValueError):
        find_adapter_and_index(read2, 3, [adapter_pair])
    with pytest.raises(ValueError):
        find_adapter_and_index(read2, 0, [adapter_pair])


def test_select_adapter_for_read_reverse_strand(adapter_pair):
    bases = "ACAC" * 5 + THREE_PRIME
    forward = make_read(bases)
    reverse = make_read(reverse_complement(bases), is_reverse=True)
    stored_reverse = make_read(reverse_complement(bases))

    assert select_adapter_for_read(forward, [adapter_pair]) == AdapterMatch(adapter_pair, 21)
    assert select_adapter_for_read(reverse, [adapter_pair]) == AdapterMatch(adapter_pair, 21)
    assert select_adapter_for_read(stored_reverse, [adapter_pair]) is None
    # The read is not modified
    assert not forward.has_tag("XT")
    assert reverse.query_sequence == reverse_complement(bases)


def test_select_adapter_for_read_second_of_pair(adapter_pair):
    read = make_read("GTGT" * 5 + FIVE_PRIME_IN_READ_ORDER)
    read.is_paired = True
    read.is_read2 = True
    assert select_adapter_for_read(read, [adapter_pair]) == AdapterMatch(adapter_pair, 21)


def test_confirm_one_sided():
    assert confirm_one_sided(40, 40, 10, None, 12) == (11, 11)
    assert confirm_one_sided(40, 40, None, 20, 12) == (21, 21)
    # Not enough bases left after the match
    assert confirm_one_sided(40, 40, 30, None, 12) is None
    assert confirm_one_sided(40, 40, None, 35, 12) is None
    # The other read is too short to be clipped
    assert confirm_one_sided(40, 8, 10, None, 12) == (11, None)
    assert confirm_one_sided(10, 40, None, 10, 12) == (None, 11)
    assert confirm_one_sided(40, 40, None, None, 12) is None


def test_reconcile_pair_agreement(adapter_pair, agreeing_reads):
    read1, read2 = agreeing_reads
    assert reconcile_pair(read1, read2, [adapter_pair]) == PairedClip(adapter_pair, 21, 21)
    assert not read1.has_tag("XT")
    assert not read2.has_tag("XT")


def test_reconcile_pair_no_match(adapter_pair):
    read1 = make_read("GTGT" * 10)
    read2 = make_read("ACAC" * 10)
    assert reconcile_pair(read1, read2, [adapter_pair]) is None


def test_reconcile_pair_one_sided(adapter_pair):
    read1 = make_read("ACACACACAC" + THREE_PRIME + "ACACACACACACACACAC")
    read2 = make_read("GT" * 20)
    assert len(read1.query_sequence) == 40
    assert reconcile_pair(read1, read2, [adapter_pair]) == PairedClip(adapter_pair, 11, 11)


def test_reconcile_pair_one_sided_too_short(adapter_pair):
    # The adapter is found at the end of read 1 but there are less than 12 bases left
    read1 = make_read("ACAC" * 5 + THREE_PRIME[:8])
    read2 = make_read("GT" * 14)
    assert reconcile_pair(read1, read2, [adapter_pair]) is None


def test_reconcile_pair_different_offsets(adapter_pair):
    read1 = make_read("ACAC" * 5 + THREE_PRIME)
    read2 = make_read("GT" * 8 + FIVE_PRIME_IN_READ_ORDER + "GTGT")
    assert reconcile_pair(read1, read2, [adapter_pair]) is None


def test_reconcile_pair_agreement_overrides_one_sided(adapter_pair, agreeing_reads):
    read1, read2 = agreeing_reads
    one_sided = AdapterPair("ONE_SIDED", "GGGGGGGGGGGG", THREE_PRIME)

    assert reconcile_pair(read1, read2, [one_sided]) == PairedClip(one_sided, 21, 21)
    assert reconcile_pair(read1, read2, [one_sided, adapter_pair]) == PairedClip(adapter_pair, 21, 21)
    assert reconcile_pair(read1, read2, [adapter_pair, one_sided]) == PairedClip(adapter_pair, 21, 21)


@pytest.fixture
def one_sided_adapters():
    # Each adapter can only be found in one read of the pair
    first = AdapterPair("FIRST", "TTTTTTTTTTTT", THREE_PRIME)
    second = AdapterPair("SECOND", reverse_complement(FIVE_PRIME_IN_READ_ORDER), "AAAAAAAAAAAA")
    return first, second


def test_reconcile_pair_later_one_sided_replaces_earlier(one_sided_adapters):
    first, second = one_sided_adapters
    read1 = make_read("ACACACACAC" + THREE_PRIME + "ACACACACACACACACAC")
    read2 = make_read("GT" * 10 + FIVE_PRIME_IN_READ_ORDER + "GTGTGTGT")

    assert reconcile_pair(read1, read2, [first]) == PairedClip(first, 11, 11)
    assert reconcile_pair(read1, read2, [second]) == PairedClip(second, 21, 21)
    assert reconcile_pair(read1, read2, [first, second]) == PairedClip(second, 21, 21)
    assert reconcile_pair(read1, read2, [second, first]) == PairedClip(first, 11, 11)


def test_reconcile_pair_later_one_sided_short_mate(one_sided_adapters):
    first, second = one_sided_adapters
    # Read 1 is too short to be clipped at the index found in read 2
    read1 = make_read("ACACACACAC" + THREE_PRIME)
    read2 = make_read("GT" * 13 + FIVE_PRIME_IN_READ_ORDER + "GTGTGTGT")

    assert reconcile_pair(read1, read2, [first]) == PairedClip(first, 11, 11)
    assert reconcile_pair(read1, read2, [first, second]) == PairedClip(second, None, 27)


def test_reconcile_pair_reverse_strand(adapter_pair):
    read1 = make_read(reverse_complement("ACAC" * 5 + THREE_PRIME), is_reverse=True)
    read2 = make_read("GTGT" * 5 + FIVE_PRIME_IN_READ_ORDER)
    assert reconcile_pair(read1, read2, [adapter_pair]) == PairedClip(adapter_pair, 21, 21)
