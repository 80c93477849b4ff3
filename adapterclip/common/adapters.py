"""
This module contains the adapter pairs used to clip the reads
and the known Illumina adapters
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, List

from adapterclip.common.sequence_utils import reverse_complement, validate_adapter_sequence


class MateRole(Enum):
    """
    Role of a read in a pair. Single end reads are FIRST.
    """

    FIRST = 1
    SECOND = 2

    @classmethod
    def from_template_index(cls, template_index: int) -> "MateRole":
        """
        Converts a numeric template index (1 or 2) to a MateRole.

        Args:
            template_index: The template index of the read.

        Returns:
            The corresponding MateRole.

        Raises:
            ValueError: If the template index is not 1 or 2.
        """
        if template_index == 1:
            return cls.FIRST
        if template_index == 2:
            return cls.SECOND
        raise ValueError(f"Read template index must be 1 or 2, got {template_index}")


@dataclass(frozen=True)
class AdapterPair:
    """
    A pair of 5' and 3' adapters. The first read of a pair
    is searched for the 3' adapter and the second read for the
    reverse complement of the 5' adapter.
    """

    name: str
    five_prime: str
    three_prime: str
    five_prime_in_read_order: str = field(init=False, repr=False)

    def __post_init__(self) -> None:
        five_prime = validate_adapter_sequence(self.five_prime)
        three_prime = validate_adapter_sequence(self.three_prime)
        object.__setattr__(self, "five_prime", five_prime)
        object.__setattr__(self, "three_prime", three_prime)
        object.__setattr__(self, "five_prime_in_read_order", reverse_complement(five_prime))

    def fragment(self, role: MateRole) -> str:
        """
        Returns the adapter sequence to search for in a read with the given role.

        Args:
            role: The role of the read in its pair.

        Returns:
            The adapter sequence in read order.
        """
        if role is MateRole.SECOND:
            return self.five_prime_in_read_order
        return self.three_prime


ILLUMINA_ADAPTERS: Dict[str, AdapterPair] = {
    adapter.name: adapter
    for adapter in (
        AdapterPair(
            "PAIRED_END",
            "AATGATACGGCGACCACCGAGATCTACACTCTTTCCCTACACGACGCTCTTCCGATCT",
            "AGATCGGAAGAGCGGTTCAGCAGGAATGCCGAGACCGATCTCGTATGCCGTCTTCTGCTTG",
        ),
        AdapterPair(
            "INDEXED",
            "AATGATACGGCGACCACCGAGATCTACACTCTTTCCCTACACGACGCTCTTCCGATCT",
            "AGATCGGAAGAGCACACGTCTGAACTCCAGTCACNNNNNNNNATCTCGTATGCCGTCTTCTGCTTG",
        ),
        AdapterPair(
            "SINGLE_END",
            "AATGATACGGCGACCACCGACAGGTTCAGAGTTCTACAGTCCGACGATC",
            "TCGTATGCCGTCTTCTGCTTG",
        ),
        AdapterPair(
            "NEXTERA_V1",
            "AATGATACGGCGACCACCGAGATCTACACGCCTCCCTCGCGCCATCAG",
            "CCGAGCCCACGAGACNNNNNNNNATCTCGTATGCCGTCTTCTGCTTG",
        ),
        AdapterPair(
            "NEXTERA_V2",
            "AATGATACGGCGACCACCGAGATCTACACNNNNNNNNTCGTCGGCAGCGTC",
            "CTGTCTCTTATACACATCTCCGAGCCCACGAGACNNNNNNNNATCTCGTATGCCGTCTTCTGCTTG",
        ),
        AdapterPair(
            "DUAL_INDEXED",
            "AATGATACGGCGACCACCGAGATCTACACNNNNNNNNACACTCTTTCCCTACACGACGCTCTTCCGATCT",
            "AGATCGGAAGAGCACACGTCTGAACTCCAGTCACNNNNNNNNATCTCGTATGCCGTCTTCTGCTTG",
        ),
        AdapterPair(
            "FLUIDIGM",
            "AATGATACGGCGACCACCGAGATCTACACTGACGACATGGTTCTACA",
            "AGACCAAGTCTCTGCTACCGTANNNNNNNNNNATCTCGTATGCCGTCTTCTGCTTG",
        ),
        AdapterPair(
            "TRUSEQ_SMALLRNA",
            "AATGATACGGCGACCACCGAGATCTACACGTTCAGAGTTCTACAGTCCGA",
            "TGGAATTCTCGGGTGCCAAGGAACTCCAGTCACNNNNNNATCTCGTATGCCGTCTTCTGCTTG",
        ),
        AdapterPair(
            "ALTERNATIVE_SINGLE_END",
            "AATGATACGGCGACCACCGACAGGTTCAGAGTTCTACAGTCCGACGATC",
            "ATCTCGTATGCCGTCTTCTGCTTG",
        ),
    )
}

DEFAULT_ADAPTERS = ["INDEXED", "DUAL_INDEXED", "PAIRED_END"]


def get_adapter_pairs(names: Iterable[str]) -> List[AdapterPair]:
    """
    Looks up known Illumina adapter pairs by name keeping the given order.

    Args:
        names: Names of the adapter pairs (case insensitive).

    Returns:
        A list of AdapterPair objects.

    Raises:
        ValueError: If a name is not a known adapter pair.
    """
    adapters = []
    for name in names:
        try:
            adapters.append(ILLUMINA_ADAPTERS[name.upper()])
        except KeyError:
            raise ValueError(f"Unknown adapter {name}, valid adapters are {', '.join(ILLUMINA_ADAPTERS)}")
    return adapters


def parse_custom_adapter(five_prime: str, three_prime: str, name: str = "CUSTOM") -> AdapterPair:
    """
    Creates an adapter pair from the given sequences.

    Args:
        five_prime: The 5' adapter sequence.
        three_prime: The 3' adapter sequence.
        name: A name for the adapter pair. Defaults to "CUSTOM".

    Returns:
        An AdapterPair object.

    Raises:
        ValueError: If any of the sequences is not a valid adapter sequence.
    """
    return AdapterPair(name, five_prime, three_prime)
