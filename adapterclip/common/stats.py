"""
This shared object is used to collect
different statistics of the adapter
marking run.
"""

import json
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, Optional


@dataclass
class Stats:
    """
    Stats collects information and statistics of the adapter marking.
    """

    input_reads: int = 0
    input_pairs: int = 0
    reads_clipped: int = 0
    pairs_clipped: int = 0
    adapters_found: Dict[str, int] = field(default_factory=dict)
    clipped_bases: Dict[int, int] = field(default_factory=dict)
    pipeline_version: str = "-"
    input_parameters: Dict[str, Any] = field(default_factory=dict)

    def add_clip(self, adapter_name: str, read_length: int, position: Optional[int]) -> None:
        """
        Counts a clipped read.

        Args:
            adapter_name: Name of the adapter found in the read.
            read_length: Number of bases of the read.
            position: 1-based position where the read is clipped (None if the read is not clipped).
        """
        if position is None:
            return
        self.reads_clipped += 1
        self.adapters_found[adapter_name] = self.adapters_found.get(adapter_name, 0) + 1
        clipped = read_length - position + 1
        self.clipped_bases[clipped] = self.clipped_bases.get(clipped, 0) + 1

    def __str__(self) -> str:
        """
        Returns a string representation of the Stats object.

        Returns:
            A formatted string of all stats attributes.
        """
        return "\n".join(f"{field_name}: {getattr(self, field_name)}" for field_name in self.__dataclass_fields__)

    def write_json(self, filename: str) -> None:
        """
        Writes the stats to a JSON file.

        Args:
            filename: The path to the JSON file to write.
        """
        with open(filename, "w") as file:
            json.dump(asdict(self), file, indent=2, separators=(",", ": "))

    @classmethod
    def from_json(cls, filename: str) -> "Stats":
        """
        Creates a Stats object from a JSON file.

        Args:
            filename: The path to the JSON file to read.

        Returns:
            A Stats object populated with data from the JSON file.
        """
        with open(filename, "r") as file:
            data = json.load(file)
        # JSON keys are always strings
        data["clipped_bases"] = {int(k): v for k, v in data.get("clipped_bases", {}).items()}
        return cls(**data)
