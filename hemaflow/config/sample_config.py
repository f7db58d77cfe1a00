"""
Sample group configuration for HemaFlow
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Iterable, List

logger = logging.getLogger(__name__)

# Blood and immune cell lines of the HPA cell line panel
DEFAULT_HEMATOPOIETIC_CELL_LINES = (
    "Daudi",
    "HDLM-2",
    "HEL",
    "HL-60",
    "HMC-1",
    "K-562",
    "Karpas-707",
    "MOLT-4",
    "NB-4",
    "REH",
    "RPMI-8226",
    "THP-1",
    "U-266/70",
    "U-266/84",
    "U-698",
    "U-937",
)


@dataclass
class SampleGroupConfig:
    """Two-group labelling of cell lines

    Cell lines listed in ``group_a_members`` belong to ``group_a``; every
    other cell line belongs to ``group_b``.
    """

    group_a: str = "hematopoietic"
    group_b: str = "non_hematopoietic"
    group_a_members: FrozenSet[str] = field(
        default_factory=lambda: frozenset(DEFAULT_HEMATOPOIETIC_CELL_LINES)
    )
    factor: str = "group"

    def __post_init__(self):
        self.group_a_members = frozenset(self.group_a_members)

    @property
    def labels(self) -> List[str]:
        return [self.group_a, self.group_b]

    @property
    def contrast_name(self) -> str:
        return f"{self.group_a}_vs_{self.group_b}"

    def validate(self) -> List[str]:
        """Validate group configuration"""
        issues = []

        if not self.group_a or not self.group_b:
            issues.append("Group labels cannot be empty")

        if self.group_a == self.group_b:
            issues.append(f"Group labels must differ, got {self.group_a!r} twice")

        if not self.group_a_members:
            issues.append(f"No cell lines listed for {self.group_a}")

        return issues

    @classmethod
    def from_dict(cls, values: Dict[str, Any]) -> "SampleGroupConfig":
        """Build from a ``samples`` config section"""
        kwargs = dict(values)
        members: Iterable[str] = kwargs.pop(
            "group_a_members", DEFAULT_HEMATOPOIETIC_CELL_LINES
        )
        return cls(group_a_members=frozenset(members), **kwargs)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "group_a": self.group_a,
            "group_b": self.group_b,
            "group_a_members": sorted(self.group_a_members),
            "factor": self.factor,
        }


def get_default_sample_groups() -> SampleGroupConfig:
    """Hematopoietic vs non-hematopoietic cell lines"""
    return SampleGroupConfig()
