"""
Sample group assignment
"""

from typing import Dict, Iterable, Sequence

import pandas as pd

from ..utils import get_logger

logger = get_logger(__name__)


def assign_groups(
    sample_ids: Iterable[str],
    members: Iterable[str],
    group_a: str = "hematopoietic",
    group_b: str = "non_hematopoietic",
) -> pd.Series:
    """
    Label every sample with one of two groups

    Samples listed in ``members`` get ``group_a``; all others, including
    identifiers the membership list has never heard of, get ``group_b``.

    Args:
        sample_ids: Matrix column identifiers
        members: Identifiers belonging to ``group_a``
        group_a: Label of the listed samples
        group_b: Label of every other sample

    Returns:
        Series indexed by sample id with the group label as value
    """
    if group_a == group_b:
        raise ValueError(f"Group labels must differ, got {group_a!r} twice")

    sample_ids = list(sample_ids)
    members = frozenset(members)

    labels = [group_a if sample in members else group_b for sample in sample_ids]
    annotation = pd.Series(labels, index=pd.Index(sample_ids, name="cell_line"), name="group")

    unmatched = members.difference(sample_ids)
    if unmatched:
        logger.debug(f"{len(unmatched)} listed {group_a} cell lines are not in the matrix")

    sizes = group_sizes(annotation, [group_a, group_b])
    logger.info(
        f"Assigned {sizes[group_a]} samples to {group_a} and "
        f"{sizes[group_b]} to {group_b}"
    )

    return annotation


def group_sizes(annotation: pd.Series, labels: Sequence[str]) -> Dict[str, int]:
    """Number of samples per label, zero for labels nobody carries"""
    counts = annotation.value_counts()
    return {label: int(counts.get(label, 0)) for label in labels}
