"""
Shared plotting helpers: colour scales, labels and figure saving
"""

from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence, Union

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
import seaborn as sns

from ..utils import get_logger

logger = get_logger(__name__)


def group_palette(labels: Sequence[str], palette: str = "Set2") -> Dict[str, str]:
    """Map each group label to a hex colour, stable in label order"""
    colours = sns.color_palette(palette, max(len(labels), 1)).as_hex()
    return dict(zip(labels, colours))


def symmetric_limits(values: Union[pd.DataFrame, np.ndarray], floor: float = 1.0) -> float:
    """Half-width of a diverging colour scale centred on zero"""
    array = np.asarray(values, dtype=float)
    finite = array[np.isfinite(array)]
    if finite.size == 0:
        return floor
    return float(max(np.abs(finite).max(), floor))


def order_samples_by_group(
    sample_annotation: pd.Series, labels: Optional[Sequence[str]] = None
) -> List[str]:
    """Samples of the first label, then the second, keeping their original order"""
    if labels is None:
        labels = list(pd.unique(sample_annotation))

    ordered = []
    for label in labels:
        ordered.extend(sample_annotation.index[sample_annotation == label])

    # Samples carrying a label not listed go last
    seen = set(ordered)
    ordered.extend(s for s in sample_annotation.index if s not in seen)
    return ordered


def gene_labels(table: pd.DataFrame) -> pd.Series:
    """Display name per row, falling back to the gene identifier"""
    return table["gene_name"].where(table["gene_name"].notna(), table["gene_id"]).astype(str)


def save_figure(
    fig: plt.Figure,
    output_dir: Union[str, Path],
    name: str,
    formats: Iterable[str] = ("png",),
    dpi: int = 300,
) -> List[Path]:
    """Save ``fig`` once per format and return the written paths"""
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    paths = []
    for fmt in formats:
        path = output_dir / f"{name}.{fmt}"
        fig.savefig(path, dpi=dpi, bbox_inches="tight")
        paths.append(path)

    logger.info(f"Figure saved: {', '.join(str(p) for p in paths)}")
    return paths
