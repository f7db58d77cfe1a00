"""
Volcano plot of differential expression results
"""

from typing import Optional

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
from adjustText import adjust_text

from ..exceptions import InvalidLabelModeError
from ..utils import get_logger
from .plots import gene_labels

logger = get_logger(__name__)

LABEL_MODES = ("padj", "log2fc")

UP_COLOR = "#D55E00"
DOWN_COLOR = "#0072B2"
NS_COLOR = "lightgray"


def _check_label_mode(label_by: str) -> None:
    if label_by not in LABEL_MODES:
        raise InvalidLabelModeError(label_by, LABEL_MODES)


def neg_log10_padj(padj: pd.Series) -> pd.Series:
    """-log10 of adjusted p-values, with zeros clipped to the smallest float"""
    return -np.log10(padj.clip(lower=np.finfo(float).tiny))


def select_volcano_labels(
    results: pd.DataFrame, n_labels: int = 10, label_by: str = "padj"
) -> pd.DataFrame:
    """
    Genes to label on each side of zero

    Args:
        results: Annotated results table
        n_labels: Labels per side
        label_by: ``"padj"`` picks the smallest adjusted p-values,
            ``"log2fc"`` the largest absolute effect sizes

    Returns:
        Selected rows with a ``side`` column (``"up"`` or ``"down"``)

    Raises:
        InvalidLabelModeError: unknown ``label_by``
    """
    _check_label_mode(label_by)

    valid = results.dropna(subset=["log2FoldChange", "padj"])
    picks = []

    for side, mask in (
        ("up", valid["log2FoldChange"] > 0),
        ("down", valid["log2FoldChange"] < 0),
    ):
        subset = valid.loc[mask]
        if label_by == "padj":
            order = subset["padj"].sort_values(kind="mergesort").index
        else:
            order = (
                subset["log2FoldChange"].abs().sort_values(ascending=False, kind="mergesort").index
            )
        picks.append(subset.loc[order].head(n_labels).assign(side=side))

    return pd.concat(picks, ignore_index=True)


def plot_volcano(
    results: pd.DataFrame,
    padj_threshold: float = 0.001,
    n_labels: int = 10,
    label_by: str = "padj",
    point_size: float = 8,
    alpha: float = 0.6,
    group_names: Optional[tuple] = None,
    title: Optional[str] = None,
) -> plt.Figure:
    """
    Effect size against -log10(padj), coloured by significance

    Args:
        results: Annotated results table
        padj_threshold: Significance cut-off used for colouring
        n_labels: Labels per side of zero
        label_by: ``"padj"`` or ``"log2fc"``
        group_names: (group A, group B) for the legend

    Returns:
        matplotlib Figure
    """
    _check_label_mode(label_by)

    data = results.dropna(subset=["log2FoldChange", "padj"])
    x = data["log2FoldChange"]
    y = neg_log10_padj(data["padj"])

    significant = data["padj"] < padj_threshold
    up = significant & (x > 0)
    down = significant & (x < 0)
    up_name, down_name = group_names or ("group A", "group B")

    fig, ax = plt.subplots(1, 1, figsize=(10, 8))

    ax.scatter(x[~(up | down)], y[~(up | down)], c=NS_COLOR, s=point_size, alpha=alpha,
               label=f"Not significant ({int((~(up | down)).sum())})")
    ax.scatter(x[up], y[up], c=UP_COLOR, s=point_size, alpha=alpha,
               label=f"Higher in {up_name} ({int(up.sum())})")
    ax.scatter(x[down], y[down], c=DOWN_COLOR, s=point_size, alpha=alpha,
               label=f"Higher in {down_name} ({int(down.sum())})")

    ax.axhline(y=-np.log10(padj_threshold), color="black", linestyle="--", alpha=0.5)
    ax.axvline(x=0, color="black", linestyle="-", alpha=0.3)

    to_label = select_volcano_labels(data, n_labels=n_labels, label_by=label_by)
    texts = [
        ax.text(lfc, height, name, fontsize=8)
        for lfc, height, name in zip(
            to_label["log2FoldChange"], neg_log10_padj(to_label["padj"]), gene_labels(to_label)
        )
    ]
    if texts:
        adjust_text(texts, ax=ax, arrowprops=dict(arrowstyle="-", color="gray", lw=0.5))

    ax.set_xlabel("log2(Fold Change)", fontsize=12)
    ax.set_ylabel("-log10(adjusted p-value)", fontsize=12)
    ax.set_title(title or f"Volcano plot (padj < {padj_threshold:g})", fontsize=14)
    ax.grid(True, alpha=0.3)
    ax.legend(loc="best", framealpha=0.95)

    plt.tight_layout()

    logger.info(f"Volcano plot: {len(data)} genes, {len(texts)} labels by {label_by}")
    return fig
