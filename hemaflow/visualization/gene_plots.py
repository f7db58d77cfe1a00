"""
Per-gene expression across the two groups
"""

from typing import Optional, Sequence

import matplotlib.pyplot as plt
import pandas as pd
import seaborn as sns

from ..exceptions import GeneNotFoundError
from ..genomics import GeneAnnotationTable
from ..utils import get_logger
from .plots import group_palette, order_samples_by_group

logger = get_logger(__name__)


def gene_expression_frame(
    gene_id: str, normalized_counts: pd.DataFrame, sample_annotation: pd.Series
) -> pd.DataFrame:
    """Long table of one gene: ``cell_line``, ``group``, ``expression``"""
    if gene_id not in normalized_counts.index:
        raise GeneNotFoundError(gene_id)

    samples = [s for s in sample_annotation.index if s in normalized_counts.columns]
    return pd.DataFrame(
        {
            "cell_line": samples,
            "group": sample_annotation.loc[samples].to_numpy(),
            "expression": normalized_counts.loc[gene_id, samples].astype(float).to_numpy(),
        }
    )


def plot_gene_expression(
    token: str,
    normalized_counts: pd.DataFrame,
    sample_annotation: pd.Series,
    annotation: Optional[GeneAnnotationTable] = None,
    on_ambiguous: str = "raise",
    labels: Optional[Sequence[str]] = None,
    log_scale: bool = False,
    title: Optional[str] = None,
) -> plt.Figure:
    """
    Box and strip plot of one gene's normalized expression per group

    Args:
        token: Gene identifier or display name
        normalized_counts: Normalized matrix (genes x samples)
        sample_annotation: Group label per sample
        annotation: Gene annotation used to resolve display names
        on_ambiguous: ``"raise"`` or ``"first"`` for names shared by several genes
        labels: Group order on the x axis
        log_scale: Draw the y axis on a log scale

    Returns:
        matplotlib Figure

    Raises:
        GeneNotFoundError: token is unknown or the gene has no expression row
        AmbiguousGeneError: display name maps to several genes
    """
    if annotation is not None:
        gene_id = annotation.resolve(token, on_ambiguous=on_ambiguous)
        display = annotation.lookup([gene_id])["gene_name"].iloc[0]
    else:
        gene_id, display = token, None
    display = display if isinstance(display, str) and display else gene_id

    frame = gene_expression_frame(gene_id, normalized_counts, sample_annotation)

    order = list(labels) if labels else list(pd.unique(sample_annotation))
    palette = group_palette(order)

    fig, ax = plt.subplots(1, 1, figsize=(6, 6))

    sns.boxplot(
        data=frame,
        x="group",
        y="expression",
        hue="group",
        order=order,
        hue_order=order,
        palette=palette,
        showfliers=False,
        legend=False,
        ax=ax,
    )
    sns.stripplot(
        data=frame,
        x="group",
        y="expression",
        order=order,
        color="black",
        size=4,
        jitter=0.2,
        alpha=0.7,
        ax=ax,
    )

    if log_scale:
        ax.set_yscale("symlog", linthresh=1.0)

    ax.set_xlabel("")
    ax.set_ylabel("Normalized expression", fontsize=12)
    ax.set_title(title or f"{display} ({gene_id})", fontsize=14)
    ax.grid(True, axis="y", alpha=0.3)

    plt.tight_layout()

    logger.info(f"Expression plot for {display}: {len(frame)} samples")
    return fig


def plot_genes_of_interest(
    tokens: Sequence[str],
    normalized_counts: pd.DataFrame,
    sample_annotation: pd.Series,
    annotation: Optional[GeneAnnotationTable] = None,
    on_ambiguous: str = "raise",
    labels: Optional[Sequence[str]] = None,
):
    """Yield ``(token, figure)`` for every requested gene"""
    for token in tokens:
        yield token, plot_gene_expression(
            token,
            normalized_counts,
            sample_annotation,
            annotation=annotation,
            on_ambiguous=on_ambiguous,
            labels=labels,
        )
