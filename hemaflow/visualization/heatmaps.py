"""
Heatmaps of differential and highly variable genes
"""

from typing import Optional, Sequence, Tuple

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
import seaborn as sns
from scipy.stats import zscore

from ..differential.results import filter_significant
from ..genomics import GeneAnnotationTable
from ..utils import get_logger
from .plots import gene_labels, group_palette, order_samples_by_group, symmetric_limits

logger = get_logger(__name__)


def select_top_de_genes(
    results: pd.DataFrame, n_genes: int = 30, padj_threshold: float = 0.001
) -> pd.DataFrame:
    """Significant rows with the largest absolute log2FoldChange, largest first"""
    significant = filter_significant(results, padj_threshold)
    magnitude = significant["log2FoldChange"].abs()
    order = magnitude.sort_values(ascending=False, kind="mergesort").index
    return significant.loc[order].head(n_genes).reset_index(drop=True)


def scale_rows(matrix: pd.DataFrame) -> pd.DataFrame:
    """Per-row z-score; rows without variance become zero"""
    scaled = zscore(matrix.to_numpy(dtype=float), axis=1, ddof=1, nan_policy="omit")
    scaled = np.nan_to_num(np.asarray(scaled, dtype=float), nan=0.0)
    return pd.DataFrame(scaled, index=matrix.index, columns=matrix.columns)


def center_rows(matrix: pd.DataFrame) -> pd.DataFrame:
    """Subtract each row's mean"""
    return matrix.sub(matrix.mean(axis=1), axis=0)


def top_variance_genes(matrix: pd.DataFrame, n_genes: int) -> pd.Index:
    """Identifiers of the ``n_genes`` rows with the highest variance"""
    variances = matrix.var(axis=1)
    return variances.sort_values(ascending=False, kind="mergesort").index[:n_genes]


def _figsize(n_rows: int, n_cols: int) -> Tuple[float, float]:
    return (max(8.0, 0.25 * n_cols + 4), max(6.0, 0.25 * n_rows + 3))


def plot_top_de_heatmap(
    results: pd.DataFrame,
    sample_annotation: pd.Series,
    labels: Optional[Sequence[str]] = None,
    n_genes: int = 30,
    padj_threshold: float = 0.001,
    cmap: str = "RdBu_r",
    title: Optional[str] = None,
) -> plt.Figure:
    """
    Heatmap of the strongest significant genes

    Rows are the top ``n_genes`` significant genes by absolute effect size,
    z-scored per row. Columns are ordered group by group and never clustered.

    Args:
        results: Annotated results with one normalized column per sample
        sample_annotation: Group label per sample
        labels: Group order for the columns
        n_genes: Number of genes to show
        padj_threshold: Significance cut-off

    Returns:
        matplotlib Figure
    """
    top = select_top_de_genes(results, n_genes=n_genes, padj_threshold=padj_threshold)
    if top.empty:
        raise ValueError(f"No genes with padj < {padj_threshold:g} to plot")

    samples = order_samples_by_group(sample_annotation, labels)
    matrix = top[samples].astype(float)
    matrix.index = gene_labels(top)

    scaled = scale_rows(matrix)
    limit = symmetric_limits(scaled)

    palette = group_palette(labels or list(pd.unique(sample_annotation)))
    col_colors = sample_annotation.loc[samples].map(palette).rename("group")

    grid = sns.clustermap(
        scaled,
        row_cluster=len(scaled) > 1,
        col_cluster=False,
        col_colors=col_colors,
        cmap=cmap,
        center=0,
        vmin=-limit,
        vmax=limit,
        xticklabels=True,
        yticklabels=True,
        figsize=_figsize(*scaled.shape),
        cbar_kws={"label": "row z-score"},
    )
    grid.ax_heatmap.set_xlabel("")
    grid.ax_heatmap.set_ylabel("")
    grid.figure.suptitle(
        title or f"Top {len(top)} differentially expressed genes", y=1.02
    )

    logger.info(f"Top differential heatmap: {len(top)} genes x {len(samples)} samples")
    return grid.figure


def plot_top_variance_heatmap(
    vst_counts: pd.DataFrame,
    sample_annotation: pd.Series,
    annotation: Optional[GeneAnnotationTable] = None,
    labels: Optional[Sequence[str]] = None,
    n_genes: int = 50,
    cmap: str = "RdBu_r",
    title: Optional[str] = None,
) -> plt.Figure:
    """
    Heatmap of the most variable genes of the variance-stabilized matrix

    Each selected row is mean-centred. Rows and columns are clustered and the
    group of every sample is drawn as a colour sidebar.
    """
    samples = [s for s in sample_annotation.index if s in vst_counts.columns]
    data = vst_counts[samples]

    genes = top_variance_genes(data, n_genes)
    centred = center_rows(data.loc[genes])

    if annotation is not None:
        names = annotation.lookup(centred.index)["gene_name"]
        centred.index = names.where(names.notna(), centred.index.to_series()).astype(str)

    limit = symmetric_limits(centred)
    palette = group_palette(labels or list(pd.unique(sample_annotation)))
    col_colors = sample_annotation.loc[samples].map(palette).rename("group")

    grid = sns.clustermap(
        centred,
        row_cluster=len(centred) > 1,
        col_cluster=len(samples) > 1,
        col_colors=col_colors,
        cmap=cmap,
        center=0,
        vmin=-limit,
        vmax=limit,
        xticklabels=True,
        yticklabels=True,
        figsize=_figsize(*centred.shape),
        cbar_kws={"label": "centred VST"},
    )
    grid.ax_heatmap.set_xlabel("")
    grid.ax_heatmap.set_ylabel("")
    grid.figure.suptitle(title or f"Top {len(genes)} most variable genes", y=1.02)

    logger.info(f"Top variance heatmap: {len(genes)} genes x {len(samples)} samples")
    return grid.figure
