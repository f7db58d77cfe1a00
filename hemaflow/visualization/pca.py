"""
Principal component projection of samples
"""

from dataclasses import dataclass
from typing import Optional, Sequence

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
from sklearn.decomposition import PCA

from ..utils import get_logger
from .heatmaps import top_variance_genes
from .plots import group_palette

logger = get_logger(__name__)


@dataclass
class PCAResult:
    """Sample coordinates on the leading principal components"""

    coordinates: pd.DataFrame
    explained_variance_ratio: np.ndarray
    genes_used: pd.Index

    def axis_label(self, component: int) -> str:
        percent = 100 * self.explained_variance_ratio[component]
        return f"PC{component + 1}: {percent:.1f}% variance"


def compute_pca(
    vst_counts: pd.DataFrame,
    sample_annotation: pd.Series,
    ntop: int = 500,
    n_components: int = 2,
    random_state: Optional[int] = None,
) -> PCAResult:
    """
    Project samples on principal components of the most variable genes

    Args:
        vst_counts: Variance-stabilized matrix (genes x samples)
        sample_annotation: Group label per sample
        ntop: Number of most variable genes to use
        n_components: Number of components to keep

    Returns:
        PCAResult with one row per sample and a ``group`` column
    """
    samples = [s for s in sample_annotation.index if s in vst_counts.columns]
    data = vst_counts[samples]

    genes = top_variance_genes(data, ntop)
    observations = data.loc[genes].T.to_numpy(dtype=float)

    n_components = min(n_components, *observations.shape)
    pca = PCA(n_components=n_components, random_state=random_state)
    embedding = pca.fit_transform(observations)

    coordinates = pd.DataFrame(
        embedding,
        index=pd.Index(samples, name="cell_line"),
        columns=[f"PC{i + 1}" for i in range(n_components)],
    )
    coordinates["group"] = sample_annotation.loc[samples].to_numpy()

    logger.info(
        f"PCA on {len(genes)} genes: "
        + ", ".join(
            f"PC{i + 1} {100 * r:.1f}%" for i, r in enumerate(pca.explained_variance_ratio_)
        )
    )

    return PCAResult(
        coordinates=coordinates,
        explained_variance_ratio=pca.explained_variance_ratio_,
        genes_used=genes,
    )


def plot_pca(
    vst_counts: pd.DataFrame,
    sample_annotation: pd.Series,
    labels: Optional[Sequence[str]] = None,
    ntop: int = 500,
    annotate: bool = True,
    title: Optional[str] = None,
) -> plt.Figure:
    """Scatter of samples on PC1/PC2, coloured by group and labelled by cell line"""
    result = compute_pca(vst_counts, sample_annotation, ntop=ntop, n_components=2)
    if "PC2" not in result.coordinates.columns:
        raise ValueError("PCA plot needs at least two components")

    labels = list(labels) if labels else list(pd.unique(sample_annotation))
    palette = group_palette(labels)
    coords = result.coordinates

    fig, ax = plt.subplots(1, 1, figsize=(10, 8))

    for label in labels:
        group = coords[coords["group"] == label]
        ax.scatter(
            group["PC1"],
            group["PC2"],
            c=palette[label],
            s=50,
            alpha=0.9,
            edgecolors="black",
            linewidth=0.5,
            label=f"{label} ({len(group)})",
        )

    if annotate:
        for cell_line, row in coords.iterrows():
            ax.annotate(
                cell_line,
                xy=(row["PC1"], row["PC2"]),
                xytext=(4, 4),
                textcoords="offset points",
                fontsize=7,
            )

    ax.set_xlabel(result.axis_label(0), fontsize=12)
    ax.set_ylabel(result.axis_label(1), fontsize=12)
    ax.set_title(title or "PCA of variance-stabilized expression", fontsize=14)
    ax.grid(True, alpha=0.3)
    ax.legend(loc="best", framealpha=0.95)

    plt.tight_layout()
    return fig
