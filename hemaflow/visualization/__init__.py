"""
Visualization module for HemaFlow

This module provides the figures built on top of differential expression
results: heatmaps of top genes, the sample PCA, volcano plots and
per-gene expression plots.
"""

from .gene_plots import (gene_expression_frame, plot_gene_expression,
                         plot_genes_of_interest)
from .heatmaps import (center_rows, plot_top_de_heatmap,
                       plot_top_variance_heatmap, scale_rows,
                       select_top_de_genes, top_variance_genes)
from .pca import PCAResult, compute_pca, plot_pca
from .plots import (gene_labels, group_palette, order_samples_by_group,
                    save_figure, symmetric_limits)
from .volcano import LABEL_MODES, plot_volcano, select_volcano_labels

__all__ = [
    "select_top_de_genes",
    "scale_rows",
    "center_rows",
    "top_variance_genes",
    "plot_top_de_heatmap",
    "plot_top_variance_heatmap",
    "PCAResult",
    "compute_pca",
    "plot_pca",
    "LABEL_MODES",
    "select_volcano_labels",
    "plot_volcano",
    "gene_expression_frame",
    "plot_gene_expression",
    "plot_genes_of_interest",
    "group_palette",
    "symmetric_limits",
    "order_samples_by_group",
    "gene_labels",
    "save_figure",
]
