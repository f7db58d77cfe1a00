"""
Main differential expression coordinator
"""

import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional, Union

import numpy as np
import pandas as pd

from ..config import Config
from ..exceptions import ContrastNotFoundError
from ..genomics import GeneAnnotationTable
from ..utils import get_logger
from .groups import group_sizes
from .methods import BaseEngine, Contrast, EngineFit, PyDESeq2Engine
from .results import (annotate_results, export_results, filter_significant,
                      merge_normalized_counts, sort_by_effect)

logger = get_logger(__name__)


@dataclass
class DifferentialResult:
    """Result of one differential expression contrast"""

    contrast_name: str
    group_a: str
    group_b: str
    padj_threshold: float

    # Sorted, annotated tables
    all_genes: pd.DataFrame
    significant: pd.DataFrame

    fit: Optional[EngineFit] = None

    # Statistics
    n_genes: int = 0
    n_tested: int = 0
    n_significant: int = 0
    n_up_regulated: int = 0
    n_down_regulated: int = 0

    output_files: Dict[str, Path] = field(default_factory=dict)
    execution_time: Optional[float] = None

    def summary(self) -> str:
        """Human-readable report of the contrast"""
        lines = [
            f"Contrast: {self.contrast_name}",
            f"Genes: {self.n_genes} ({self.n_tested} with a p-value)",
            f"Significant (padj < {self.padj_threshold:g}): {self.n_significant}",
            f"  higher in {self.group_a}: {self.n_up_regulated}",
            f"  higher in {self.group_b}: {self.n_down_regulated}",
        ]
        for key, path in self.output_files.items():
            lines.append(f"{key}: {path}")
        return "\n".join(lines)


class DifferentialAnalyzer:
    """Runs an engine for a contrast and turns its output into report tables"""

    def __init__(
        self,
        engine: Optional[BaseEngine] = None,
        annotation: Optional[GeneAnnotationTable] = None,
        padj_threshold: float = 0.001,
        output_dir: Optional[Union[str, Path]] = None,
    ):
        """
        Args:
            engine: Statistical engine, PyDESeq2 by default
            annotation: Shared gene annotation lookup
            padj_threshold: Default significance cut-off
            output_dir: Where the CSV tables go; nothing is written when None
        """
        self.engine = engine or PyDESeq2Engine()
        self.annotation = annotation
        self.padj_threshold = padj_threshold
        self.output_dir = Path(output_dir) if output_dir is not None else None

    @classmethod
    def from_config(
        cls,
        config: Config,
        annotation: Optional[GeneAnnotationTable] = None,
        engine: Optional[BaseEngine] = None,
    ) -> "DifferentialAnalyzer":
        diff_params = config.differential

        if engine is None:
            engine = PyDESeq2Engine(
                scale_factor=diff_params.get("scale_factor", 100),
                fit_type=diff_params.get("fit_type", "parametric"),
                n_cpus=config.n_threads,
            )

        output_dir = Path(config.output_dir) / "tables" if config.output_dir else None

        return cls(
            engine=engine,
            annotation=annotation,
            padj_threshold=diff_params.get("padj_threshold", 0.001),
            output_dir=output_dir,
        )

    def run_contrast(
        self,
        matrix: pd.DataFrame,
        sample_annotation: pd.Series,
        contrast: Contrast,
        padj_threshold: Optional[float] = None,
    ) -> DifferentialResult:
        """
        Fit the engine for ``contrast`` and build the report tables

        Args:
            matrix: Gene x cell-line expression matrix
            sample_annotation: Group label per cell line
            contrast: Groups to compare
            padj_threshold: Overrides the analyzer default

        Raises:
            ContrastNotFoundError: a contrast group has no samples
        """
        threshold = self.padj_threshold if padj_threshold is None else padj_threshold
        start_time = time.time()

        in_matrix = sample_annotation[sample_annotation.index.isin(matrix.columns)]
        sizes = group_sizes(in_matrix, contrast.labels)
        empty = [label for label, size in sizes.items() if size == 0]
        if empty:
            raise ContrastNotFoundError(contrast.name, empty)

        logger.info(
            f"Running {self.engine.name} for {contrast.name} "
            f"({sizes[contrast.group_a]} vs {sizes[contrast.group_b]} samples)"
        )

        fit = self.engine.fit(matrix, in_matrix, contrast)
        result = self.process_results(fit, list(in_matrix.index), threshold)

        if self.output_dir is not None:
            result.output_files.update(
                export_results(
                    result.all_genes, result.significant, self.output_dir, contrast.name
                )
            )

        result.execution_time = time.time() - start_time

        for line in result.summary().splitlines():
            logger.info(line)

        return result

    def process_results(
        self, fit: EngineFit, samples: list, padj_threshold: float
    ) -> DifferentialResult:
        """Annotate, merge normalized values, sort and filter engine output"""
        contrast = fit.contrast

        annotated = annotate_results(fit.results, self.annotation)
        merged = merge_normalized_counts(annotated, fit.normalized_counts, samples)
        all_genes = sort_by_effect(merged)
        significant = filter_significant(all_genes, padj_threshold)

        return DifferentialResult(
            contrast_name=contrast.name,
            group_a=contrast.group_a,
            group_b=contrast.group_b,
            padj_threshold=padj_threshold,
            all_genes=all_genes,
            significant=significant,
            fit=fit,
            n_genes=len(all_genes),
            n_tested=int(all_genes["pvalue"].notna().sum()),
            n_significant=len(significant),
            n_up_regulated=int(np.sum(significant["log2FoldChange"] > 0)),
            n_down_regulated=int(np.sum(significant["log2FoldChange"] < 0)),
        )
