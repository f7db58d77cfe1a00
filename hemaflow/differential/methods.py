"""
Differential expression engines

The statistical model is delegated to an external library. An engine takes
the expression matrix, the sample groups and a two-group contrast, and
returns an ``EngineFit`` whose results table follows the DESeq2 column
convention (baseMean, log2FoldChange, lfcSE, stat, pvalue, padj). A positive
log2FoldChange always means higher expression in the first group of the
contrast.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, List, Optional

import numpy as np
import pandas as pd
from pydeseq2.dds import DeseqDataSet
from pydeseq2.default_inference import DefaultInference
from pydeseq2.ds import DeseqStats

from ..config import SampleGroupConfig
from ..utils import get_logger

logger = get_logger(__name__)

RESULT_COLUMNS = ["baseMean", "log2FoldChange", "lfcSE", "stat", "pvalue", "padj"]


@dataclass(frozen=True)
class Contrast:
    """Two-group comparison: ``group_a`` tested against ``group_b``"""

    factor: str
    group_a: str
    group_b: str

    @property
    def name(self) -> str:
        return f"{self.group_a}_vs_{self.group_b}"

    @property
    def labels(self) -> List[str]:
        return [self.group_a, self.group_b]

    def as_list(self) -> List[str]:
        return [self.factor, self.group_a, self.group_b]

    @classmethod
    def from_sample_groups(cls, groups: SampleGroupConfig) -> "Contrast":
        return cls(factor=groups.factor, group_a=groups.group_a, group_b=groups.group_b)


@dataclass
class EngineFit:
    """Output of a fitted engine"""

    contrast: Contrast

    # Per-gene statistics indexed by gene_id
    results: pd.DataFrame

    # genes x samples
    normalized_counts: pd.DataFrame
    vst_counts: Optional[pd.DataFrame] = None

    # Live model object of the underlying library
    model: Any = None


class BaseEngine(ABC):
    """Base class for differential expression engines"""

    name = "base"

    @abstractmethod
    def fit(
        self, matrix: pd.DataFrame, sample_annotation: pd.Series, contrast: Contrast
    ) -> EngineFit:
        """Fit the model and test ``contrast``"""


def scale_to_counts(matrix: pd.DataFrame, scale_factor: float = 100) -> pd.DataFrame:
    """
    Turn a TPM matrix into integer pseudo-counts

    TPM values are multiplied by ``scale_factor`` and rounded. Genes with a
    missing value in any sample are dropped since count models cannot take
    NaN.
    """
    if scale_factor <= 0:
        raise ValueError(f"scale_factor must be positive, got {scale_factor}")

    complete = matrix.dropna(axis=0, how="any")
    n_dropped = len(matrix) - len(complete)
    if n_dropped:
        logger.warning(f"Dropping {n_dropped} genes with missing values before fitting")

    if (complete.to_numpy() < 0).any():
        raise ValueError("Expression values must be non-negative")

    return np.rint(complete * scale_factor).astype(np.int64)


class PyDESeq2Engine(BaseEngine):
    """DESeq2 negative-binomial Wald test through PyDESeq2"""

    name = "PyDESeq2"

    def __init__(
        self,
        scale_factor: float = 100,
        fit_type: str = "parametric",
        n_cpus: int = 1,
        compute_vst: bool = True,
        quiet: bool = True,
    ):
        self.scale_factor = scale_factor
        self.fit_type = fit_type
        self.n_cpus = n_cpus
        self.compute_vst = compute_vst
        self.quiet = quiet

    def fit(
        self, matrix: pd.DataFrame, sample_annotation: pd.Series, contrast: Contrast
    ) -> EngineFit:
        samples = [s for s in sample_annotation.index if s in matrix.columns]
        counts = scale_to_counts(matrix[samples], self.scale_factor)

        metadata = pd.DataFrame(
            {contrast.factor: sample_annotation.loc[samples].astype(str)},
            index=pd.Index(samples),
        )

        logger.info(
            f"Fitting DESeq2 on {counts.shape[0]} genes x {counts.shape[1]} samples "
            f"for {contrast.name}"
        )

        inference = DefaultInference(n_cpus=self.n_cpus)

        # PyDESeq2 expects samples x genes
        dds = DeseqDataSet(
            counts=counts.T,
            metadata=metadata,
            design=f"~{contrast.factor}",
            fit_type=self.fit_type,
            inference=inference,
            quiet=self.quiet,
        )
        dds.deseq2()

        stat_res = DeseqStats(
            dds, contrast=contrast.as_list(), inference=inference, quiet=self.quiet
        )
        stat_res.summary()

        results = stat_res.results_df.copy()
        results.index.name = "gene_id"

        normalized = pd.DataFrame(
            dds.layers["normed_counts"], index=dds.obs_names, columns=dds.var_names
        ).T
        normalized.index.name = "gene_id"

        vst_counts = None
        if self.compute_vst:
            dds.vst(use_design=False)
            vst_counts = pd.DataFrame(
                dds.layers["vst_counts"], index=dds.obs_names, columns=dds.var_names
            ).T
            vst_counts.index.name = "gene_id"

        return EngineFit(
            contrast=contrast,
            results=results[RESULT_COLUMNS],
            normalized_counts=normalized,
            vst_counts=vst_counts,
            model=dds,
        )
