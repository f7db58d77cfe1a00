"""
Annotation, ordering, filtering and export of differential expression results
"""

from pathlib import Path
from typing import Dict, List, Optional, Union

import pandas as pd

from ..genomics import GeneAnnotationTable
from ..utils import get_logger

logger = get_logger(__name__)


def result_filenames(contrast_name: str) -> Dict[str, str]:
    """File names of the two tables written per contrast"""
    return {
        "all_genes": f"{contrast_name}_allgenes.csv",
        "significant": f"{contrast_name}_padj_cutoff.csv",
    }


def annotate_results(
    results: pd.DataFrame, annotation: Optional[GeneAnnotationTable] = None
) -> pd.DataFrame:
    """
    Attach display names (and EC codes) by gene identifier

    Genes without an annotation keep a null name; no row is dropped.

    Args:
        results: Engine results indexed by gene identifier

    Returns:
        Copy with ``gene_id``, ``gene_name`` (and ``ec_number``) as leading columns
    """
    annotated = results.copy()
    annotated.index.name = "gene_id"

    if annotation is not None:
        lookup = annotation.lookup(annotated.index)
        extra = ["gene_name"] + (["ec_number"] if annotation.has_ec_numbers else [])
        for position, column in enumerate(extra):
            annotated.insert(position, column, lookup[column].to_numpy())
    else:
        annotated.insert(0, "gene_name", None)

    n_unnamed = int(annotated["gene_name"].isna().sum())
    if n_unnamed:
        logger.info(f"{n_unnamed} genes have no display name in the annotation")

    return annotated.reset_index()


def merge_normalized_counts(
    results: pd.DataFrame, normalized_counts: pd.DataFrame, samples: List[str]
) -> pd.DataFrame:
    """Append one normalized expression column per sample, joined on gene_id"""
    clashes = set(samples) & set(results.columns)
    if clashes:
        raise ValueError(f"Sample names clash with result columns: {sorted(clashes)}")

    missing = [s for s in samples if s not in normalized_counts.columns]
    if missing:
        raise KeyError(f"Normalized counts lack samples: {missing}")

    values = normalized_counts.reindex(results["gene_id"])[samples]
    merged = results.copy()
    for sample in samples:
        merged[sample] = values[sample].to_numpy()

    return merged


def sort_by_effect(results: pd.DataFrame) -> pd.DataFrame:
    """Order by log2FoldChange descending; ties keep their order, NaN last"""
    return results.sort_values(
        "log2FoldChange", ascending=False, kind="mergesort", na_position="last"
    ).reset_index(drop=True)


def filter_significant(results: pd.DataFrame, padj_threshold: float) -> pd.DataFrame:
    """Rows with padj strictly below the threshold; NaN padj never passes"""
    if not 0 < padj_threshold <= 1:
        raise ValueError(f"padj_threshold must be in (0, 1], got {padj_threshold}")

    return results.loc[results["padj"] < padj_threshold].copy()


def export_results(
    all_genes: pd.DataFrame,
    significant: pd.DataFrame,
    output_dir: Union[str, Path],
    contrast_name: str,
) -> Dict[str, Path]:
    """Write the all-genes and significant tables as CSV"""
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    output_files = {}
    tables = {"all_genes": all_genes, "significant": significant}

    for key, filename in result_filenames(contrast_name).items():
        path = output_dir / filename
        with open(path, "w", newline="") as handle:
            tables[key].to_csv(handle, index=False)
        output_files[key] = path

    logger.info(f"Results saved: {len(output_files)} files for {contrast_name}")
    return output_files
