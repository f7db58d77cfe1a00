"""
Differential expression module for HemaFlow

This module assigns cell lines to the two contrast groups, runs the
statistical engine (PyDESeq2), and turns its output into sorted, annotated
and significance-filtered report tables.
"""

from .analyzer import DifferentialAnalyzer, DifferentialResult
from .groups import assign_groups, group_sizes
from .methods import (BaseEngine, Contrast, EngineFit, PyDESeq2Engine,
                      scale_to_counts)
from .results import (annotate_results, export_results, filter_significant,
                      merge_normalized_counts, result_filenames,
                      sort_by_effect)

__all__ = [
    "DifferentialAnalyzer",
    "DifferentialResult",
    "assign_groups",
    "group_sizes",
    "BaseEngine",
    "PyDESeq2Engine",
    "Contrast",
    "EngineFit",
    "scale_to_counts",
    "annotate_results",
    "merge_normalized_counts",
    "sort_by_effect",
    "filter_significant",
    "export_results",
    "result_filenames",
]
