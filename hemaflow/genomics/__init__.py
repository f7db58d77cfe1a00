"""
Genomics data module for HemaFlow

This module provides functionality for:
- Loading the long-format cell line expression table
- Pivoting it into a gene x cell-line matrix and back
- Gene annotation lookup and gene token resolution
"""

from .annotations import GeneAnnotationTable
from .expression import (ExpressionSchema, flatten_expression,
                         gene_names_from_records, load_expression_table,
                         pivot_expression)

__all__ = [
    "ExpressionSchema",
    "load_expression_table",
    "pivot_expression",
    "flatten_expression",
    "gene_names_from_records",
    "GeneAnnotationTable",
]
