"""
Expression table loading and reshaping for HemaFlow

The input is a long-format table with one row per (gene, cell line) pair.
It is pivoted into a gene x cell-line matrix keyed by the stable gene
identifier. Columns are always selected by name through an
``ExpressionSchema``; positions in the file are only checked, never used.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

import numpy as np
import pandas as pd

from ..exceptions import DuplicateKeyError, ParseError
from ..utils import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class ExpressionSchema:
    """Column layout of the long expression table"""

    expected_columns: Tuple[str, ...] = (
        "Gene",
        "Gene name",
        "Cell line",
        "TPM",
        "pTPM",
        "nTPM",
    )
    gene_id_column: str = "Gene"
    gene_name_column: str = "Gene name"
    sample_column: str = "Cell line"
    value_column: str = "TPM"

    @property
    def key_columns(self) -> List[str]:
        return [self.gene_id_column, self.sample_column]

    @classmethod
    def from_config(cls, data_config: Dict[str, Any]) -> "ExpressionSchema":
        """Build from the ``data`` section of a Config"""
        defaults = cls()
        return cls(
            expected_columns=tuple(
                data_config.get("expected_columns", defaults.expected_columns)
            ),
            gene_id_column=data_config.get("gene_id_column", defaults.gene_id_column),
            gene_name_column=data_config.get(
                "gene_name_column", defaults.gene_name_column
            ),
            sample_column=data_config.get("sample_column", defaults.sample_column),
            value_column=data_config.get("value_column", defaults.value_column),
        )


def load_expression_table(
    path: Union[str, Path],
    schema: Optional[ExpressionSchema] = None,
    sep: str = "\t",
) -> pd.DataFrame:
    """
    Load the long-format expression table

    Args:
        path: Tab-separated file with one row per (gene, cell line)
        schema: Expected column layout
        sep: Field separator

    Returns:
        DataFrame of expression records with the value column as float

    Raises:
        ParseError: file missing, header mismatch, bad rows, null keys or
            non-numeric values
    """
    schema = schema or ExpressionSchema()
    path = Path(path)

    logger.info(f"Loading expression table from {path}")

    try:
        with open(path, "r", newline="") as handle:
            header = handle.readline().rstrip("\r\n").split(sep)
            if header != list(schema.expected_columns):
                raise ParseError(
                    f"unexpected header {header}; expected {list(schema.expected_columns)}",
                    path=str(path),
                )

            n_fields = len(header)
            for line_number, line in enumerate(handle, start=2):
                line = line.rstrip("\r\n")
                if not line:
                    continue
                found = len(line.split(sep))
                if found != n_fields:
                    raise ParseError(
                        f"line {line_number} has {found} fields; expected {n_fields}",
                        path=str(path),
                    )

            handle.seek(0)
            records = pd.read_csv(
                handle,
                sep=sep,
                dtype={
                    schema.gene_id_column: str,
                    schema.gene_name_column: str,
                    schema.sample_column: str,
                },
            )
    except OSError as e:
        raise ParseError(f"cannot read expression table: {e}", path=str(path)) from e
    except pd.errors.ParserError as e:
        raise ParseError(f"malformed row: {e}", path=str(path)) from e

    if records.empty:
        raise ParseError("expression table has no records", path=str(path))

    try:
        records[schema.value_column] = pd.to_numeric(records[schema.value_column])
    except (TypeError, ValueError) as e:
        raise ParseError(
            f"non-numeric value in column {schema.value_column!r}: {e}", path=str(path)
        ) from e

    required = schema.key_columns + [schema.value_column]
    null_rows = records[required].isna().any(axis=1)
    if null_rows.any():
        first_bad = int(np.flatnonzero(null_rows.to_numpy())[0]) + 2
        raise ParseError(
            f"{int(null_rows.sum())} records lack a gene id, cell line or value "
            f"(first at line {first_bad})",
            path=str(path),
        )

    logger.info(
        f"Loaded {len(records)} records: "
        f"{records[schema.gene_id_column].nunique()} genes x "
        f"{records[schema.sample_column].nunique()} cell lines"
    )

    return records


def pivot_expression(
    records: pd.DataFrame, schema: Optional[ExpressionSchema] = None
) -> pd.DataFrame:
    """
    Pivot expression records into a gene x cell-line matrix

    Duplicate (gene, cell line) records are collapsed when their values are
    identical and rejected when they differ. Missing combinations are NaN.
    Rows and columns keep the order in which identifiers first appear.

    Args:
        records: Long-format expression records
        schema: Column layout of ``records``

    Returns:
        Matrix indexed by ``gene_id`` with one column per cell line

    Raises:
        ValueError: empty input or records with null keys/values
        DuplicateKeyError: conflicting values for the same (gene, cell line)
    """
    schema = schema or ExpressionSchema()
    gene_col, sample_col, value_col = (
        schema.gene_id_column,
        schema.sample_column,
        schema.value_column,
    )

    if records.empty:
        raise ValueError("Cannot reshape an empty expression table")

    if records[[gene_col, sample_col, value_col]].isna().to_numpy().any():
        raise ValueError("Expression records must have a gene id, cell line and value")

    duplicated = records.duplicated(subset=schema.key_columns, keep=False)
    if duplicated.any():
        distinct_values = records.loc[duplicated].groupby(
            schema.key_columns, sort=False
        )[value_col].nunique()
        conflicts = distinct_values[distinct_values > 1]
        if len(conflicts) > 0:
            raise DuplicateKeyError(list(conflicts.index))

        logger.warning(
            f"Collapsing {int(duplicated.sum())} identical duplicate records "
            f"into {len(distinct_values)} cells"
        )

    unique_records = records.drop_duplicates(subset=schema.key_columns, keep="first")

    matrix = unique_records.pivot(index=gene_col, columns=sample_col, values=value_col)
    matrix = matrix.reindex(
        index=pd.unique(unique_records[gene_col]),
        columns=pd.unique(unique_records[sample_col]),
    ).astype(float)
    matrix.index.name = "gene_id"
    matrix.columns.name = "cell_line"

    n_missing = int(matrix.isna().sum().sum())
    if n_missing:
        logger.warning(f"{n_missing} (gene, cell line) combinations have no record")

    logger.info(f"Expression matrix: {matrix.shape[0]} genes x {matrix.shape[1]} cell lines")
    return matrix


def flatten_expression(
    matrix: pd.DataFrame, schema: Optional[ExpressionSchema] = None
) -> pd.DataFrame:
    """Turn a gene x cell-line matrix back into long records, dropping NaN cells"""
    schema = schema or ExpressionSchema()

    long_form = (
        matrix.rename_axis(index=schema.gene_id_column, columns=None)
        .reset_index()
        .melt(
            id_vars=schema.gene_id_column,
            var_name=schema.sample_column,
            value_name=schema.value_column,
        )
    )
    return long_form.dropna(subset=[schema.value_column]).reset_index(drop=True)


def gene_names_from_records(
    records: pd.DataFrame, schema: Optional[ExpressionSchema] = None
) -> pd.Series:
    """First display name seen for each gene identifier"""
    schema = schema or ExpressionSchema()
    names = records.drop_duplicates(subset=schema.gene_id_column, keep="first")
    series = names.set_index(schema.gene_id_column)[schema.gene_name_column]
    series.index.name = "gene_id"
    return series.rename("gene_name")
