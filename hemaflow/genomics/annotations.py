"""
Gene annotation lookup for HemaFlow

The annotation table maps stable gene identifiers to display names and,
when available, enzyme classification (EC) codes. It is loaded once and
shared read-only by every component that needs names.
"""

from pathlib import Path
from typing import Iterable, List, Optional, Union

import pandas as pd

from ..exceptions import AmbiguousGeneError, AnnotationLoadError, GeneNotFoundError
from ..utils import get_logger

logger = get_logger(__name__)

AMBIGUITY_POLICIES = ("raise", "first")


class GeneAnnotationTable:
    """Read-only gene identifier -> display name (and EC code) lookup"""

    def __init__(self, table: pd.DataFrame):
        """
        Initialize from a normalized table

        Args:
            table: DataFrame with ``gene_id`` and ``gene_name`` columns and an
                optional ``ec_number`` column, in annotation-file order
        """
        missing = {"gene_id", "gene_name"} - set(table.columns)
        if missing:
            raise AnnotationLoadError(f"Annotation table lacks columns: {sorted(missing)}")

        table = table.dropna(subset=["gene_id"]).reset_index(drop=True)

        duplicated = table["gene_id"].duplicated(keep="first")
        if duplicated.any():
            logger.warning(
                f"{int(duplicated.sum())} duplicate gene identifiers in annotation; "
                f"keeping the first entry of each"
            )

        self._table = table
        self._by_id = table.loc[~duplicated].set_index("gene_id")

    @classmethod
    def load(
        cls,
        path: Union[str, Path],
        id_column: str = "ensembl_gene_id",
        name_column: str = "gene_name",
        ec_column: Optional[str] = "ec_number",
    ) -> "GeneAnnotationTable":
        """
        Load a comma-separated annotation file

        Args:
            path: CSV file with at least the identifier and name columns
            id_column: Column holding gene identifiers
            name_column: Column holding display names
            ec_column: Optional enzyme classification column

        Raises:
            AnnotationLoadError: file missing, unreadable, or lacking columns
        """
        path = Path(path)
        logger.info(f"Loading gene annotations from {path}")

        try:
            with open(path, "r", newline="") as handle:
                raw = pd.read_csv(handle, dtype=str)
        except (OSError, UnicodeDecodeError) as e:
            raise AnnotationLoadError(f"Cannot read annotation file {path}: {e}") from e
        except (pd.errors.ParserError, pd.errors.EmptyDataError) as e:
            raise AnnotationLoadError(f"Malformed annotation file {path}: {e}") from e

        missing = [c for c in (id_column, name_column) if c not in raw.columns]
        if missing:
            raise AnnotationLoadError(
                f"Annotation file {path} lacks required columns: {missing}"
            )

        columns = {id_column: "gene_id", name_column: "gene_name"}
        if ec_column and ec_column in raw.columns:
            columns[ec_column] = "ec_number"

        table = raw[list(columns)].rename(columns=columns)
        annotation = cls(table)

        logger.info(f"Loaded {len(annotation)} gene annotations")
        return annotation

    def __len__(self) -> int:
        return len(self._by_id)

    def __contains__(self, gene_id: object) -> bool:
        return gene_id in self._by_id.index

    @property
    def has_ec_numbers(self) -> bool:
        return "ec_number" in self._by_id.columns

    @property
    def table(self) -> pd.DataFrame:
        return self._table.copy()

    def display_names(self) -> pd.Series:
        """Display name per gene identifier"""
        return self._by_id["gene_name"].copy()

    def lookup(self, gene_ids: Iterable[str]) -> pd.DataFrame:
        """Annotation columns for ``gene_ids``; unknown ids get NaN"""
        gene_ids = list(gene_ids)
        found = self._by_id.reindex(gene_ids)
        found.index.name = "gene_id"
        return found

    def resolve(self, token: str, on_ambiguous: str = "raise") -> str:
        """
        Resolve a gene identifier or display name to one identifier

        An identifier match always wins. Otherwise the token is matched
        against display names; several matches raise AmbiguousGeneError,
        or return the first in file order when ``on_ambiguous="first"``.
        """
        if on_ambiguous not in AMBIGUITY_POLICIES:
            raise ValueError(
                f"on_ambiguous must be one of {AMBIGUITY_POLICIES}, got {on_ambiguous!r}"
            )

        token = str(token).strip()
        if token in self._by_id.index:
            return token

        candidates: List[str] = list(
            pd.unique(self._table.loc[self._table["gene_name"] == token, "gene_id"])
        )

        if not candidates:
            raise GeneNotFoundError(token)

        if len(candidates) > 1:
            if on_ambiguous == "raise":
                raise AmbiguousGeneError(token, candidates)
            logger.warning(
                f"{token} maps to {len(candidates)} identifiers; using {candidates[0]}"
            )

        return candidates[0]
