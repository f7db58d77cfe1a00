import numpy as np
import pandas as pd
import pytest

from hemaflow.exceptions import (AmbiguousGeneError, AnnotationLoadError,
                                 GeneNotFoundError)
from hemaflow.genomics import GeneAnnotationTable


def test_load(annotation):
    assert len(annotation) == 5
    assert "ENSG00000008394" in annotation
    assert annotation.has_ec_numbers


def test_resolve_unique_name(annotation):
    assert annotation.resolve("MGST1") == "ENSG00000008394"


def test_resolve_unknown_name(annotation):
    with pytest.raises(GeneNotFoundError) as excinfo:
        annotation.resolve("NOPE")
    assert excinfo.value.token == "NOPE"


def test_resolve_identifier(annotation):
    assert annotation.resolve("ENSG00000081237") == "ENSG00000081237"


def test_identifier_match_wins_over_name():
    table = pd.DataFrame(
        {"gene_id": ["ENSG1", "ENSG2"], "gene_name": ["ALPHA", "ENSG1"]}
    )
    assert GeneAnnotationTable(table).resolve("ENSG1") == "ENSG1"


def test_resolve_ambiguous_name(annotation):
    with pytest.raises(AmbiguousGeneError) as excinfo:
        annotation.resolve("LINC00595")
    assert excinfo.value.candidates == ["ENSG00000230417", "ENSG00000254647"]


def test_resolve_ambiguous_first(annotation):
    assert annotation.resolve("LINC00595", on_ambiguous="first") == "ENSG00000230417"


def test_resolve_invalid_policy(annotation):
    with pytest.raises(ValueError):
        annotation.resolve("MGST1", on_ambiguous="last")


def test_lookup_unknown_is_null(annotation):
    found = annotation.lookup(["ENSG00000008394", "ENSG99999999999"])

    assert list(found.index) == ["ENSG00000008394", "ENSG99999999999"]
    assert found.loc["ENSG00000008394", "ec_number"] == "2.5.1.18"
    assert pd.isna(found.loc["ENSG99999999999", "gene_name"])


def test_missing_file(tmp_path):
    with pytest.raises(AnnotationLoadError):
        GeneAnnotationTable.load(tmp_path / "missing.csv")


def test_missing_columns(tmp_path):
    path = tmp_path / "annotation.csv"
    path.write_text("id,symbol\nENSG1,ALPHA\n")

    with pytest.raises(AnnotationLoadError, match="lacks required columns"):
        GeneAnnotationTable.load(path)


def test_custom_columns_without_ec(tmp_path):
    path = tmp_path / "annotation.csv"
    path.write_text("id,symbol\nENSG1,ALPHA\nENSG2,BETA\n")

    annotation = GeneAnnotationTable.load(path, id_column="id", name_column="symbol")

    assert not annotation.has_ec_numbers
    assert annotation.resolve("BETA") == "ENSG2"


def test_duplicate_ids_keep_first():
    table = pd.DataFrame(
        {"gene_id": ["ENSG1", "ENSG1", np.nan], "gene_name": ["ALPHA", "OMEGA", "NULL"]}
    )
    annotation = GeneAnnotationTable(table)

    assert len(annotation) == 1
    assert annotation.display_names()["ENSG1"] == "ALPHA"
