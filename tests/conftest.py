"""
Shared fixtures for HemaFlow tests
"""

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
import pytest

from hemaflow.differential import BaseEngine, Contrast, EngineFit
from hemaflow.differential.methods import RESULT_COLUMNS
from hemaflow.genomics import GeneAnnotationTable

HEADER = ["Gene", "Gene name", "Cell line", "TPM", "pTPM", "nTPM"]

# Three genes across four cell lines, HEL and K-562 hematopoietic
LONG_ROWS = [
    ("ENSG00000000003", "TSPAN6", "A-431", 21.3),
    ("ENSG00000000003", "TSPAN6", "HEL", 0.4),
    ("ENSG00000000003", "TSPAN6", "K-562", 0.0),
    ("ENSG00000000003", "TSPAN6", "HeLa", 35.2),
    ("ENSG00000008394", "MGST1", "A-431", 80.5),
    ("ENSG00000008394", "MGST1", "HEL", 2.1),
    ("ENSG00000008394", "MGST1", "K-562", 1.7),
    ("ENSG00000008394", "MGST1", "HeLa", 64.0),
    ("ENSG00000081237", "PTPRC", "A-431", 0.1),
    ("ENSG00000081237", "PTPRC", "HEL", 150.0),
    ("ENSG00000081237", "PTPRC", "K-562", 98.4),
    ("ENSG00000081237", "PTPRC", "HeLa", 0.0),
]


def write_long_table(path, rows, header=HEADER):
    lines = ["\t".join(header)]
    for gene, name, cell_line, tpm in rows:
        lines.append("\t".join([gene, name, cell_line, str(tpm), str(tpm), str(tpm)]))
    path.write_text("\n".join(lines) + "\n")
    return path


@pytest.fixture
def long_table_file(tmp_path):
    return write_long_table(tmp_path / "rna_celline.tsv", LONG_ROWS)


@pytest.fixture
def long_records():
    return pd.DataFrame(
        [(g, n, c, float(v), float(v), float(v)) for g, n, c, v in LONG_ROWS],
        columns=HEADER,
    )


@pytest.fixture
def annotation_file(tmp_path):
    path = tmp_path / "annotation.csv"
    path.write_text(
        "ensembl_gene_id,gene_name,ec_number\n"
        "ENSG00000000003,TSPAN6,\n"
        "ENSG00000008394,MGST1,2.5.1.18\n"
        "ENSG00000081237,PTPRC,3.1.3.48\n"
        "ENSG00000230417,LINC00595,\n"
        "ENSG00000254647,LINC00595,\n"
    )
    return path


@pytest.fixture
def annotation(annotation_file):
    return GeneAnnotationTable.load(annotation_file)


@pytest.fixture
def contrast():
    return Contrast(factor="group", group_a="hematopoietic", group_b="non_hematopoietic")


@pytest.fixture
def scenario_matrix():
    """gene1/gene2 across cell lines X, Y, Z"""
    matrix = pd.DataFrame(
        {"X": [10.0, 4.0], "Y": [2.0, 5.0], "Z": [3.0, 6.0]},
        index=pd.Index(["gene1", "gene2"], name="gene_id"),
    )
    matrix.columns.name = "cell_line"
    return matrix


@pytest.fixture
def scenario_results():
    return pd.DataFrame(
        {
            "baseMean": [5.0, 5.0],
            "log2FoldChange": [2.0, -1.0],
            "lfcSE": [0.3, 0.8],
            "stat": [6.7, -1.25],
            "pvalue": [0.0001, 0.2],
            "padj": [0.0005, 0.5],
        },
        index=pd.Index(["gene1", "gene2"], name="gene_id"),
    )


class FakeEngine(BaseEngine):
    """Engine returning canned statistics for the genes of the matrix"""

    name = "fake"

    def __init__(self, results: pd.DataFrame):
        self.results = results
        self.calls = []

    def fit(self, matrix, sample_annotation, contrast):
        self.calls.append((matrix.copy(), sample_annotation.copy(), contrast))

        samples = [s for s in sample_annotation.index if s in matrix.columns]
        normalized = matrix[samples].astype(float)

        return EngineFit(
            contrast=contrast,
            results=self.results.reindex(matrix.index)[RESULT_COLUMNS],
            normalized_counts=normalized,
            vst_counts=np.log2(normalized + 1),
        )


@pytest.fixture
def fake_engine(scenario_results):
    return FakeEngine(scenario_results)


def make_results(gene_ids, seed=0):
    """Random DESeq2-shaped results for ``gene_ids``"""
    rng = np.random.default_rng(seed)
    n = len(gene_ids)
    lfc = rng.normal(0, 3, n)
    padj = rng.uniform(0, 0.01, n)
    return pd.DataFrame(
        {
            "baseMean": rng.uniform(1, 1000, n),
            "log2FoldChange": lfc,
            "lfcSE": rng.uniform(0.1, 1, n),
            "stat": lfc / 0.5,
            "pvalue": padj / 10,
            "padj": padj,
        },
        index=pd.Index(gene_ids, name="gene_id"),
    )


@pytest.fixture
def plot_data():
    """Annotated results and matrices for 40 genes over 8 cell lines"""
    rng = np.random.default_rng(7)
    genes = [f"ENSG{i:011d}" for i in range(40)]
    samples = ["HEL", "K-562", "THP-1", "U-937", "A-431", "HeLa", "MCF7", "U-2 OS"]
    annotation = pd.Series(
        ["hematopoietic"] * 4 + ["non_hematopoietic"] * 4,
        index=pd.Index(samples, name="cell_line"),
        name="group",
    )

    normalized = pd.DataFrame(
        rng.gamma(2.0, 50.0, size=(len(genes), len(samples))),
        index=pd.Index(genes, name="gene_id"),
        columns=samples,
    )
    vst = np.log2(normalized + 1)

    results = make_results(genes)
    results["padj"] = np.where(np.arange(len(genes)) < 25, results["padj"] / 100, 0.5)

    table = results.reset_index()
    table.insert(1, "gene_name", [f"GENE{i}" for i in range(len(genes))])
    for sample in samples:
        table[sample] = normalized[sample].to_numpy()

    return {
        "results": table,
        "normalized": normalized,
        "vst": vst,
        "samples": annotation,
        "labels": ["hematopoietic", "non_hematopoietic"],
    }


@pytest.fixture(autouse=True)
def close_figures():
    yield
    plt.close("all")
