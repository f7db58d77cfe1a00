import pandas as pd
import pytest
from conftest import FakeEngine

from hemaflow.config import Config
from hemaflow.differential import (Contrast, DifferentialAnalyzer,
                                   PyDESeq2Engine, assign_groups)
from hemaflow.exceptions import ContrastNotFoundError


@pytest.fixture
def scenario_samples():
    return assign_groups(["X", "Y", "Z"], {"X"}, "hematopoietic", "non_hematopoietic")


def test_two_gene_scenario(fake_engine, scenario_matrix, scenario_samples, contrast):
    analyzer = DifferentialAnalyzer(engine=fake_engine, padj_threshold=0.001)

    result = analyzer.run_contrast(scenario_matrix, scenario_samples, contrast)

    assert list(result.significant["gene_id"]) == ["gene1"]
    assert list(result.all_genes["gene_id"]) == ["gene1", "gene2"]
    assert result.n_tested == 2
    assert result.n_significant == 1
    assert result.n_up_regulated == 1
    assert result.n_down_regulated == 0
    assert result.contrast_name == "hematopoietic_vs_non_hematopoietic"


def test_normalized_columns_appended(fake_engine, scenario_matrix, scenario_samples, contrast):
    analyzer = DifferentialAnalyzer(engine=fake_engine)

    result = analyzer.run_contrast(scenario_matrix, scenario_samples, contrast)

    assert list(result.all_genes.columns[-3:]) == ["X", "Y", "Z"]
    assert result.all_genes.loc[0, "X"] == 10.0


def test_threshold_override(fake_engine, scenario_matrix, scenario_samples, contrast):
    analyzer = DifferentialAnalyzer(engine=fake_engine, padj_threshold=0.001)

    result = analyzer.run_contrast(
        scenario_matrix, scenario_samples, contrast, padj_threshold=0.6
    )

    assert result.n_significant == 2
    assert result.padj_threshold == 0.6


def test_empty_group_raises_before_fitting(fake_engine, scenario_matrix, contrast):
    samples = assign_groups(["X", "Y", "Z"], set(), "hematopoietic", "non_hematopoietic")
    analyzer = DifferentialAnalyzer(engine=fake_engine)

    with pytest.raises(ContrastNotFoundError) as excinfo:
        analyzer.run_contrast(scenario_matrix, samples, contrast)

    assert excinfo.value.empty_groups == ["hematopoietic"]
    assert fake_engine.calls == []


def test_unknown_contrast_label(fake_engine, scenario_matrix, scenario_samples):
    analyzer = DifferentialAnalyzer(engine=fake_engine)

    with pytest.raises(ContrastNotFoundError):
        analyzer.run_contrast(
            scenario_matrix, scenario_samples, Contrast("group", "lymphoid", "non_hematopoietic")
        )


def test_exports_tables(tmp_path, fake_engine, scenario_matrix, scenario_samples, contrast):
    analyzer = DifferentialAnalyzer(engine=fake_engine, output_dir=tmp_path)

    result = analyzer.run_contrast(scenario_matrix, scenario_samples, contrast)

    assert result.output_files["all_genes"] == (
        tmp_path / "hematopoietic_vs_non_hematopoietic_allgenes.csv"
    )
    assert result.output_files["significant"] == (
        tmp_path / "hematopoietic_vs_non_hematopoietic_padj_cutoff.csv"
    )
    assert len(pd.read_csv(result.output_files["significant"])) == 1


def test_summary(fake_engine, scenario_matrix, scenario_samples, contrast):
    result = DifferentialAnalyzer(engine=fake_engine).run_contrast(
        scenario_matrix, scenario_samples, contrast
    )

    summary = result.summary()

    assert "hematopoietic_vs_non_hematopoietic" in summary
    assert "Genes: 2 (2 with a p-value)" in summary
    assert "padj < 0.001): 1" in summary


def test_untested_genes_counted_separately(scenario_matrix, scenario_samples, scenario_results, contrast):
    results = scenario_results.copy()
    results.loc["gene2", ["stat", "pvalue", "padj"]] = float("nan")
    engine = FakeEngine(results)

    result = DifferentialAnalyzer(engine=engine).run_contrast(
        scenario_matrix, scenario_samples, contrast
    )

    assert result.n_genes == 2
    assert result.n_tested == 1
    assert len(result.all_genes) == 2
    assert "Genes: 2 (1 with a p-value)" in result.summary()


def test_from_config(tmp_path):
    config = Config(
        output_dir=str(tmp_path),
        n_threads=2,
        differential={"padj_threshold": 0.01, "scale_factor": 10},
    )

    analyzer = DifferentialAnalyzer.from_config(config)

    assert analyzer.padj_threshold == 0.01
    assert analyzer.output_dir == tmp_path / "tables"
    assert isinstance(analyzer.engine, PyDESeq2Engine)
    assert analyzer.engine.scale_factor == 10
    assert analyzer.engine.n_cpus == 2
