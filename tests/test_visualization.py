import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
import pytest

from hemaflow.exceptions import (AmbiguousGeneError, GeneNotFoundError,
                                 InvalidLabelModeError)
from hemaflow.genomics import GeneAnnotationTable
from hemaflow.visualization import (compute_pca, gene_expression_frame,
                                    gene_labels, group_palette,
                                    order_samples_by_group,
                                    plot_gene_expression, plot_pca,
                                    plot_top_de_heatmap,
                                    plot_top_variance_heatmap, plot_volcano,
                                    save_figure, scale_rows,
                                    select_top_de_genes,
                                    select_volcano_labels, symmetric_limits,
                                    top_variance_genes)


@pytest.fixture
def signed_results():
    return pd.DataFrame(
        {
            "gene_id": ["a", "b", "c", "d", "e", "f"],
            "gene_name": ["A", None, "C", "D", "E", "F"],
            "log2FoldChange": [4.0, -5.0, 1.0, -0.5, 2.0, np.nan],
            "padj": [1e-4, 1e-8, 1e-12, 1e-3, 0.2, 1e-9],
        }
    )


class TestHelpers:
    def test_group_palette(self):
        palette = group_palette(["A", "B"])
        assert list(palette) == ["A", "B"]
        assert palette["A"] != palette["B"]
        assert palette["A"].startswith("#")

    def test_symmetric_limits(self):
        assert symmetric_limits(np.array([[-3.0, 2.0], [np.nan, 1.0]])) == 3.0
        assert symmetric_limits(np.array([0.1, -0.2])) == 1.0

    def test_order_samples_by_group(self):
        samples = pd.Series(["B", "A", "B", "A", "C"], index=["s1", "s2", "s3", "s4", "s5"])
        assert order_samples_by_group(samples, ["A", "B"]) == ["s2", "s4", "s1", "s3", "s5"]

    def test_gene_labels_fall_back_to_identifier(self, signed_results):
        assert list(gene_labels(signed_results))[:2] == ["A", "b"]

    def test_scale_rows(self):
        matrix = pd.DataFrame({"x": [1.0, 5.0], "y": [3.0, 5.0]}, index=["var", "flat"])
        scaled = scale_rows(matrix)

        np.testing.assert_allclose(scaled.loc["var"], [-0.7071068, 0.7071068], rtol=1e-6)
        assert (scaled.loc["flat"] == 0).all()

    def test_top_variance_genes(self):
        matrix = pd.DataFrame({"x": [0.0, 0.0, 5.0], "y": [1.0, 10.0, 5.0]}, index=["a", "b", "c"])
        assert list(top_variance_genes(matrix, 2)) == ["b", "a"]

    def test_save_figure(self, tmp_path):
        fig, _ = plt.subplots()
        paths = save_figure(fig, tmp_path / "figures", "blank", formats=("png", "pdf"), dpi=50)

        assert [p.name for p in paths] == ["blank.png", "blank.pdf"]
        assert all(p.exists() for p in paths)


class TestSelection:
    def test_top_de_genes_by_absolute_effect(self, signed_results):
        top = select_top_de_genes(signed_results, n_genes=3, padj_threshold=0.01)
        assert list(top["gene_id"]) == ["b", "a", "c"]

    def test_top_de_genes_strict_threshold(self, signed_results):
        top = select_top_de_genes(signed_results, n_genes=10, padj_threshold=1e-3)
        assert "d" not in set(top["gene_id"])

    def test_volcano_labels_by_padj(self, signed_results):
        labels = select_volcano_labels(signed_results, n_labels=1, label_by="padj")

        assert labels.set_index("side")["gene_id"].to_dict() == {"up": "c", "down": "b"}

    def test_volcano_labels_by_log2fc(self, signed_results):
        labels = select_volcano_labels(signed_results, n_labels=2, label_by="log2fc")

        up = labels.loc[labels["side"] == "up", "gene_id"].tolist()
        down = labels.loc[labels["side"] == "down", "gene_id"].tolist()
        assert up == ["a", "e"]
        assert down == ["b", "d"]

    def test_volcano_labels_skip_missing_effect(self, signed_results):
        labels = select_volcano_labels(signed_results, n_labels=10)
        assert "f" not in set(labels["gene_id"])

    def test_invalid_label_mode(self, signed_results):
        with pytest.raises(InvalidLabelModeError):
            select_volcano_labels(signed_results, label_by="pvalue")


class TestPlots:
    def test_top_de_heatmap(self, plot_data):
        before = plot_data["results"].copy()

        fig = plot_top_de_heatmap(
            plot_data["results"], plot_data["samples"], labels=plot_data["labels"], n_genes=10
        )

        assert isinstance(fig, plt.Figure)
        pd.testing.assert_frame_equal(plot_data["results"], before)

    def test_top_de_heatmap_columns_in_group_order(self, plot_data):
        interleaved = ["A-431", "HEL", "HeLa", "K-562", "MCF7", "THP-1", "U-2 OS", "U-937"]
        samples = plot_data["samples"].reindex(interleaved)

        fig = plot_top_de_heatmap(
            plot_data["results"], samples, labels=plot_data["labels"], n_genes=10
        )
        fig.canvas.draw()

        tick_rows = [[t.get_text() for t in ax.get_xticklabels()] for ax in fig.axes]
        columns = next(row for row in tick_rows if set(row) == set(interleaved))
        assert columns == [
            "HEL", "K-562", "THP-1", "U-937",
            "A-431", "HeLa", "MCF7", "U-2 OS",
        ]

    def test_top_de_heatmap_without_significant_genes(self, plot_data):
        results = plot_data["results"].assign(padj=0.9)
        with pytest.raises(ValueError):
            plot_top_de_heatmap(results, plot_data["samples"])

    def test_top_variance_heatmap(self, plot_data):
        annotation = GeneAnnotationTable(
            plot_data["results"][["gene_id", "gene_name"]].iloc[:10]
        )
        fig = plot_top_variance_heatmap(
            plot_data["vst"], plot_data["samples"], annotation=annotation, n_genes=15
        )
        assert isinstance(fig, plt.Figure)

    def test_compute_pca(self, plot_data):
        result = compute_pca(plot_data["vst"], plot_data["samples"], ntop=20)

        assert list(result.coordinates.columns) == ["PC1", "PC2", "group"]
        assert list(result.coordinates.index) == list(plot_data["samples"].index)
        assert len(result.genes_used) == 20
        assert result.axis_label(0).startswith("PC1: ")
        assert result.explained_variance_ratio[0] >= result.explained_variance_ratio[1]

    def test_pca_plot(self, plot_data):
        fig = plot_pca(plot_data["vst"], plot_data["samples"], labels=plot_data["labels"])
        assert isinstance(fig, plt.Figure)

    def test_volcano(self, plot_data):
        before = plot_data["results"].copy()

        fig = plot_volcano(plot_data["results"], n_labels=3, label_by="log2fc")

        assert isinstance(fig, plt.Figure)
        pd.testing.assert_frame_equal(plot_data["results"], before)

    def test_volcano_invalid_mode_draws_nothing(self, plot_data):
        open_before = plt.get_fignums()

        with pytest.raises(InvalidLabelModeError):
            plot_volcano(plot_data["results"], label_by="stat")

        assert plt.get_fignums() == open_before


class TestGenePlot:
    def test_expression_frame(self, plot_data):
        frame = gene_expression_frame(
            "ENSG00000000000", plot_data["normalized"], plot_data["samples"]
        )

        assert list(frame.columns) == ["cell_line", "group", "expression"]
        assert len(frame) == 8
        assert frame.loc[0, "group"] == "hematopoietic"

    def test_plot_by_display_name(self, plot_data):
        annotation = GeneAnnotationTable(plot_data["results"][["gene_id", "gene_name"]])

        fig = plot_gene_expression(
            "GENE3", plot_data["normalized"], plot_data["samples"], annotation=annotation
        )

        assert isinstance(fig, plt.Figure)
        assert "GENE3" in fig.axes[0].get_title()

    def test_unknown_gene(self, plot_data):
        annotation = GeneAnnotationTable(plot_data["results"][["gene_id", "gene_name"]])
        with pytest.raises(GeneNotFoundError):
            plot_gene_expression(
                "NOPE", plot_data["normalized"], plot_data["samples"], annotation=annotation
            )

    def test_gene_absent_from_matrix(self, plot_data):
        annotation = GeneAnnotationTable(
            pd.DataFrame({"gene_id": ["ENSG99999999999"], "gene_name": ["GHOST"]})
        )
        with pytest.raises(GeneNotFoundError):
            plot_gene_expression(
                "GHOST", plot_data["normalized"], plot_data["samples"], annotation=annotation
            )

    def test_ambiguous_name(self, plot_data):
        table = plot_data["results"][["gene_id", "gene_name"]].copy()
        table.loc[1, "gene_name"] = "GENE0"
        annotation = GeneAnnotationTable(table)

        with pytest.raises(AmbiguousGeneError):
            plot_gene_expression(
                "GENE0", plot_data["normalized"], plot_data["samples"], annotation=annotation
            )

        fig = plot_gene_expression(
            "GENE0",
            plot_data["normalized"],
            plot_data["samples"],
            annotation=annotation,
            on_ambiguous="first",
        )
        assert "ENSG00000000000" in fig.axes[0].get_title()
