# ---
# jupyter:
#   jupytext:
#     text_representation:
#       extension: .py
#       format_name: percent
#   kernelspec:
#     display_name: Python 3
#     language: python
#     name: python3
# ---

# %% [markdown]
# # Hematopoietic vs non-hematopoietic cell lines
#
# Differential expression on the HPA cell-line TPM table. Positive
# log2FoldChange means higher expression in hematopoietic cell lines.

# %%
import matplotlib.pyplot as plt

from hemaflow.config import load_config
from hemaflow.differential import Contrast, DifferentialAnalyzer, assign_groups
from hemaflow.genomics import (ExpressionSchema, GeneAnnotationTable,
                               load_expression_table, pivot_expression)
from hemaflow.utils import setup_logging_from_config
from hemaflow.visualization import (plot_gene_expression, plot_pca,
                                    plot_top_de_heatmap,
                                    plot_top_variance_heatmap, plot_volcano)

config = load_config("../config/hematopoietic.yaml")
setup_logging_from_config(config.logging)

# %% [markdown]
# ## Load and reshape

# %%
schema = ExpressionSchema.from_config(config.data)
records = load_expression_table(config.expression_file, schema=schema)
matrix = pivot_expression(records, schema=schema)
matrix.iloc[:5, :5]

# %%
groups = config.sample_groups
samples = assign_groups(matrix.columns, groups.group_a_members, groups.group_a, groups.group_b)
samples.value_counts()

# %%
annotation = GeneAnnotationTable.load(config.annotation_file)

# %% [markdown]
# ## Differential expression

# %%
analyzer = DifferentialAnalyzer.from_config(config, annotation=annotation)
contrast = Contrast.from_sample_groups(groups)
result = analyzer.run_contrast(matrix, samples, contrast)
print(result.summary())

# %%
result.significant.head(20)

# %% [markdown]
# ## Figures

# %%
fig = plot_top_de_heatmap(result.all_genes, samples, labels=contrast.labels,
                          padj_threshold=result.padj_threshold)
plt.show()

# %%
fig = plot_top_variance_heatmap(result.fit.vst_counts, samples, annotation=annotation,
                                labels=contrast.labels)
plt.show()

# %%
fig = plot_pca(result.fit.vst_counts, samples, labels=contrast.labels)
plt.show()

# %%
fig = plot_volcano(result.all_genes, padj_threshold=result.padj_threshold,
                   label_by="log2fc", group_names=(contrast.group_a, contrast.group_b))
plt.show()

# %%
fig = plot_gene_expression("MGST1", result.fit.normalized_counts, samples,
                           annotation=annotation, labels=contrast.labels)
plt.show()
