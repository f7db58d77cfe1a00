"""
Core HemaFlow analysis orchestrator
"""

import re
import time
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import matplotlib.pyplot as plt

from .config import Config, load_config, validate_config
from .differential import Contrast, DifferentialAnalyzer, assign_groups, group_sizes
from .differential.methods import BaseEngine
from .genomics import (ExpressionSchema, GeneAnnotationTable,
                       gene_names_from_records, load_expression_table,
                       pivot_expression)
from .utils import (get_logger, log_execution_time,
                    setup_logging_from_config, validate_environment)
from .visualization import (plot_gene_expression, plot_pca,
                            plot_top_de_heatmap, plot_top_variance_heatmap,
                            plot_volcano, save_figure, select_top_de_genes)

logger = get_logger(__name__)

DEFAULT_STEPS = ["load_data", "differential_analysis", "visualization"]


class HemaFlowAnalysis:
    """
    Main orchestrator class for the HemaFlow differential expression pipeline

    This class coordinates the complete workflow from the long TPM table
    through the differential expression tables and figures.
    """

    def __init__(
        self,
        config: Union[str, Path, Config, Dict[str, Any]],
        log_level: Optional[str] = None,
        log_file: Optional[Union[str, Path]] = None,
        engine: Optional[BaseEngine] = None,
    ):
        """
        Initialize HemaFlow analysis

        Args:
            config: Configuration file path, Config object, or config dict
            log_level: Logging level, overrides ``logging.level`` from config
            log_file: Log file path, overrides ``logging.log_file`` from config
            engine: Differential expression engine, PyDESeq2 by default
        """
        if isinstance(config, (str, Path)):
            self.config = load_config(config)
        elif isinstance(config, dict):
            self.config = Config(**config)
        elif isinstance(config, Config):
            self.config = config
        else:
            raise ValueError(
                "Invalid config type. Expected str, Path, dict, or Config object"
            )

        setup_logging_from_config(self.config.logging, level=log_level, log_file=log_file)
        logger.info("Initializing HemaFlow analysis pipeline")

        self.engine = engine

        self._validate_environment()

        self.results: Dict[str, Any] = {}
        self.execution_times: Dict[str, float] = {}

        logger.info("HemaFlow pipeline initialized successfully")

    def _validate_environment(self) -> None:
        """Validate configuration and packages, create output directories"""

        logger.info("Validating environment...")

        issues = validate_config(self.config)
        if issues:
            logger.warning("Configuration issues found:")
            for issue in issues:
                logger.warning(f"  - {issue}")

        env_issues = validate_environment()
        if env_issues:
            logger.warning("Environment issues found:")
            for issue in env_issues:
                logger.warning(f"  - {issue}")

        if not self.config.output_dir:
            self.config.output_dir = "hemaflow_results"
            logger.warning(f"No output directory configured, using {self.config.output_dir}")

        for sub in ("tables", "figures"):
            (self.output_dir / sub).mkdir(parents=True, exist_ok=True)

    @property
    def output_dir(self) -> Path:
        return Path(self.config.output_dir)

    @property
    def figures_dir(self) -> Path:
        return self.output_dir / "figures"

    def run_full_pipeline(self, steps: Optional[List[str]] = None) -> Dict[str, Any]:
        """
        Run the complete HemaFlow analysis pipeline

        Args:
            steps: Pipeline steps to run, in order; all of them by default

        Returns:
            Dictionary containing the results of every step

        Raises:
            The first step failure, after it has been logged and the summary
            written
        """

        logger.info("=" * 60)
        logger.info("Starting HemaFlow analysis pipeline")
        logger.info("=" * 60)

        start_time = time.time()
        steps = steps or DEFAULT_STEPS

        try:
            for step in steps:
                step_start = time.time()
                logger.info(f"{'=' * 20} STEP: {step.upper()} {'=' * 20}")

                try:
                    if step == "load_data":
                        self.results[step] = self.load_data()
                    elif step == "differential_analysis":
                        self.results[step] = self.run_differential_analysis()
                    elif step == "visualization":
                        self.results[step] = self.run_visualization()
                    else:
                        raise ValueError(f"Unknown pipeline step: {step}")
                except Exception as e:
                    logger.error(f"Step {step} failed: {e}", exc_info=True)
                    self.results[step] = {"success": False, "error": str(e)}
                    raise

                self.execution_times[step] = time.time() - step_start
                logger.info(f"Step {step} completed in {self.execution_times[step]:.2f} seconds")
        finally:
            self.execution_times["total"] = time.time() - start_time
            self._create_pipeline_summary()

        logger.info("=" * 60)
        logger.info(
            f"HemaFlow pipeline completed in {self.execution_times['total']:.2f} seconds"
        )
        logger.info("=" * 60)

        return self.results

    @log_execution_time
    def load_data(self) -> Dict[str, Any]:
        """Load the long table, pivot it, label cell lines and load annotations"""

        if not self.config.expression_file:
            raise ValueError("No expression_file configured")

        schema = ExpressionSchema.from_config(self.config.data)
        records = load_expression_table(self.config.expression_file, schema=schema)
        matrix = pivot_expression(records, schema=schema)

        groups = self.config.sample_groups
        sample_annotation = assign_groups(
            matrix.columns, groups.group_a_members, groups.group_a, groups.group_b
        )

        unknown = sorted(groups.group_a_members - set(matrix.columns))
        if unknown:
            logger.warning(
                f"{len(unknown)} configured {groups.group_a} cell lines are not in "
                f"the data: {', '.join(unknown)}"
            )

        sizes = group_sizes(sample_annotation, groups.labels)
        logger.info(
            ", ".join(f"{label}: {size} cell lines" for label, size in sizes.items())
        )

        annotation = self._load_annotation(records, schema)

        return {
            "records": records,
            "matrix": matrix,
            "sample_annotation": sample_annotation,
            "annotation": annotation,
            "group_sizes": sizes,
            "success": True,
        }

    def _load_annotation(self, records, schema: ExpressionSchema) -> GeneAnnotationTable:
        """Annotation file when configured, else display names from the records"""
        data = self.config.data

        if self.config.annotation_file:
            return GeneAnnotationTable.load(
                self.config.annotation_file,
                id_column=data.get("annotation_id_column", "ensembl_gene_id"),
                name_column=data.get("annotation_name_column", "gene_name"),
                ec_column=data.get("annotation_ec_column", "ec_number"),
            )

        logger.info("No annotation file configured, using gene names from the expression table")
        names = gene_names_from_records(records, schema=schema)
        return GeneAnnotationTable(names.reset_index())

    @log_execution_time
    def run_differential_analysis(self) -> Dict[str, Any]:
        """Fit the configured contrast and export the result tables"""

        data = self._require("load_data")

        analyzer = DifferentialAnalyzer.from_config(
            self.config, annotation=data["annotation"], engine=self.engine
        )
        contrast = Contrast.from_sample_groups(self.config.sample_groups)

        result = analyzer.run_contrast(data["matrix"], data["sample_annotation"], contrast)

        return {"result": result, "contrast": contrast, "success": True}

    @log_execution_time
    def run_visualization(self) -> Dict[str, Any]:
        """Render and save every figure, closing each after saving"""

        data = self._require("load_data")
        diff = self._require("differential_analysis")

        result = diff["result"]
        contrast: Contrast = diff["contrast"]
        sample_annotation = data["sample_annotation"]
        vis = self.config.visualization
        heatmap_params = vis.get("heatmaps", {})
        volcano_params = vis.get("volcano", {})
        labels = contrast.labels

        figures: Dict[str, List[Path]] = {}

        n_top = heatmap_params.get("n_top_de_genes", 30)
        top = select_top_de_genes(
            result.all_genes, n_genes=n_top, padj_threshold=result.padj_threshold
        )
        if top.empty:
            logger.warning(
                f"Skipping top differential heatmap: no genes with padj < {result.padj_threshold:g}"
            )
        else:
            fig = plot_top_de_heatmap(
                result.all_genes,
                sample_annotation,
                labels=labels,
                n_genes=n_top,
                padj_threshold=result.padj_threshold,
                cmap=heatmap_params.get("colormap", "RdBu_r"),
            )
            figures["top_de_heatmap"] = self._save(fig, f"{contrast.name}_top{n_top}_heatmap")

        vst_counts = result.fit.vst_counts if result.fit is not None else None
        if vst_counts is None:
            logger.warning("No variance-stabilized matrix; skipping variance heatmap and PCA")
        else:
            fig = plot_top_variance_heatmap(
                vst_counts,
                sample_annotation,
                annotation=data["annotation"],
                labels=labels,
                n_genes=heatmap_params.get("n_top_variance_genes", 50),
                cmap=heatmap_params.get("colormap", "RdBu_r"),
            )
            figures["top_variance_heatmap"] = self._save(fig, "top_variance_heatmap")

            fig = plot_pca(
                vst_counts,
                sample_annotation,
                labels=labels,
                ntop=vis.get("pca", {}).get("ntop", 500),
            )
            figures["pca"] = self._save(fig, "pca")

        fig = plot_volcano(
            result.all_genes,
            padj_threshold=result.padj_threshold,
            n_labels=volcano_params.get("n_labels", 10),
            label_by=volcano_params.get("label_by", "padj"),
            point_size=volcano_params.get("point_size", 8),
            alpha=volcano_params.get("alpha", 0.6),
            group_names=(contrast.group_a, contrast.group_b),
        )
        figures["volcano"] = self._save(fig, f"{contrast.name}_volcano")

        normalized = result.fit.normalized_counts if result.fit is not None else None
        for token in vis.get("genes_of_interest", []):
            fig = plot_gene_expression(
                token,
                normalized,
                sample_annotation,
                annotation=data["annotation"],
                on_ambiguous=vis.get("on_ambiguous", "raise"),
                labels=labels,
            )
            figures[f"gene_{token}"] = self._save(fig, f"gene_{_safe_name(token)}")

        return {"figures": figures, "success": True}

    def _save(self, fig: plt.Figure, name: str) -> List[Path]:
        vis = self.config.visualization
        try:
            return save_figure(
                fig,
                self.figures_dir,
                name,
                formats=vis.get("save_formats", ["png"]),
                dpi=vis.get("dpi", 300),
            )
        finally:
            plt.close(fig)

    def _require(self, step: str) -> Dict[str, Any]:
        result = self.results.get(step)
        if not result or not result.get("success"):
            raise RuntimeError(f"Step {step} must be run first")
        return result

    def _create_pipeline_summary(self) -> None:
        """Log the pipeline summary and save it as pipeline_summary.txt"""

        lines = ["HemaFlow Pipeline Summary", "=" * 30, ""]

        lines.append("Configuration:")
        lines.append(f"  Project: {self.config.project_name}")
        lines.append(f"  Expression file: {self.config.expression_file}")
        lines.append(f"  Annotation file: {self.config.annotation_file}")
        lines.append(f"  Output directory: {self.config.output_dir}")
        lines.append("")

        lines.append("Execution Times:")
        for step, exec_time in self.execution_times.items():
            lines.append(f"  {step}: {exec_time:.2f} seconds")
        lines.append("")

        lines.append("Results:")
        for step, result in self.results.items():
            status = "SUCCESS" if result.get("success") else "FAILED"
            lines.append(f"  {step}: {status}")
            if not result.get("success") and "error" in result:
                lines.append(f"    Error: {result['error']}")

        diff = self.results.get("differential_analysis", {})
        if diff.get("success"):
            lines.append("")
            lines.extend(diff["result"].summary().splitlines())

        for line in lines:
            logger.info(line)

        summary_file = self.output_dir / "pipeline_summary.txt"
        with open(summary_file, "w") as f:
            f.write("\n".join(lines) + "\n")

        logger.info(f"Pipeline summary saved to: {summary_file}")

    def get_results(self) -> Dict[str, Any]:
        """Get all pipeline results"""
        return self.results

    def get_execution_times(self) -> Dict[str, float]:
        """Get execution times for all steps"""
        return self.execution_times


def _safe_name(token: str) -> str:
    return re.sub(r"[^\w.-]+", "_", token)
