"""
Core configuration management for HemaFlow
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

from .sample_config import SampleGroupConfig

logger = logging.getLogger(__name__)


@dataclass
class Config:
    """Main configuration class for a HemaFlow analysis"""

    # General settings
    project_name: str = "HemaFlow_Analysis"
    random_seed: int = 42
    n_threads: int = 1

    # Input/Output paths
    expression_file: Optional[str] = None
    annotation_file: Optional[str] = None
    output_dir: Optional[str] = None

    # Analysis sections
    data: Dict[str, Any] = field(default_factory=dict)
    samples: Dict[str, Any] = field(default_factory=dict)
    differential: Dict[str, Any] = field(default_factory=dict)
    visualization: Dict[str, Any] = field(default_factory=dict)
    logging: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        """Fill in missing keys of each section with defaults"""
        self.data = {**self._get_default_data(), **(self.data or {})}
        self.samples = {**self._get_default_samples(), **(self.samples or {})}
        self.differential = {
            **self._get_default_differential(),
            **(self.differential or {}),
        }
        self.visualization = {
            **self._get_default_visualization(),
            **(self.visualization or {}),
        }
        self.logging = {**self._get_default_logging(), **(self.logging or {})}

    def _get_default_data(self) -> Dict[str, Any]:
        """Default input table layout"""
        return {
            "expected_columns": ["Gene", "Gene name", "Cell line", "TPM", "pTPM", "nTPM"],
            "gene_id_column": "Gene",
            "gene_name_column": "Gene name",
            "sample_column": "Cell line",
            "value_column": "TPM",
            "annotation_id_column": "ensembl_gene_id",
            "annotation_name_column": "gene_name",
            "annotation_ec_column": "ec_number",
        }

    def _get_default_samples(self) -> Dict[str, Any]:
        """Default two-group labelling"""
        return SampleGroupConfig().to_dict()

    def _get_default_differential(self) -> Dict[str, Any]:
        """Default differential expression configuration"""
        return {
            "padj_threshold": 0.001,
            "scale_factor": 100,
            "fit_type": "parametric",
        }

    def _get_default_visualization(self) -> Dict[str, Any]:
        """Default plotting configuration"""
        return {
            "heatmaps": {
                "n_top_de_genes": 30,
                "n_top_variance_genes": 50,
                "colormap": "RdBu_r",
            },
            "pca": {"ntop": 500},
            "volcano": {
                "n_labels": 10,
                "label_by": "padj",
                "point_size": 8,
                "alpha": 0.6,
            },
            "genes_of_interest": [],
            "on_ambiguous": "raise",
            "save_formats": ["png", "pdf"],
            "dpi": 300,
        }

    def _get_default_logging(self) -> Dict[str, Any]:
        """Default logging configuration"""
        return {
            "level": "INFO",
            "log_file": None,
            "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            "use_colors": True,
            "quiet_loggers": ["matplotlib", "PIL", "fontTools", "numba"],
        }

    @property
    def sample_groups(self) -> SampleGroupConfig:
        return SampleGroupConfig.from_dict(self.samples)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "project_name": self.project_name,
            "random_seed": self.random_seed,
            "n_threads": self.n_threads,
            "expression_file": self.expression_file,
            "annotation_file": self.annotation_file,
            "output_dir": self.output_dir,
            "data": self.data,
            "samples": self.samples,
            "differential": self.differential,
            "visualization": self.visualization,
            "logging": self.logging,
        }


def load_config(config_file: Union[str, Path]) -> Config:
    """Load configuration from YAML or JSON file"""
    config_path = Path(config_file)

    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    logger.info(f"Loading configuration from {config_path}")

    with open(config_path, "r") as f:
        if config_path.suffix.lower() in [".yaml", ".yml"]:
            config_dict = yaml.safe_load(f)
        elif config_path.suffix.lower() == ".json":
            config_dict = json.load(f)
        else:
            raise ValueError(f"Unsupported config file format: {config_path.suffix}")

    return Config(**(config_dict or {}))


def save_config(config: Config, output_file: Union[str, Path]) -> None:
    """Save configuration to YAML file"""
    output_path = Path(output_file)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    with open(output_path, "w") as f:
        yaml.dump(config.to_dict(), f, default_flow_style=False, indent=2)

    logger.info(f"Configuration saved to {output_path}")


def validate_config(config: Config) -> List[str]:
    """Validate configuration and return list of issues"""
    issues = []

    if config.expression_file and not Path(config.expression_file).exists():
        issues.append(f"Expression file does not exist: {config.expression_file}")

    if config.annotation_file and not Path(config.annotation_file).exists():
        issues.append(f"Annotation file does not exist: {config.annotation_file}")

    if config.output_dir:
        try:
            Path(config.output_dir).mkdir(parents=True, exist_ok=True)
        except OSError as e:
            issues.append(f"Cannot create output directory {config.output_dir}: {e}")

    threshold = config.differential.get("padj_threshold")
    if threshold is None or not 0 < threshold <= 1:
        issues.append("padj_threshold must be in (0, 1]")

    if config.differential.get("scale_factor", 0) <= 0:
        issues.append("scale_factor must be positive")

    if config.n_threads <= 0:
        issues.append("Number of threads must be positive")

    data_columns = ["gene_id_column", "gene_name_column", "sample_column", "value_column"]
    expected = config.data.get("expected_columns", [])
    for key in data_columns:
        if config.data.get(key) not in expected:
            issues.append(f"{key} {config.data.get(key)!r} is not an expected column")

    issues.extend(config.sample_groups.validate())

    level = config.logging.get("level")
    if not isinstance(logging.getLevelName(str(level).upper()), int):
        issues.append(f"Unknown logging level: {level}")

    return issues


def get_default_config() -> Config:
    """Get default configuration object"""
    return Config()
