"""
HemaFlow: differential gene expression of hematopoietic cell lines

HemaFlow is a Python package for comparing hematopoietic with
non-hematopoietic cell lines of the Human Protein Atlas cell-line panel. It
takes the long TPM table from loading to annotated differential expression
tables and the figures that go with them.

Main Components:
- Long-table loading and pivoting into a gene x cell-line matrix
- Two-group labelling of cell lines
- Differential expression with PyDESeq2
- Annotated, sorted and significance-filtered result tables
- Heatmaps, PCA, volcano and per-gene expression plots

Example:
    >>> from hemaflow import HemaFlowAnalysis
    >>> analysis = HemaFlowAnalysis("config.yaml")
    >>> results = analysis.run_full_pipeline()
"""

import logging
import sys
from importlib import metadata
from typing import Any, Dict

try:
    __version__ = metadata.version("hemaflow")
except metadata.PackageNotFoundError:
    __version__ = "0.1.0-dev"

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    stream=sys.stdout,
)

# Module imports
from . import differential, genomics, utils, visualization
from .config import Config, load_config
# Main imports
from .core import HemaFlowAnalysis
from .exceptions import HemaFlowError
from .utils import setup_logging, validate_environment, validate_python_packages

__all__ = [
    "__version__",
    "HemaFlowAnalysis",
    "HemaFlowError",
    "Config",
    "load_config",
    "setup_logging",
    "validate_environment",
    "genomics",
    "differential",
    "visualization",
    "utils",
]


def get_info() -> Dict[str, Any]:
    """Get package information."""
    return {
        "name": "HemaFlow",
        "version": __version__,
        "description": "Differential expression of hematopoietic vs non-hematopoietic cell lines",
        "python_version": f"{sys.version_info.major}.{sys.version_info.minor}.{sys.version_info.micro}",
        "modules": __all__[7:],
    }


def check_dependencies() -> Dict[str, bool]:
    """Check if key dependencies are available."""
    return validate_python_packages(["numpy", "pandas", "pydeseq2", "adjustText"])


# Initialize package
logger = logging.getLogger(__name__)
logger.info(f"HemaFlow v{__version__} initialized")

# Check critical dependencies
deps = check_dependencies()
missing_deps = [dep for dep, available in deps.items() if not available]
if missing_deps:
    logger.warning(f"Missing dependencies: {missing_deps}")
    logger.info("Run 'pip install hemaflow' to install all dependencies")
