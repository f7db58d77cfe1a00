"""
Configuration management for HemaFlow

This module provides configuration loading, validation, and management
for the HemaFlow analysis pipeline.
"""

from .config import (Config, get_default_config, load_config, save_config,
                     validate_config)
from .sample_config import (DEFAULT_HEMATOPOIETIC_CELL_LINES,
                            SampleGroupConfig, get_default_sample_groups)

__all__ = [
    "Config",
    "load_config",
    "save_config",
    "validate_config",
    "get_default_config",
    "SampleGroupConfig",
    "get_default_sample_groups",
    "DEFAULT_HEMATOPOIETIC_CELL_LINES",
]
