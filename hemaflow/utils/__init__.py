"""
Utility functions for HemaFlow
"""

from .logging import (get_logger, log_execution_time, setup_logging,
                      setup_logging_from_config)
from .validation import (validate_environment, validate_file_exists,
                         validate_python_packages)

__all__ = [
    "setup_logging",
    "setup_logging_from_config",
    "get_logger",
    "log_execution_time",
    "validate_file_exists",
    "validate_python_packages",
    "validate_environment",
]
