#!/usr/bin/env python3

import pathlib

from setuptools import find_packages, setup

# The directory containing this file
HERE = pathlib.Path(__file__).parent

# The text of the README file
README = (HERE / "README.md").read_text()

# Version
__version__ = "0.1.0"

setup(
    name="hemaflow",
    version=__version__,
    author="HemaFlow Development Team",
    author_email="hemaflow@example.com",
    description="Differential gene expression of hematopoietic vs non-hematopoietic cell lines",
    long_description=README,
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=["tests", "tests.*", "docs", "notebooks"]),
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Science/Research",
        "Topic :: Scientific/Engineering :: Bio-Informatics",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Operating System :: OS Independent",
    ],
    python_requires=">=3.10",
    install_requires=[
        # Core scientific computing
        "numpy>=1.23.0",
        "pandas>=1.5.0",
        "scipy>=1.9.0",
        # Visualization
        "matplotlib>=3.6.0",
        "seaborn>=0.13.0",
        "adjustText>=0.8",
        # Differential expression
        "pydeseq2>=0.5.0",
        # Statistical analysis
        "scikit-learn>=1.1.0",
        # Configuration and utilities
        "pyyaml>=6.0",
        "colorlog>=6.6.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0.0",
        ],
        "dev": [
            "black>=22.0.0",
            "isort>=5.10.0",
            "flake8>=5.0.0",
            "mypy>=0.991",
            "pre-commit>=2.20.0",
        ],
        "docs": [
            "sphinx>=5.0.0",
            "sphinx-rtd-theme>=1.0.0",
            "sphinx-autodoc-typehints>=1.19.0",
        ],
        "notebook": [
            "jupyter>=1.0.0",
            "ipykernel>=6.15.0",
            "jupytext>=1.14.0",
        ],
    },
    include_package_data=True,
    zip_safe=False,
    keywords=[
        "RNA-seq",
        "differential-expression",
        "DESeq2",
        "transcriptomics",
        "bioinformatics",
        "hematopoiesis",
        "cell-lines",
        "Human-Protein-Atlas",
    ],
)
