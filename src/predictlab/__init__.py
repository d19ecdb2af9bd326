"""
predictlab: Applied predictive modeling exercises.

This package provides dataset loaders, preprocessing filters, and a
tune-fit-evaluate workflow over scikit-learn regressors for classic
benchmark datasets (solubility, tecator, permeability, ...).
"""

from importlib.metadata import version

__version__ = version("predictlab")

__all__ = ["__version__"]
