"""
Configuration management with typed Pydantic models.

Provides dataset, resampling and model parameterization loaded from YAML.
"""

from predictlab.config.loader import config_from_dict, load_config
from predictlab.config.settings import (
    DatasetConfig,
    ExperimentConfig,
    MLflowConfig,
    ModelConfig,
    OutputConfig,
    PreprocessingConfig,
    ResamplingConfig,
    SplitConfig,
)

__all__ = [
    "DatasetConfig",
    "ExperimentConfig",
    "MLflowConfig",
    "ModelConfig",
    "OutputConfig",
    "PreprocessingConfig",
    "ResamplingConfig",
    "SplitConfig",
    "config_from_dict",
    "load_config",
]
