"""
Configuration loading utilities.

Supports environment variable interpolation and config inheritance.
Minimal configs only need: project, dataset.name
"""

import os
import re
from pathlib import Path
from typing import Any

import yaml

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


def _interpolate_env_vars(value: str) -> str:
    """
    Interpolate environment variables in string values.

    Supports ${VAR} and ${VAR:default} syntax.
    """
    pattern = r"\$\{([^}:]+)(?::([^}]*))?\}"

    def replacer(match: re.Match[str]) -> str:
        var_name = match.group(1)
        default = match.group(2)
        return os.environ.get(var_name, default if default is not None else "")

    return re.sub(pattern, replacer, value)


def _process_config_values(obj: Any) -> Any:
    """Recursively process config values for env var interpolation."""
    if isinstance(obj, str):
        return _interpolate_env_vars(obj)
    if isinstance(obj, dict):
        return {k: _process_config_values(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [_process_config_values(item) for item in obj]
    return obj


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Deep merge two dictionaries, with override taking precedence."""
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _grid_values(grids: dict[str, Any]) -> dict[str, dict[str, list[Any]]]:
    """Normalize hyperparameter overrides so every value is a candidate list.

    YAML has no tuple type, so lists nested inside a candidate list
    (hidden_layer_sizes) are turned into tuples.
    """
    normalized: dict[str, dict[str, list[Any]]] = {}
    for model_name, grid in grids.items():
        normalized[model_name] = {}
        for param, values in (grid or {}).items():
            candidates = values if isinstance(values, list) else [values]
            normalized[model_name][param] = [
                tuple(v) if isinstance(v, list) else v for v in candidates
            ]
    return normalized


def load_yaml(path: Path) -> dict[str, Any]:
    """Load a YAML file and process environment variables."""
    with path.open(encoding="utf-8") as f:
        data = yaml.safe_load(f)
    return _process_config_values(data) if data else {}


def config_from_dict(merged: dict[str, Any]) -> ExperimentConfig:
    """
    Build a validated ExperimentConfig from a merged config mapping.

    Args:
        merged: Mapping as read from YAML (after base merge).

    Returns:
        Fully validated ExperimentConfig instance.

    Raises:
        ValueError: If required keys are missing or values are invalid.
    """
    project = merged.get("project")
    if not project:
        msg = "Config must specify 'project' name"
        raise ValueError(msg)

    dataset_data = merged.get("dataset", {})
    if not dataset_data.get("name"):
        msg = "Config must specify 'dataset.name'"
        raise ValueError(msg)

    dataset = DatasetConfig(
        name=dataset_data["name"],
        root=Path(dataset_data.get("root", "./data")),
        target=dataset_data.get("target"),
        files={str(k): str(v) for k, v in dataset_data.get("files", {}).items()},
        options=dataset_data.get("options", {}),
    )

    split = SplitConfig(**merged.get("split", {}))
    resampling = ResamplingConfig(**merged.get("resampling", {}))
    preprocessing = PreprocessingConfig(**merged.get("preprocessing", {}))

    models_data = merged.get("models", {})
    models = ModelConfig(
        enabled=models_data.get("enabled", ["Linear Regression"]),
        hyperparameters=_grid_values(models_data.get("hyperparameters", {})),
    )

    mlflow_data = merged.get("mlflow", {})
    mlflow = MLflowConfig(
        enabled=mlflow_data.get("enabled", False),
        tracking_uri=mlflow_data.get("tracking_uri", "http://127.0.0.1:5000"),
        experiment_name=mlflow_data.get("experiment_name"),  # None = use project
    )

    output_data = merged.get("output", {})
    output = OutputConfig(output_root=Path(output_data.get("root", "./output")))

    return ExperimentConfig(
        project=project,
        dataset=dataset,
        split=split,
        resampling=resampling,
        preprocessing=preprocessing,
        models=models,
        mlflow=mlflow,
        output=output,
    )


def load_config(
    config_path: Path,
    base_path: Path | None = None,
) -> ExperimentConfig:
    """
    Load experiment configuration from YAML file(s).

    Args:
        config_path: Path to the main configuration file.
        base_path: Optional path to base configuration for inheritance.
            Defaults to ``base.yaml`` next to ``config_path`` when present.

    Returns:
        Fully validated ExperimentConfig instance.
    """
    if base_path is not None:
        base_data = load_yaml(base_path)
    else:
        potential_base = config_path.parent / "base.yaml"
        base_data = (
            load_yaml(potential_base)
            if potential_base.exists() and potential_base != config_path
            else {}
        )

    main_data = load_yaml(config_path)
    return config_from_dict(_deep_merge(base_data, main_data))
