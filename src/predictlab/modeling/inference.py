"""
Model persistence and prediction on new data.

Models are stored as joblib files with a ``.meta.json`` sidecar carrying
the feature names and tuning results needed to reuse them.
"""

import json
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, Any

import joblib
import mlflow.sklearn
import numpy as np
import pandas as pd

from predictlab import __version__
from predictlab.schemas.registry import SchemaRegistry
from predictlab.utils.logging import get_logger

if TYPE_CHECKING:
    from predictlab.config.settings import ExperimentConfig
    from predictlab.modeling.tuning import ModelEvaluation, TrainedModel

log = get_logger(__name__)

PREDICTION_COLUMN = "predicted"


@dataclass
class LoadedModel:
    """
    A fitted pipeline with its metadata.

    Attributes:
        model: Fitted estimator or pipeline.
        feature_names: Predictor columns expected at prediction time.
        metadata: Sidecar contents, if present.
    """

    model: Any
    feature_names: list[str] | None = None
    metadata: dict[str, Any] | None = None

    @property
    def name(self) -> str:
        """Model name from metadata, or the estimator class."""
        if self.metadata and "model_name" in self.metadata:
            return str(self.metadata["model_name"])
        return type(self.model).__name__


def _json_safe(value: Any) -> Any:
    if isinstance(value, dict):
        return {str(k): _json_safe(v) for k, v in value.items()}
    if isinstance(value, list | tuple):
        return [_json_safe(v) for v in value]
    if isinstance(value, np.generic):
        return value.item()
    return value


def save_model(
    trained: "TrainedModel",
    output_dir: Path,
    config: "ExperimentConfig",
    evaluation: "ModelEvaluation | None" = None,
) -> Path:
    """
    Save a trained pipeline with a metadata sidecar.

    Args:
        trained: Trained model.
        output_dir: Directory for the model files.
        config: Experiment configuration (dataset and resampling recorded).
        evaluation: Test evaluation, recorded when given.

    Returns:
        Path to the ``.joblib`` file.
    """
    output_dir.mkdir(parents=True, exist_ok=True)
    safe_name = trained.name.lower().replace(" ", "_")
    model_path = output_dir / f"{config.dataset.name}_{safe_name}.joblib"
    joblib.dump(trained.pipeline, model_path)

    metadata = {
        "model_name": trained.name,
        "feature_names": trained.feature_names,
        "dataset": config.dataset.name,
        "target": trained.target_name or config.dataset.target,
        "best_params": trained.best_params,
        "cv_rmse": trained.cv_rmse,
        "cv_r2": trained.cv_r2,
        "resampling": config.resampling.method.value,
        "selection": config.resampling.selection.value,
        "test_metrics": evaluation.metrics.to_dict() if evaluation else None,
        "created": datetime.now().isoformat(timespec="seconds"),
        "predictlab_version": __version__,
    }
    metadata_path = model_path.with_suffix(".meta.json")
    with metadata_path.open("w") as f:
        json.dump(_json_safe(metadata), f, indent=2)

    log.info("Saved model", name=trained.name, path=str(model_path))
    return model_path


def load_model(model_path: Path | str) -> LoadedModel:
    """
    Load a saved model with its metadata.

    Args:
        model_path: Path to a ``.joblib`` file or an MLflow model URI.

    Returns:
        LoadedModel with model and feature metadata.

    Raises:
        FileNotFoundError: If the model file does not exist.
    """
    model_path_str = str(model_path)

    if model_path_str.startswith(("runs:/", "models:/")):
        model = mlflow.sklearn.load_model(model_path_str)
        return LoadedModel(model=model, feature_names=_pipeline_features(model))

    path = Path(model_path)
    if not path.exists():
        msg = f"Model file not found: {path}"
        raise FileNotFoundError(msg)

    model = joblib.load(path)
    metadata: dict[str, Any] | None = None
    feature_names = _pipeline_features(model)

    metadata_path = path.with_suffix(".meta.json")
    if metadata_path.exists():
        with metadata_path.open() as f:
            metadata = json.load(f)
        feature_names = metadata.get("feature_names", feature_names)
        log.info(
            "Loaded model metadata",
            model=metadata.get("model_name"),
            n_features=len(feature_names or []),
        )

    return LoadedModel(model=model, feature_names=feature_names, metadata=metadata)


def _pipeline_features(model: Any) -> list[str] | None:
    names = getattr(model, "feature_names_in_", None)
    return list(names) if names is not None else None


def predict_frame(loaded: LoadedModel, data: pd.DataFrame) -> pd.DataFrame:
    """
    Predict new rows, returning the input with a ``predicted`` column.

    Args:
        loaded: Loaded model.
        data: New predictor rows; extra columns are carried along.

    Returns:
        DataFrame validated against the prediction output schema.

    Raises:
        ValueError: If required predictor columns are missing.
    """
    features = data
    if loaded.feature_names is not None:
        missing = [c for c in loaded.feature_names if c not in data.columns]
        if missing:
            shown = ", ".join(missing[:10])
            msg = f"Input is missing {len(missing)} model feature(s): {shown}"
            raise ValueError(msg)
        features = data[loaded.feature_names]

    predictions = np.ravel(loaded.model.predict(features))
    result = data.copy()
    result[PREDICTION_COLUMN] = predictions

    log.info("Generated predictions", model=loaded.name, n_rows=len(result))
    return SchemaRegistry.validate(result, "prediction_output")
