"""
Evaluation metrics for regression models.

Provides standardized test-set metrics (RMSE, R², MAE) and residual
summaries.
"""

from dataclasses import dataclass

import numpy as np
from sklearn.metrics import mean_absolute_error, mean_squared_error, r2_score

from predictlab.utils.logging import get_logger

log = get_logger(__name__)

# Scorer names used during cross-validation; the first one drives selection
CV_SCORING: dict[str, str] = {
    "rmse": "neg_root_mean_squared_error",
    "r2": "r2",
    "mae": "neg_mean_absolute_error",
}


@dataclass(frozen=True)
class RegressionMetrics:
    """
    Standard regression metrics.

    Attributes:
        rmse: Root Mean Squared Error
        r2: R² (coefficient of determination)
        mae: Mean Absolute Error
        n_samples: Number of samples
    """

    rmse: float
    r2: float
    mae: float
    n_samples: int

    def to_dict(self) -> dict[str, float]:
        """Convert to dictionary."""
        return {
            "rmse": self.rmse,
            "r2": self.r2,
            "mae": self.mae,
            "n_samples": self.n_samples,
        }

    def __str__(self) -> str:
        """String representation."""
        return f"RMSE={self.rmse:.4f}, R²={self.r2:.4f}, MAE={self.mae:.4f}"


def compute_metrics(y_true: np.ndarray, y_pred: np.ndarray) -> RegressionMetrics:
    """
    Compute regression metrics.

    Args:
        y_true: True values.
        y_pred: Predicted values (column vectors are flattened).

    Returns:
        RegressionMetrics object.

    Raises:
        ValueError: If the arrays differ in length.
    """
    y_true = np.asarray(y_true, dtype=float).ravel()
    y_pred = np.asarray(y_pred, dtype=float).ravel()

    if len(y_true) != len(y_pred):
        msg = f"Length mismatch: {len(y_true)} observed vs {len(y_pred)} predicted"
        raise ValueError(msg)

    if len(y_true) == 0:
        log.warning("Empty arrays provided for metrics")
        return RegressionMetrics(rmse=0.0, r2=0.0, mae=0.0, n_samples=0)

    # R² is undefined for fewer than two samples
    r2 = float(r2_score(y_true, y_pred)) if len(y_true) > 1 else float("nan")

    metrics = RegressionMetrics(
        rmse=float(np.sqrt(mean_squared_error(y_true, y_pred))),
        r2=r2,
        mae=float(mean_absolute_error(y_true, y_pred)),
        n_samples=len(y_true),
    )

    log.debug("Computed metrics", **metrics.to_dict())
    return metrics


def compute_residual_stats(
    y_true: np.ndarray,
    y_pred: np.ndarray,
) -> dict[str, float]:
    """
    Compute residual statistics.

    Args:
        y_true: True values.
        y_pred: Predicted values.

    Returns:
        Dictionary with residual statistics.
    """
    residuals = np.asarray(y_true, dtype=float).ravel() - np.asarray(
        y_pred, dtype=float
    ).ravel()

    return {
        "residual_mean": float(np.mean(residuals)),
        "residual_std": float(np.std(residuals)),
        "residual_median": float(np.median(residuals)),
        "residual_min": float(np.min(residuals)),
        "residual_max": float(np.max(residuals)),
    }
