"""
Compare models through their resampling distributions.

All models trained with the same resampler share fold assignments, so
per-resample scores can be compared side by side.
"""

from typing import TYPE_CHECKING

import pandas as pd

from predictlab.utils.logging import get_logger

if TYPE_CHECKING:
    from predictlab.modeling.tuning import ModelEvaluation, TrainedModel

log = get_logger(__name__)


def collect_resamples(trained_models: dict[str, "TrainedModel"]) -> pd.DataFrame:
    """Long table of per-resample scores: model, resample, rmse, r2, mae."""
    frames = []
    for name, trained in trained_models.items():
        frame = trained.resample_scores.copy()
        frame.insert(0, "model", name)
        frames.append(frame)

    if not frames:
        return pd.DataFrame(columns=["model", "resample", "rmse", "r2", "mae"])
    return pd.concat(frames, ignore_index=True)


def compare_resamples(
    trained_models: dict[str, "TrainedModel"],
) -> tuple[pd.DataFrame, pd.DataFrame]:
    """
    Summarize resampled performance per model.

    Args:
        trained_models: Models trained with a common resampler.

    Returns:
        Tuple of (long per-resample table, summary with mean/std/min/max
        RMSE and R² per model sorted by mean RMSE).
    """
    long = collect_resamples(trained_models)
    if long.empty:
        return long, pd.DataFrame()

    counts = long.groupby("model")["resample"].nunique()
    if counts.nunique() > 1:
        log.warning("Models were resampled differently", counts=counts.to_dict())

    summary = long.groupby("model").agg(
        rmse_mean=("rmse", "mean"),
        rmse_std=("rmse", "std"),
        rmse_min=("rmse", "min"),
        rmse_max=("rmse", "max"),
        r2_mean=("r2", "mean"),
        r2_std=("r2", "std"),
        r2_min=("r2", "min"),
        r2_max=("r2", "max"),
    )
    summary = summary.sort_values("rmse_mean").reset_index()
    return long, summary


def summarize_test_metrics(evaluations: dict[str, "ModelEvaluation"]) -> pd.DataFrame:
    """Test-set RMSE, R² and MAE per model sorted by RMSE."""
    rows = [
        {"model": name, **evaluation.metrics.to_dict()}
        for name, evaluation in evaluations.items()
    ]
    if not rows:
        return pd.DataFrame(columns=["model", "rmse", "r2", "mae", "n_samples"])
    return pd.DataFrame(rows).sort_values("rmse", ignore_index=True)
