"""
Tune, fit, and evaluate regression models.

Each model is tuned by grid search over (optionally repeated) k-fold
cross-validation, refit on the full training partition with the selected
configuration, and scored on the held-out test partition.
"""

import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import numpy as np
import pandas as pd
from sklearn.base import BaseEstimator
from sklearn.model_selection import GridSearchCV, KFold, RepeatedKFold

from predictlab.config.settings import (
    ExperimentConfig,
    ResamplingConfig,
    ResamplingMethod,
    SelectionRule,
)
from predictlab.evaluation.metrics import (
    CV_SCORING,
    RegressionMetrics,
    compute_metrics,
    compute_residual_stats,
)
from predictlab.modeling.models import (
    MODEL_REGISTRY,
    build_model_pipeline,
    get_param_grid,
)
from predictlab.preprocessing.pipeline import split_feature_types
from predictlab.utils.logging import get_logger, log_context

log = get_logger(__name__)

MODEL_STEP = "model"


@dataclass
class TrainedModel:
    """
    Container for a tuned and refit model.

    Attributes:
        name: Model name.
        pipeline: Pipeline refit on the full training partition.
        cv_results: One row per grid point (parameters, mean/std RMSE,
            mean R², mean MAE, rank, selected flag).
        best_params: Selected hyperparameters (bare estimator names).
        best_index: Row of ``cv_results`` that was selected.
        resample_scores: Per-resample RMSE, R² and MAE of the selected
            configuration.
        feature_names: Input feature names.
        target_name: Name of the response the model was fit on.
        training_time_s: Wall time of tuning and refit.
    """

    name: str
    pipeline: BaseEstimator
    cv_results: pd.DataFrame
    best_params: dict[str, Any] = field(default_factory=dict)
    best_index: int = 0
    resample_scores: pd.DataFrame = field(default_factory=pd.DataFrame)
    feature_names: list[str] = field(default_factory=list)
    target_name: str | None = None
    training_time_s: float = 0.0

    @property
    def cv_rmse(self) -> float:
        """Mean cross-validated RMSE of the selected configuration."""
        return float(self.cv_results.loc[self.best_index, "mean_rmse"])

    @property
    def cv_r2(self) -> float:
        """Mean cross-validated R² of the selected configuration."""
        return float(self.cv_results.loc[self.best_index, "mean_r2"])


@dataclass
class ModelEvaluation:
    """
    Test-set evaluation of a trained model.

    Attributes:
        name: Model name.
        observed: Observed test response.
        predictions: Predictions aligned with ``observed``.
        metrics: RMSE, R² and MAE on the test partition.
        residual_stats: Summary of ``observed - predicted``.
    """

    name: str
    observed: pd.Series
    predictions: pd.Series
    metrics: RegressionMetrics
    residual_stats: dict[str, float] = field(default_factory=dict)

    @property
    def residuals(self) -> pd.Series:
        """Observed minus predicted."""
        return self.observed - self.predictions


def make_resampler(config: ResamplingConfig) -> KFold | RepeatedKFold:
    """Build the cross-validation splitter described by the config."""
    if config.method == ResamplingMethod.REPEATED_CV:
        return RepeatedKFold(
            n_splits=config.folds,
            n_repeats=config.repeats,
            random_state=config.random_state,
        )
    return KFold(n_splits=config.folds, shuffle=True, random_state=config.random_state)


def _n_splits(cv_results: dict[str, Any], metric: str) -> int:
    suffix = f"_test_{metric}"
    return sum(1 for key in cv_results if key.startswith("split") and key.endswith(suffix))


def select_one_se(cv_results: dict[str, Any], metric: str = "rmse") -> int:
    """
    One-standard-error rule for ``GridSearchCV(refit=...)``.

    Among candidates whose mean error lies within one standard error of the
    lowest mean error, pick the first in grid order. Grids list candidates
    from the simplest model to the most flexible, so this is the most
    parsimonious configuration that is statistically indistinguishable
    from the best.

    Args:
        cv_results: ``GridSearchCV.cv_results_`` with a negated error scorer.
        metric: Scorer name holding the negated error.

    Returns:
        Index of the selected candidate.
    """
    errors = -np.asarray(cv_results[f"mean_test_{metric}"], dtype=float)
    std = np.asarray(cv_results[f"std_test_{metric}"], dtype=float)
    n_splits = max(_n_splits(cv_results, metric), 1)

    best = int(np.nanargmin(errors))
    threshold = errors[best] + std[best] / np.sqrt(n_splits)
    within = np.flatnonzero(errors <= threshold)
    return int(within[0])


def _strip_prefix(params: dict[str, Any]) -> dict[str, Any]:
    prefix = f"{MODEL_STEP}__"
    return {k.removeprefix(prefix): v for k, v in params.items()}


def summarize_cv_results(cv_results: dict[str, Any], best_index: int) -> pd.DataFrame:
    """
    Tabulate ``GridSearchCV.cv_results_`` per grid point.

    Error scorers are negated back to positive RMSE/MAE.
    """
    params = pd.DataFrame([_strip_prefix(p) for p in cv_results["params"]])
    table = pd.DataFrame(
        {
            "mean_rmse": -np.asarray(cv_results["mean_test_rmse"], dtype=float),
            "std_rmse": np.asarray(cv_results["std_test_rmse"], dtype=float),
            "mean_r2": np.asarray(cv_results["mean_test_r2"], dtype=float),
            "mean_mae": -np.asarray(cv_results["mean_test_mae"], dtype=float),
            "rank": np.asarray(cv_results["rank_test_rmse"], dtype=int),
        }
    )
    table = pd.concat([params, table], axis=1)
    table["selected"] = table.index == best_index
    return table


def resample_scores_at(cv_results: dict[str, Any], index: int) -> pd.DataFrame:
    """Per-resample scores of one grid point."""
    n_splits = _n_splits(cv_results, "rmse")
    rows = [
        {
            "resample": i,
            "rmse": -float(cv_results[f"split{i}_test_rmse"][index]),
            "r2": float(cv_results[f"split{i}_test_r2"][index]),
            "mae": -float(cv_results[f"split{i}_test_mae"][index]),
        }
        for i in range(n_splits)
    ]
    return pd.DataFrame(rows)


class ModelTrainer:
    """
    Trainer for registry regression models.

    Handles preprocessing, grid search, refit and test-set evaluation.
    """

    def __init__(self, config: ExperimentConfig) -> None:
        """
        Initialize trainer.

        Args:
            config: Experiment configuration.
        """
        self.config = config
        self.models: dict[str, TrainedModel] = {}
        self.failures: dict[str, str] = {}

    def train(
        self,
        X: pd.DataFrame,
        y: pd.Series,
        model_names: list[str] | None = None,
        *,
        tune: bool = True,
        param_grids: dict[str, dict[str, list[Any]]] | None = None,
    ) -> dict[str, TrainedModel]:
        """
        Tune and refit models on the training partition.

        A model that raises is logged and recorded in ``failures``; the
        remaining models still run.

        Args:
            X: Training predictors.
            y: Training response.
            model_names: Models to train (default: from config).
            tune: Search the grid; otherwise cross-validate default params.
            param_grids: Grid overrides per model (default: from config).

        Returns:
            Dictionary of trained models.
        """
        if model_names is None:
            model_names = self.config.models.enabled
        if param_grids is None:
            param_grids = self.config.models.hyperparameters

        log.info(
            "Starting training",
            n_samples=len(X),
            n_features=X.shape[1],
            models=model_names,
            resampling=self.config.resampling.method.value,
            selection=self.config.resampling.selection.value,
        )

        for name in model_names:
            if name not in MODEL_REGISTRY:
                log.warning("Unknown model, skipping", name=name)
                self.failures[name] = "unknown model"
                continue

            with log_context(model=name):
                log.info("Training model")
                try:
                    trained = self.train_model(
                        X, y, name, tune=tune, param_grid=param_grids.get(name)
                    )
                except (ValueError, np.linalg.LinAlgError) as e:
                    log.exception("Model training failed", error=str(e))
                    self.failures[name] = str(e)
                    continue
            self.models[name] = trained

        log.info(
            "Training complete",
            n_models=len(self.models),
            n_failed=len(self.failures),
        )
        return self.models

    def train_model(
        self,
        X: pd.DataFrame,
        y: pd.Series,
        name: str,
        *,
        tune: bool = True,
        param_grid: dict[str, list[Any]] | None = None,
    ) -> TrainedModel:
        """Tune, select and refit a single model."""
        training_start = time.perf_counter()
        resampling = self.config.resampling

        numeric_features, categorical_features = split_feature_types(X)
        pipeline = build_model_pipeline(
            name,
            self.config,
            numeric_features=numeric_features,
            categorical_features=categorical_features,
        )

        grid: dict[str, list[Any]] = {}
        if tune:
            smallest_fold = len(X) - int(np.ceil(len(X) / resampling.folds))
            grid = get_param_grid(
                name,
                param_grid,
                n_features=X.shape[1],
                n_samples=smallest_fold,
            )

        refit: Any = "rmse"
        if resampling.selection == SelectionRule.ONE_SE:
            refit = select_one_se

        search = GridSearchCV(
            pipeline,
            param_grid={f"{MODEL_STEP}__{k}": v for k, v in grid.items()},
            cv=make_resampler(resampling),
            scoring=CV_SCORING,
            refit=refit,
            n_jobs=resampling.n_jobs,
        )
        search.fit(X, np.ravel(y))

        best_index = int(search.best_index_)
        cv_results = summarize_cv_results(search.cv_results_, best_index)
        training_time_s = time.perf_counter() - training_start

        trained = TrainedModel(
            name=name,
            pipeline=search.best_estimator_,
            cv_results=cv_results,
            best_params=_strip_prefix(search.best_params_),
            best_index=best_index,
            resample_scores=resample_scores_at(search.cv_results_, best_index),
            feature_names=list(X.columns),
            target_name=None if y.name is None else str(y.name),
            training_time_s=training_time_s,
        )

        log.info(
            "Model tuned",
            name=name,
            n_candidates=len(cv_results),
            best_params=trained.best_params,
            cv_rmse=f"{trained.cv_rmse:.4f}",
            cv_r2=f"{trained.cv_r2:.4f}",
            training_time_s=f"{training_time_s:.2f}",
        )
        return trained

    def evaluate(
        self,
        trained: TrainedModel,
        X_test: pd.DataFrame,
        y_test: pd.Series,
    ) -> ModelEvaluation:
        """Score a trained model on the held-out partition."""
        return evaluate_model(trained, X_test, y_test)


def evaluate_model(
    trained: TrainedModel,
    X_test: pd.DataFrame,
    y_test: pd.Series,
) -> ModelEvaluation:
    """
    Predict the test partition and compute RMSE, R² and MAE.

    Args:
        trained: Trained model.
        X_test: Test predictors.
        y_test: Test response.

    Returns:
        ModelEvaluation with predictions aligned to ``y_test``.
    """
    predicted = np.ravel(trained.pipeline.predict(X_test[trained.feature_names]))
    predictions = pd.Series(predicted, index=y_test.index, name="predicted")
    observed = y_test.astype(float)

    evaluation = ModelEvaluation(
        name=trained.name,
        observed=observed,
        predictions=predictions,
        metrics=compute_metrics(observed.to_numpy(), predicted),
        residual_stats=compute_residual_stats(observed.to_numpy(), predicted),
    )
    log.info("Evaluated on test set", name=trained.name, metrics=str(evaluation.metrics))
    return evaluation


def tune_fit_evaluate(
    X_train: pd.DataFrame,
    y_train: pd.Series,
    X_test: pd.DataFrame,
    y_test: pd.Series,
    model_name: str,
    config: ExperimentConfig,
    *,
    param_grid: dict[str, list[Any]] | None = None,
    plots_dir: Path | None = None,
) -> tuple[TrainedModel, ModelEvaluation]:
    """
    Run the full workflow for one model.

    Tunes over the grid by cross-validation, refits with the selected
    configuration, scores the test partition and, when ``plots_dir`` is
    given, saves observed-vs-predicted and residual plots.

    Args:
        X_train: Training predictors.
        y_train: Training response.
        X_test: Test predictors.
        y_test: Test response.
        model_name: Registry model name.
        config: Experiment configuration (resampling and preprocessing).
        param_grid: Grid override (default: registry grid).
        plots_dir: Directory for the diagnostic plots.

    Returns:
        Tuple of (trained model, test evaluation).
    """
    trainer = ModelTrainer(config)
    grid = param_grid
    if grid is None:
        grid = config.models.hyperparameters.get(model_name)

    trained = trainer.train_model(X_train, y_train, model_name, param_grid=grid)
    evaluation = trainer.evaluate(trained, X_test, y_test)

    if plots_dir is not None:
        from predictlab.evaluation.report import save_model_plots

        save_model_plots(trained, evaluation, plots_dir)

    return trained, evaluation
