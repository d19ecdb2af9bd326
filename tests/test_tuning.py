"""Tests for the tune-fit-evaluate workflow."""

from collections.abc import Callable
from pathlib import Path

import numpy as np
import pandas as pd
import pytest
from sklearn.model_selection import KFold, RepeatedKFold

from predictlab.config import ExperimentConfig
from predictlab.config.settings import ResamplingConfig
from predictlab.modeling.models import list_models
from predictlab.modeling.tuning import (
    ModelTrainer,
    TrainedModel,
    make_resampler,
    select_one_se,
    summarize_cv_results,
    tune_fit_evaluate,
)

Split = tuple[pd.DataFrame, pd.Series, pd.DataFrame, pd.Series]


def _cv_results(mean_rmse: list[float], std_rmse: list[float], n_splits: int = 4) -> dict:
    """Minimal GridSearchCV results with negated RMSE."""
    results: dict = {
        "mean_test_rmse": -np.asarray(mean_rmse),
        "std_test_rmse": np.asarray(std_rmse),
    }
    for i in range(n_splits):
        results[f"split{i}_test_rmse"] = -np.asarray(mean_rmse)
    return results


class TestSelectOneSE:
    """Tests for the one-standard-error rule."""

    def test_picks_first_within_one_se(self) -> None:
        """Test the earliest candidate within one SE of the best wins."""
        # best is index 3 (1.0); SE = 0.4 / sqrt(4) = 0.2
        results = _cv_results([1.5, 1.15, 1.1, 1.0, 1.05], [0.1, 0.1, 0.1, 0.4, 0.1])
        assert select_one_se(results) == 1

    def test_best_when_nothing_close(self) -> None:
        """Test the best candidate is kept when no simpler one is close."""
        results = _cv_results([3.0, 2.0, 1.0], [0.01, 0.01, 0.01])
        assert select_one_se(results) == 2

    def test_ignores_nan_candidates(self) -> None:
        """Test failed candidates with NaN scores are never selected."""
        results = _cv_results([np.nan, 1.2, 1.0], [np.nan, 0.1, 0.6])
        assert select_one_se(results) == 1


class TestMakeResampler:
    """Tests for resampler construction."""

    def test_cv(self) -> None:
        """Test single CV uses a shuffled KFold."""
        resampler = make_resampler(ResamplingConfig(folds=5, random_state=3))
        assert isinstance(resampler, KFold)
        assert resampler.get_n_splits() == 5

    def test_repeated(self) -> None:
        """Test repeated CV yields folds times repeats splits."""
        resampler = make_resampler(
            ResamplingConfig(method="repeated_cv", folds=4, repeats=3)
        )
        assert isinstance(resampler, RepeatedKFold)
        assert resampler.get_n_splits() == 12


class TestModelTrainer:
    """Tests for ModelTrainer."""

    @pytest.mark.parametrize("name", list_models())
    def test_prediction_length_matches_test_rows(
        self, name: str, config: ExperimentConfig, regression_split: Split
    ) -> None:
        """Test every model predicts exactly one value per test row."""
        X_train, y_train, X_test, y_test = regression_split
        trainer = ModelTrainer(config)
        trained = trainer.train_model(X_train, y_train, name, tune=False)
        evaluation = trainer.evaluate(trained, X_test, y_test)

        assert len(evaluation.predictions) == len(X_test)
        assert evaluation.predictions.index.equals(y_test.index)
        assert evaluation.metrics.n_samples == len(X_test)

    def test_tuning_results(self, config: ExperimentConfig, regression_split: Split) -> None:
        """Test CV results hold one row per candidate and one selected row."""
        X_train, y_train, _, _ = regression_split
        trainer = ModelTrainer(config)
        trained = trainer.train_model(
            X_train, y_train, "Ridge", param_grid={"alpha": [10.0, 1.0, 0.1]}
        )

        assert len(trained.cv_results) == 3
        assert trained.cv_results["selected"].sum() == 1
        assert {"alpha", "mean_rmse", "std_rmse", "mean_r2", "rank"} <= set(trained.cv_results.columns)
        assert trained.best_params["alpha"] in (10.0, 1.0, 0.1)
        assert len(trained.resample_scores) == config.resampling.folds
        assert trained.cv_rmse == pytest.approx(trained.resample_scores["rmse"].mean())

    def test_best_selection_minimises_rmse(
        self, config: ExperimentConfig, regression_split: Split
    ) -> None:
        """Test the best rule selects the lowest mean CV RMSE."""
        X_train, y_train, _, _ = regression_split
        trained = ModelTrainer(config).train_model(
            X_train, y_train, "KNN", param_grid={"n_neighbors": [15, 9, 5, 3]}
        )
        assert trained.cv_rmse == pytest.approx(trained.cv_results["mean_rmse"].min())

    def test_one_se_selection_is_no_more_flexible(
        self,
        make_config: Callable[..., ExperimentConfig],
        regression_split: Split,
    ) -> None:
        """Test the one-SE rule never picks a later candidate than the best rule."""
        X_train, y_train, _, _ = regression_split
        grid = {"alpha": list(np.logspace(1, -3, 9))}
        best = ModelTrainer(make_config()).train_model(
            X_train, y_train, "Lasso", param_grid=grid
        )
        one_se = ModelTrainer(make_config(resampling={"selection": "one_se"})).train_model(
            X_train, y_train, "Lasso", param_grid=grid
        )
        assert one_se.best_index <= best.best_index
        assert one_se.best_params["alpha"] >= best.best_params["alpha"]

    def test_deterministic(
        self,
        make_config: Callable[..., ExperimentConfig],
        regression_split: Split,
    ) -> None:
        """Test a fixed seed and fold assignment give identical selection."""
        X_train, y_train, _, _ = regression_split
        config = make_config(resampling={"method": "repeated_cv", "repeats": 2})
        grid = {"n_components": [1, 2, 3]}

        first = ModelTrainer(config).train_model(X_train, y_train, "PLS", param_grid=grid)
        second = ModelTrainer(config).train_model(X_train, y_train, "PLS", param_grid=grid)

        assert first.best_params == second.best_params
        pd.testing.assert_frame_equal(first.cv_results, second.cv_results)
        assert len(first.resample_scores) == 6

    def test_train_records_failures(
        self, config: ExperimentConfig, regression_split: Split
    ) -> None:
        """Test unknown or failing models are recorded and others still run."""
        X_train, y_train, _, _ = regression_split
        trainer = ModelTrainer(config)
        trained = trainer.train(
            X_train,
            y_train,
            model_names=["Ridge", "Gradient Boosting", "KNN"],
            param_grids={"KNN": {"n_neighbors": [-1]}},
        )

        assert list(trained) == ["Ridge"]
        assert trainer.failures["Gradient Boosting"] == "unknown model"
        assert "KNN" in trainer.failures

    def test_feature_order_restored(
        self, config: ExperimentConfig, regression_split: Split
    ) -> None:
        """Test test-set columns are reordered to the training layout."""
        X_train, y_train, X_test, y_test = regression_split
        trainer = ModelTrainer(config)
        trained = trainer.train_model(X_train, y_train, "Linear Regression")

        reordered = trainer.evaluate(trained, X_test[X_test.columns[::-1]], y_test)
        original = trainer.evaluate(trained, X_test, y_test)
        pd.testing.assert_series_equal(reordered.predictions, original.predictions)

    def test_linear_model_recovers_signal(
        self, config: ExperimentConfig, regression_split: Split
    ) -> None:
        """Test least squares explains most of the variance of a linear response."""
        X_train, y_train, X_test, y_test = regression_split
        trainer = ModelTrainer(config)
        trained = trainer.train_model(X_train, y_train, "Linear Regression")
        evaluation = trainer.evaluate(trained, X_test, y_test)
        assert evaluation.metrics.r2 > 0.9


class TestSummarizeCvResults:
    """Tests for the CV results table."""

    def test_errors_are_positive(self) -> None:
        """Test negated scorers are turned back into positive errors."""
        raw = {
            "params": [{"model__alpha": 1.0}, {"model__alpha": 0.1}],
            "mean_test_rmse": np.array([-2.0, -1.0]),
            "std_test_rmse": np.array([0.1, 0.2]),
            "mean_test_r2": np.array([0.5, 0.8]),
            "mean_test_mae": np.array([-1.5, -0.7]),
            "rank_test_rmse": np.array([2, 1]),
        }
        table = summarize_cv_results(raw, best_index=1)

        assert list(table["alpha"]) == [1.0, 0.1]
        assert list(table["mean_rmse"]) == [2.0, 1.0]
        assert list(table["mean_mae"]) == [1.5, 0.7]
        assert list(table["selected"]) == [False, True]


def test_tune_fit_evaluate(
    config: ExperimentConfig, regression_split: Split, tmp_path: Path
) -> None:
    """Test the single-model workflow returns a fit, metrics and plots."""
    X_train, y_train, X_test, y_test = regression_split
    trained, evaluation = tune_fit_evaluate(
        X_train,
        y_train,
        X_test,
        y_test,
        "PLS",
        config,
        param_grid={"n_components": [1, 2, 3]},
        plots_dir=tmp_path / "plots",
    )

    assert isinstance(trained, TrainedModel)
    assert len(evaluation.predictions) == len(y_test)
    assert evaluation.metrics.rmse > 0
    assert (tmp_path / "plots" / "pls_observed_vs_predicted.png").exists()
    assert (tmp_path / "plots" / "pls_residuals.png").exists()
    assert (tmp_path / "plots" / "pls_tuning.png").exists()
