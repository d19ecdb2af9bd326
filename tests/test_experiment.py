"""Tests for MLflow experiment tracking."""

from collections.abc import Callable
from pathlib import Path

import mlflow
import pandas as pd
import pytest

from predictlab.config import ExperimentConfig
from predictlab.evaluation.experiment import Experiment, ExperimentInfo
from predictlab.modeling.tuning import ModelTrainer

Split = tuple[pd.DataFrame, pd.Series, pd.DataFrame, pd.Series]


def test_default_info(config: ExperimentConfig) -> None:
    """Test the default experiment is a model comparison on the dataset."""
    experiment = Experiment(config)
    assert experiment.info.experiment_type == "model_comparison"
    assert experiment.info.dataset == "friedman1"
    assert experiment.info.name == config.experiment_name


def test_log_training(
    make_config: Callable[..., ExperimentConfig],
    regression_split: Split,
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    """Test a training session is logged with parameters and nested model runs."""
    # Default artifact root is relative to the working directory
    monkeypatch.chdir(tmp_path)
    config = make_config(
        mlflow={
            "enabled": True,
            "tracking_uri": f"sqlite:///{tmp_path / 'mlflow.db'}",
            "experiment_name": "predictlab-test",
        }
    )
    X_train, y_train, X_test, y_test = regression_split
    trainer = ModelTrainer(config)
    trained = trainer.train(X_train, y_train, ["Ridge"], tune=False)
    evaluations = {"Ridge": trainer.evaluate(trained["Ridge"], X_test, y_test)}

    info = ExperimentInfo(
        name="predictlab-test",
        question="Does ridge fit the synthetic response?",
        experiment_type="tuning",
        dataset="synthetic",
    )
    run_id = Experiment(config, info).log_training(
        trained, evaluations, n_train=len(X_train), n_test=len(X_test)
    )

    run = mlflow.get_run(run_id)
    assert run.data.params["dataset"] == "friedman1"
    assert run.data.params["n_train_samples"] == "60"
    assert run.data.tags["experiment_type"] == "tuning"

    children = mlflow.search_runs(
        experiment_ids=[run.info.experiment_id],
        filter_string=f"tags.mlflow.parentRunId = '{run_id}'",
    )
    assert len(children) == 1
    assert "metrics.test_rmse" in children.columns
