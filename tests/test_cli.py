"""Tests for the command-line interface."""

from pathlib import Path
from typing import Any

import numpy as np
import pandas as pd
import pytest
import yaml
from typer.testing import CliRunner

from predictlab.cli import app

runner = CliRunner()


def _write_config(path: Path, data: dict[str, Any]) -> Path:
    path.write_text(yaml.safe_dump(data))
    return path


@pytest.fixture
def friedman_config(tmp_path: Path, base_config: dict[str, Any]) -> Path:
    """Small Friedman #1 experiment with two quick models."""
    data = {
        **base_config,
        "dataset": {
            "name": "friedman1",
            "options": {"n_train": 60, "n_test": 30, "random_state": 3},
        },
        "models": {
            "enabled": ["Ridge", "KNN"],
            "hyperparameters": {
                "Ridge": {"alpha": [1.0, 0.1]},
                "KNN": {"n_neighbors": [9, 5]},
            },
        },
    }
    return _write_config(tmp_path / "friedman.yaml", data)


def test_version() -> None:
    """Test the version command prints the package version."""
    result = runner.invoke(app, ["version"])
    assert result.exit_code == 0
    assert "predictlab version" in result.stdout


def test_datasets() -> None:
    """Test the catalogue lists every dataset."""
    result = runner.invoke(app, ["datasets"])
    assert result.exit_code == 0
    for name in ("solubility", "tecator", "friedman1"):
        assert name in result.stdout


class TestValidate:
    """Tests for the validate command."""

    def test_passes(self, tmp_path: Path, glass_dir: Path, base_config: dict[str, Any]) -> None:
        """Test a valid dataset exits cleanly."""
        config = _write_config(
            tmp_path / "glass.yaml",
            {**base_config, "dataset": {"name": "glass", "root": str(glass_dir)}},
        )
        result = runner.invoke(app, ["validate", "-c", str(config)])
        assert result.exit_code == 0
        assert "1 passed" in result.stdout

    def test_missing_file_fails(self, tmp_path: Path, base_config: dict[str, Any]) -> None:
        """Test a missing data file exits with status 1."""
        config = _write_config(
            tmp_path / "glass.yaml",
            {**base_config, "dataset": {"name": "glass", "root": str(tmp_path / "nowhere")}},
        )
        result = runner.invoke(app, ["validate", "-c", str(config)])
        assert result.exit_code == 1


class TestTrain:
    """Tests for the train command."""

    def test_train_writes_artifacts(self, friedman_config: Path, tmp_path: Path) -> None:
        """Test training writes models, predictions, plots and the report."""
        result = runner.invoke(app, ["train", "-c", str(friedman_config)])
        assert result.exit_code == 0, result.stdout

        project_dir = tmp_path / "output" / "test-project"
        assert (project_dir / "models" / "friedman1_ridge.joblib").exists()
        assert (project_dir / "models" / "friedman1_knn.meta.json").exists()
        assert len(list((project_dir / "predictions").glob("*.csv"))) == 4
        assert (project_dir / "plots" / "ridge_observed_vs_predicted.png").exists()
        assert (project_dir / "reports" / "test-project_report.html").exists()
        assert "Training complete" in result.stdout

    def test_single_model_without_tuning(
        self, friedman_config: Path, tmp_path: Path
    ) -> None:
        """Test --model and --no-tune train one default configuration."""
        report = tmp_path / "custom" / "report.html"
        result = runner.invoke(
            app,
            ["train", "-c", str(friedman_config), "-m", "KNN", "--no-tune", "-r", str(report)],
        )
        assert result.exit_code == 0, result.stdout

        models_dir = tmp_path / "output" / "test-project" / "models"
        assert [p.name for p in models_dir.glob("*.joblib")] == ["friedman1_knn.joblib"]
        assert report.exists()

    def test_output_override(self, friedman_config: Path, tmp_path: Path) -> None:
        """Test -o redirects every artifact."""
        other = tmp_path / "elsewhere"
        result = runner.invoke(
            app, ["train", "-c", str(friedman_config), "-m", "Ridge", "-o", str(other)]
        )
        assert result.exit_code == 0, result.stdout
        assert (other / "test-project" / "models" / "friedman1_ridge.joblib").exists()

    def test_unknown_model(self, friedman_config: Path) -> None:
        """Test an unknown model name exits with status 1."""
        result = runner.invoke(app, ["train", "-c", str(friedman_config), "-m", "Random Forest"])
        assert result.exit_code == 1
        assert "Unknown model" in result.stdout

    def test_categorical_response_rejected(
        self, tmp_path: Path, glass_dir: Path, base_config: dict[str, Any]
    ) -> None:
        """Test classification datasets cannot be trained."""
        config = _write_config(
            tmp_path / "glass.yaml",
            {**base_config, "dataset": {"name": "glass", "root": str(glass_dir)}},
        )
        result = runner.invoke(app, ["train", "-c", str(config)])
        assert result.exit_code == 1

    def test_unknown_column_exits(
        self, tmp_path: Path, glass_dir: Path, base_config: dict[str, Any]
    ) -> None:
        """Test a column outside the strict schema exits with status 1."""
        path = glass_dir / "Glass.csv"
        df = pd.read_csv(path, index_col=0)
        df["Zn"] = 0.1
        df.to_csv(path)
        config = _write_config(
            tmp_path / "glass.yaml",
            {**base_config, "dataset": {"name": "glass", "root": str(glass_dir)}},
        )
        result = runner.invoke(app, ["train", "-c", str(config)])
        assert result.exit_code == 1
        assert "Schema validation failed" in result.stdout


def test_predict(friedman_config: Path, tmp_path: Path) -> None:
    """Test predictions from a saved model are written to CSV."""
    train = runner.invoke(app, ["train", "-c", str(friedman_config), "-m", "Ridge"])
    assert train.exit_code == 0, train.stdout

    rng = np.random.default_rng(0)
    new_data = pd.DataFrame(
        rng.uniform(size=(5, 10)), columns=[f"X{i}" for i in range(1, 11)]
    )
    data_path = tmp_path / "new.csv"
    new_data.to_csv(data_path, index=False)
    output_path = tmp_path / "predictions" / "out.csv"

    model_path = tmp_path / "output" / "test-project" / "models" / "friedman1_ridge.joblib"
    result = runner.invoke(
        app,
        ["predict", "-m", str(model_path), "-d", str(data_path), "-o", str(output_path)],
    )
    assert result.exit_code == 0, result.stdout

    predictions = pd.read_csv(output_path)
    assert len(predictions) == 5
    assert "predicted" in predictions.columns


def test_predict_missing_model(tmp_path: Path) -> None:
    """Test a missing model file exits with status 1."""
    data_path = tmp_path / "new.csv"
    data_path.write_text("X1\n0.5\n")
    result = runner.invoke(
        app,
        [
            "predict",
            "-m",
            str(tmp_path / "absent.joblib"),
            "-d",
            str(data_path),
            "-o",
            str(tmp_path / "out.csv"),
        ],
    )
    assert result.exit_code == 1


def test_explore_categorical(tmp_path: Path, glass_dir: Path, base_config: dict[str, Any]) -> None:
    """Test exploration of a classification dataset writes its plots."""
    config = _write_config(
        tmp_path / "glass.yaml",
        {**base_config, "dataset": {"name": "glass", "root": str(glass_dir)}},
    )
    plots = tmp_path / "explore"
    result = runner.invoke(app, ["explore", "-c", str(config), "-o", str(plots)])

    assert result.exit_code == 0, result.stdout
    assert (plots / "histograms.png").exists()
    assert (plots / "missing_by_class.png").exists()
