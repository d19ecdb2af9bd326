"""Pytest configuration and shared fixtures."""

from collections.abc import Callable, Iterator
from pathlib import Path
from typing import Any

import matplotlib

matplotlib.use("Agg")

import numpy as np
import pandas as pd
import pytest
import structlog

from predictlab.config import ExperimentConfig, config_from_dict


@pytest.fixture(autouse=True)
def _reset_structlog() -> Iterator[None]:
    """Drop logging configuration made by CLI invocations."""
    yield
    structlog.reset_defaults()


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def base_config(tmp_path: Path) -> dict[str, Any]:
    """Create a minimal configuration dictionary for testing."""
    return {
        "project": "test-project",
        "dataset": {"name": "friedman1", "root": str(tmp_path / "data")},
        "split": {"test_size": 0.25, "random_state": 42},
        "resampling": {"method": "cv", "folds": 3, "random_state": 42},
        "models": {"enabled": ["Linear Regression"]},
        "output": {"root": str(tmp_path / "output")},
    }


@pytest.fixture
def make_config(base_config: dict[str, Any]) -> Callable[..., ExperimentConfig]:
    """Factory building an ExperimentConfig with section overrides."""

    def _make(**sections: dict[str, Any]) -> ExperimentConfig:
        merged = {
            key: dict(value) if isinstance(value, dict) else value
            for key, value in base_config.items()
        }
        for key, value in sections.items():
            merged[key] = {**merged.get(key, {}), **value}
        return config_from_dict(merged)

    return _make


@pytest.fixture
def config(make_config: Callable[..., ExperimentConfig]) -> ExperimentConfig:
    """Default test configuration (friedman1, 3-fold CV)."""
    return make_config()


@pytest.fixture
def regression_data() -> tuple[pd.DataFrame, pd.Series]:
    """Synthetic linear regression data with one redundant predictor."""
    rng = np.random.default_rng(0)
    n = 80
    X = pd.DataFrame(
        {
            "a": rng.normal(size=n),
            "b": rng.normal(size=n),
            "c": rng.uniform(0, 1, size=n),
            "d": rng.normal(size=n),
        }
    )
    X["e"] = X["a"] * 0.98 + rng.normal(scale=0.05, size=n)
    y = pd.Series(
        3.0 * X["a"] - 2.0 * X["b"] + 0.5 * X["c"] + rng.normal(scale=0.3, size=n),
        name="y",
    )
    return X, y


@pytest.fixture
def regression_split(
    regression_data: tuple[pd.DataFrame, pd.Series],
) -> tuple[pd.DataFrame, pd.Series, pd.DataFrame, pd.Series]:
    """Regression data split 60/20 by position."""
    X, y = regression_data
    return X.iloc[:60], y.iloc[:60], X.iloc[60:], y.iloc[60:]


@pytest.fixture
def chemical_dir(tmp_path: Path) -> Path:
    """Directory holding a small ChemicalManufacturingProcess.csv in R layout."""
    rng = np.random.default_rng(1)
    n = 40
    df = pd.DataFrame(
        {
            "Yield": rng.uniform(35, 45, size=n),
            "BiologicalMaterial01": rng.normal(6, 0.5, size=n),
            "BiologicalMaterial02": rng.normal(55, 3, size=n),
            "ManufacturingProcess01": rng.normal(11, 1, size=n),
            "ManufacturingProcess02": rng.normal(20, 4, size=n),
        }
    )
    df.loc[[2, 7], "ManufacturingProcess01"] = np.nan
    data_dir = tmp_path / "data"
    data_dir.mkdir(exist_ok=True)
    df.index = df.index + 1
    df.to_csv(data_dir / "ChemicalManufacturingProcess.csv")
    return data_dir


@pytest.fixture
def solubility_dir(tmp_path: Path) -> Path:
    """Directory holding the four solubility files in R layout."""
    rng = np.random.default_rng(2)
    data_dir = tmp_path / "data"
    data_dir.mkdir(exist_ok=True)

    def predictors(n: int) -> pd.DataFrame:
        df = pd.DataFrame({f"FP{i:03d}": rng.integers(0, 2, size=n) for i in range(1, 4)})
        df["MolWeight"] = rng.uniform(50, 500, size=n)
        df["NumAtoms"] = rng.integers(5, 60, size=n)
        df["NumBonds"] = rng.integers(5, 60, size=n)
        df["HydrophilicFactor"] = rng.normal(size=n)
        df["SurfaceArea1"] = rng.uniform(0, 100, size=n)
        df["SurfaceArea2"] = rng.uniform(0, 100, size=n)
        return df

    for prefix, n in (("Train", 30), ("Test", 10)):
        predictors(n).to_csv(data_dir / f"sol{prefix}X.csv")
        pd.DataFrame({"x": rng.uniform(-8, 1, size=n)}).to_csv(data_dir / f"sol{prefix}Y.csv")
    return data_dir


@pytest.fixture
def glass_dir(tmp_path: Path) -> Path:
    """Directory holding a small Glass.csv."""
    rng = np.random.default_rng(3)
    n = 30
    df = pd.DataFrame(
        {
            "RI": rng.uniform(1.51, 1.53, size=n),
            "Na": rng.uniform(11, 15, size=n),
            "Mg": rng.exponential(2, size=n),
            "Al": rng.uniform(0.5, 3, size=n),
            "Si": rng.uniform(70, 74, size=n),
            "K": rng.exponential(0.5, size=n),
            "Ca": rng.uniform(6, 12, size=n),
            "Ba": np.where(rng.uniform(size=n) > 0.8, rng.uniform(0, 2, size=n), 0.0),
            "Fe": np.where(rng.uniform(size=n) > 0.7, rng.uniform(0, 0.4, size=n), 0.0),
            "Type": np.repeat([1, 2, 7], 10),
        }
    )
    data_dir = tmp_path / "data"
    data_dir.mkdir(exist_ok=True)
    df.index = df.index + 1
    df.to_csv(data_dir / "Glass.csv")
    return data_dir
