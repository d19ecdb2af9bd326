"""
Loaders for the benchmark datasets.

Each loader knows the file layout R's AppliedPredictiveModeling and mlbench
packages produce when exported with ``write.csv``.
"""

from typing import ClassVar

import pandas as pd
from sklearn.datasets import make_friedman1

from predictlab.datasets.base import (
    DataLoader,
    Dataset,
    DatasetKind,
    as_response,
    read_r_csv,
)
from predictlab.schemas.spectra import N_ABSORBANCE_CHANNELS
from predictlab.utils.logging import get_logger

log = get_logger(__name__)


class SolubilityLoader(DataLoader):
    """Aqueous solubility of 1,267 compounds with a predefined 951/316 split."""

    name = "solubility"
    default_target = "solubility"
    default_files: ClassVar[dict[str, str]] = {
        "train_x": "solTrainX.csv",
        "train_y": "solTrainY.csv",
        "test_x": "solTestX.csv",
        "test_y": "solTestY.csv",
    }
    schemas: ClassVar[dict[str, str]] = {
        "train_x": "solubility_predictors",
        "train_y": "solubility_response",
        "test_x": "solubility_predictors",
        "test_y": "solubility_response",
    }

    def _load_tables(self) -> dict[str, pd.DataFrame]:
        tables = {role: read_r_csv(self.file_path(role)) for role in self.default_files}
        for role in ("train_y", "test_y"):
            tables[role] = as_response(tables[role], self.default_target)
        return tables

    def _assemble(self, tables: dict[str, pd.DataFrame]) -> Dataset:
        if len(tables["train_x"]) != len(tables["train_y"]):
            msg = "solTrainX and solTrainY have different row counts"
            raise ValueError(msg)
        if len(tables["test_x"]) != len(tables["test_y"]):
            msg = "solTestX and solTestY have different row counts"
            raise ValueError(msg)
        return Dataset(
            name=self.name,
            X=tables["train_x"],
            y=tables["train_y"][self.default_target],
            kind=self.kind,
            X_test=tables["test_x"],
            y_test=tables["test_y"][self.default_target],
        )


class GlassLoader(DataLoader):
    """Glass identification: 9 chemical measurements, 6 glass types."""

    name = "glass"
    kind = DatasetKind.CLASSIFICATION
    default_target = "Type"
    default_files: ClassVar[dict[str, str]] = {"data": "Glass.csv"}
    schemas: ClassVar[dict[str, str]] = {"data": "glass"}

    def _load_tables(self) -> dict[str, pd.DataFrame]:
        return {"data": read_r_csv(self.file_path("data"))}

    def _assemble(self, tables: dict[str, pd.DataFrame]) -> Dataset:
        X, y = self._split_target(tables["data"])
        return Dataset(name=self.name, X=X, y=y.astype(str), kind=self.kind)


class SoybeanLoader(DataLoader):
    """Soybean disease indicators with missing values."""

    name = "soybean"
    kind = DatasetKind.CLASSIFICATION
    default_target = "Class"
    default_files: ClassVar[dict[str, str]] = {"data": "Soybean.csv"}
    schemas: ClassVar[dict[str, str]] = {"data": "soybean"}

    def _load_tables(self) -> dict[str, pd.DataFrame]:
        return {"data": read_r_csv(self.file_path("data"))}

    def _assemble(self, tables: dict[str, pd.DataFrame]) -> Dataset:
        X, y = self._split_target(tables["data"])
        # Indicators are factor codes, not measurements
        X = X.astype("category")
        return Dataset(name=self.name, X=X, y=y.astype(str), kind=self.kind)


class TecatorLoader(DataLoader):
    """Tecator infrared spectra with moisture, fat and protein endpoints."""

    name = "tecator"
    default_target = "fat"
    default_files: ClassVar[dict[str, str]] = {
        "absorp": "absorp.csv",
        "endpoints": "endpoints.csv",
    }
    schemas: ClassVar[dict[str, str]] = {
        "absorp": "tecator_absorbance",
        "endpoints": "tecator_endpoints",
    }
    endpoint_names = ("moisture", "fat", "protein")

    def _load_tables(self) -> dict[str, pd.DataFrame]:
        absorp = read_r_csv(self.file_path("absorp"))
        if absorp.shape[1] != N_ABSORBANCE_CHANNELS:
            msg = (
                f"Expected {N_ABSORBANCE_CHANNELS} absorbance columns, "
                f"got {absorp.shape[1]}"
            )
            raise ValueError(msg)
        absorp = absorp.set_axis(
            [f"absorp_{i:03d}" for i in range(1, N_ABSORBANCE_CHANNELS + 1)], axis=1
        )

        endpoints = read_r_csv(self.file_path("endpoints"))
        if endpoints.shape[1] != len(self.endpoint_names):
            msg = f"Expected 3 endpoint columns, got {endpoints.shape[1]}"
            raise ValueError(msg)
        endpoints = endpoints.set_axis(list(self.endpoint_names), axis=1)
        return {"absorp": absorp, "endpoints": endpoints}

    def _assemble(self, tables: dict[str, pd.DataFrame]) -> Dataset:
        if self.target not in self.endpoint_names:
            msg = (
                f"Tecator target must be one of {', '.join(self.endpoint_names)}, "
                f"got '{self.target}'"
            )
            raise ValueError(msg)
        if len(tables["absorp"]) != len(tables["endpoints"]):
            msg = "absorp and endpoints have different row counts"
            raise ValueError(msg)
        return Dataset(
            name=self.name,
            X=tables["absorp"],
            y=tables["endpoints"][self.target],
            kind=self.kind,
        )


class ChemicalManufacturingLoader(DataLoader):
    """Chemical manufacturing process records predicting product yield."""

    name = "chemical_manufacturing"
    default_target = "Yield"
    default_files: ClassVar[dict[str, str]] = {
        "data": "ChemicalManufacturingProcess.csv"
    }
    schemas: ClassVar[dict[str, str]] = {"data": "chemical_manufacturing"}

    def _load_tables(self) -> dict[str, pd.DataFrame]:
        return {"data": read_r_csv(self.file_path("data"))}

    def _assemble(self, tables: dict[str, pd.DataFrame]) -> Dataset:
        X, y = self._split_target(tables["data"])
        n_missing = int(X.isna().sum().sum())
        if n_missing:
            log.info(
                "Process data contains missing values",
                n_missing=n_missing,
                columns_affected=int(X.isna().any().sum()),
            )
        return Dataset(name=self.name, X=X, y=y, kind=self.kind)


class PermeabilityLoader(DataLoader):
    """Permeability of 165 compounds from 1,107 binary fingerprints."""

    name = "permeability"
    default_target = "permeability"
    default_files: ClassVar[dict[str, str]] = {
        "fingerprints": "fingerprints.csv",
        "permeability": "permeability.csv",
    }
    schemas: ClassVar[dict[str, str]] = {
        "fingerprints": "permeability_fingerprints",
        "permeability": "permeability_response",
    }

    def _load_tables(self) -> dict[str, pd.DataFrame]:
        return {
            "fingerprints": read_r_csv(self.file_path("fingerprints")),
            "permeability": as_response(
                read_r_csv(self.file_path("permeability")), self.default_target
            ),
        }

    def _assemble(self, tables: dict[str, pd.DataFrame]) -> Dataset:
        if len(tables["fingerprints"]) != len(tables["permeability"]):
            msg = "fingerprints and permeability have different row counts"
            raise ValueError(msg)
        return Dataset(
            name=self.name,
            X=tables["fingerprints"],
            y=tables["permeability"][self.default_target],
            kind=self.kind,
        )


class Friedman1Loader(DataLoader):
    """
    Friedman #1 simulation, generated rather than read from disk.

    Options (``dataset.options``): n_train (200), n_test (5000),
    noise (1.0), n_features (10), random_state (split.random_state).
    """

    name = "friedman1"
    default_target = "y"
    schemas: ClassVar[dict[str, str]] = {"train": "friedman1", "test": "friedman1"}

    def _generate(self, n_samples: int, random_state: int) -> pd.DataFrame:
        options = self.config.dataset.options
        X, y = make_friedman1(
            n_samples=n_samples,
            n_features=int(options.get("n_features", 10)),
            noise=float(options.get("noise", 1.0)),
            random_state=random_state,
        )
        df = pd.DataFrame(X, columns=[f"X{i}" for i in range(1, X.shape[1] + 1)])
        df["y"] = y
        return df

    def _load_tables(self) -> dict[str, pd.DataFrame]:
        options = self.config.dataset.options
        seed = int(options.get("random_state", self.config.split.random_state))
        n_train = int(options.get("n_train", 200))
        n_test = int(options.get("n_test", 5000))
        # Separate seeds keep the training set fixed when n_test changes
        return {
            "train": self._generate(n_train, seed),
            "test": self._generate(n_test, seed + 1),
        }

    def _assemble(self, tables: dict[str, pd.DataFrame]) -> Dataset:
        X, y = self._split_target(tables["train"])
        X_test, y_test = self._split_target(tables["test"])
        return Dataset(
            name=self.name, X=X, y=y, kind=self.kind, X_test=X_test, y_test=y_test
        )
