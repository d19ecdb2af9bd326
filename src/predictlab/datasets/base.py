"""
Base classes and utilities for dataset loading.

Provides the Dataset container and common functionality for all loaders.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import ClassVar

import pandas as pd

from predictlab.config.settings import ExperimentConfig
from predictlab.schemas.registry import SchemaRegistry
from predictlab.utils.logging import get_logger

log = get_logger(__name__)


class DatasetKind(str, Enum):
    """Type of response a dataset carries."""

    REGRESSION = "regression"  # Numeric response, used for tuning
    CLASSIFICATION = "classification"  # Categorical response, used for exploration


@dataclass
class Dataset:
    """
    Container for a loaded benchmark dataset.

    Attributes:
        name: Catalogue name.
        X: Predictor table (training partition when a split is predefined).
        y: Response vector aligned with X.
        kind: Regression or classification.
        X_test: Predefined test predictors, if the dataset ships a split.
        y_test: Predefined test response.
    """

    name: str
    X: pd.DataFrame
    y: pd.Series
    kind: DatasetKind
    X_test: pd.DataFrame | None = None
    y_test: pd.Series | None = None

    @property
    def has_predefined_split(self) -> bool:
        """Whether the dataset ships its own train/test partition."""
        return self.X_test is not None and self.y_test is not None

    @property
    def n_samples(self) -> int:
        """Total number of rows across partitions."""
        n_test = len(self.X_test) if self.X_test is not None else 0
        return len(self.X) + n_test

    @property
    def feature_names(self) -> list[str]:
        """Predictor column names."""
        return list(self.X.columns)

    def combined(self) -> tuple[pd.DataFrame, pd.Series]:
        """Return all rows (train and predefined test) as one table."""
        if not self.has_predefined_split:
            return self.X, self.y
        X = pd.concat([self.X, self.X_test], ignore_index=True)
        y = pd.concat([self.y, self.y_test], ignore_index=True)
        return X, y


def read_r_csv(path: Path) -> pd.DataFrame:
    """
    Read a CSV exported with R's ``write.csv``.

    Such files carry a leading row-name column with an empty header,
    which pandas names ``Unnamed: 0``. That column is dropped.

    Raises:
        FileNotFoundError: If the file does not exist.
    """
    if not path.exists():
        msg = f"Dataset file not found: {path}"
        raise FileNotFoundError(msg)

    df = pd.read_csv(path)
    if len(df.columns) > 0 and str(df.columns[0]).startswith("Unnamed"):
        df = df.drop(columns=df.columns[0])
    return df


def as_response(df: pd.DataFrame, name: str) -> pd.DataFrame:
    """Rename a single-column response table (R writes it as ``x``)."""
    if df.shape[1] != 1:
        msg = f"Expected a single response column for '{name}', got {df.shape[1]}"
        raise ValueError(msg)
    return df.set_axis([name], axis=1)


class DataLoader(ABC):
    """
    Abstract base class for dataset loaders.

    Loaders read one or more tables, validate each against its registered
    schema at the system boundary, then assemble a Dataset.
    """

    name: ClassVar[str]
    kind: ClassVar[DatasetKind] = DatasetKind.REGRESSION
    default_target: ClassVar[str]
    # Table role -> default file name
    default_files: ClassVar[dict[str, str]] = {}
    # Table role -> SchemaRegistry name
    schemas: ClassVar[dict[str, str]] = {}

    def __init__(self, config: ExperimentConfig) -> None:
        """
        Initialize dataset loader.

        Args:
            config: Experiment configuration.
        """
        self.config = config

    @property
    def target(self) -> str:
        """Configured response column, falling back to the dataset default."""
        return self.config.dataset.target or self.default_target

    @abstractmethod
    def _load_tables(self) -> dict[str, pd.DataFrame]:
        """Load raw tables keyed by role. Implemented by subclasses."""
        ...

    @abstractmethod
    def _assemble(self, tables: dict[str, pd.DataFrame]) -> Dataset:
        """Build the Dataset from validated tables."""
        ...

    def load(self, *, validate: bool = True) -> Dataset:
        """
        Load, optionally validate, and assemble the dataset.

        Raises:
            FileNotFoundError: If a data file is missing.
            pandera.errors.SchemaError: If validation fails.
            pandera.errors.SchemaErrors: If a strict schema sees unknown columns.
            ValueError: If the configured target is not available.
        """
        log.info("Loading dataset", loader=self.__class__.__name__, name=self.name)

        tables = self.read_tables()

        if validate:
            tables = self.validate_tables(tables)
            log.info("Schema validation passed", tables=list(tables))

        dataset = self._assemble(tables)
        log.info(
            "Assembled dataset",
            name=dataset.name,
            n_samples=dataset.n_samples,
            n_features=dataset.X.shape[1],
            predefined_split=dataset.has_predefined_split,
        )
        return dataset

    def read_tables(self) -> dict[str, pd.DataFrame]:
        """Read the raw tables keyed by role, without validation."""
        tables = self._load_tables()
        for role, df in tables.items():
            log.debug("Loaded table", role=role, rows=len(df), columns=df.shape[1])
        return tables

    def validate_tables(self, tables: dict[str, pd.DataFrame]) -> dict[str, pd.DataFrame]:
        """Validate every table that has a registered schema."""
        validated = {}
        for role, df in tables.items():
            schema_name = self.schemas.get(role)
            validated[role] = (
                SchemaRegistry.validate(df, schema_name) if schema_name else df
            )
        return validated

    def file_path(self, role: str) -> Path:
        """
        Resolve the file for a table role against the dataset root.

        Config ``dataset.files`` entries override the default file names.
        """
        file_name = self.config.dataset.files.get(role, self.default_files.get(role))
        if file_name is None:
            msg = f"No file configured for table '{role}' of dataset '{self.name}'"
            raise ValueError(msg)
        return self.config.dataset.resolve(file_name)

    def _split_target(self, df: pd.DataFrame) -> tuple[pd.DataFrame, pd.Series]:
        """Separate the response column from a combined table."""
        if self.target not in df.columns:
            msg = f"Target column '{self.target}' not found in dataset '{self.name}'"
            raise ValueError(msg)
        return df.drop(columns=[self.target]), df[self.target]
