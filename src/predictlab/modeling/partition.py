"""
Train/test partitioning.

Numeric responses are stratified on quantile groups so both partitions
cover the full response range; categorical responses on their classes.
"""

from dataclasses import dataclass

import numpy as np
import pandas as pd
from sklearn.model_selection import train_test_split

from predictlab.config.settings import ExperimentConfig
from predictlab.datasets.base import Dataset, DatasetKind
from predictlab.utils.logging import get_logger

log = get_logger(__name__)


@dataclass
class TrainTestSplit:
    """
    Container for a train/test partition.

    Attributes:
        X_train: Training predictors.
        X_test: Test predictors.
        y_train: Training response.
        y_test: Test response.
        predefined: Whether the split came with the dataset.
    """

    X_train: pd.DataFrame
    X_test: pd.DataFrame
    y_train: pd.Series
    y_test: pd.Series
    predefined: bool = False

    @property
    def n_samples(self) -> int:
        """Total number of rows."""
        return len(self.X_train) + len(self.X_test)

    @property
    def feature_names(self) -> list[str]:
        """Predictor column names."""
        return list(self.X_train.columns)

    @property
    def target_stats(self) -> dict[str, float]:
        """Summary statistics of the training response."""
        return compute_target_stats(self.y_train)


def compute_target_stats(y: pd.Series) -> dict[str, float]:
    """Compute statistics about a numeric response."""
    return {
        "mean": float(y.mean()),
        "std": float(y.std()),
        "min": float(y.min()),
        "max": float(y.max()),
        "median": float(y.median()),
        "q25": float(np.percentile(y, 25)),
        "q75": float(np.percentile(y, 75)),
    }


def stratification_groups(y: pd.Series, bins: int) -> pd.Series | None:
    """
    Quantile groups of a numeric response for stratified sampling.

    The number of groups is reduced until every group holds at least two
    rows (train_test_split needs two members per stratum). Returns None when
    stratification is impossible.
    """
    for n_bins in range(min(bins, len(y) // 2), 1, -1):
        groups = pd.qcut(y, q=n_bins, labels=False, duplicates="drop")
        if groups.value_counts().min() >= 2:
            return groups
    return None


def create_data_partition(
    X: pd.DataFrame,
    y: pd.Series,
    *,
    test_size: float = 0.2,
    random_state: int = 1337,
    bins: int = 5,
    categorical: bool = False,
) -> TrainTestSplit:
    """
    Split data into stratified training and test partitions.

    Args:
        X: Predictors.
        y: Response.
        test_size: Fraction of rows held out.
        random_state: Seed for the shuffle.
        bins: Quantile groups for a numeric response.
        categorical: Stratify on the class labels instead of quantiles.

    Returns:
        TrainTestSplit.
    """
    # Each partition needs at least one row per stratum
    n_test = int(np.ceil(test_size * len(y)))
    max_strata = min(n_test, len(y) - n_test)

    if categorical:
        counts = y.value_counts()
        usable = counts.min() >= 2 and len(counts) <= max_strata
        stratify = y if usable else None
    else:
        n_bins = min(bins, max_strata)
        stratify = stratification_groups(y, n_bins) if n_bins > 1 else None

    if stratify is None:
        log.warning("Falling back to unstratified split", n_rows=len(y))

    X_train, X_test, y_train, y_test = train_test_split(
        X,
        y,
        test_size=test_size,
        random_state=random_state,
        stratify=stratify,
    )

    log.info(
        "Created data partition",
        n_train=len(X_train),
        n_test=len(X_test),
        stratified=stratify is not None,
    )
    return TrainTestSplit(X_train=X_train, X_test=X_test, y_train=y_train, y_test=y_test)


def split_dataset(dataset: Dataset, config: ExperimentConfig) -> TrainTestSplit:
    """
    Produce the train/test partition for a dataset.

    A predefined split is used as-is unless ``split.resplit`` is set.
    """
    if dataset.has_predefined_split and not config.split.resplit:
        log.info("Using predefined split", dataset=dataset.name)
        return TrainTestSplit(
            X_train=dataset.X,
            X_test=dataset.X_test,
            y_train=dataset.y,
            y_test=dataset.y_test,
            predefined=True,
        )

    X, y = dataset.combined()
    return create_data_partition(
        X,
        y,
        test_size=config.split.test_size,
        random_state=config.split.random_state,
        bins=config.split.stratify_bins,
        categorical=dataset.kind == DatasetKind.CLASSIFICATION,
    )
