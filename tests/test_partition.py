"""Tests for train/test partitioning."""

from collections.abc import Callable

import numpy as np
import pandas as pd
import pytest

from predictlab.config import ExperimentConfig
from predictlab.datasets.base import Dataset, DatasetKind
from predictlab.modeling.partition import (
    compute_target_stats,
    create_data_partition,
    split_dataset,
    stratification_groups,
)


@pytest.fixture
def numeric_data() -> tuple[pd.DataFrame, pd.Series]:
    """100 rows with a skewed numeric response."""
    rng = np.random.default_rng(5)
    X = pd.DataFrame({"a": rng.normal(size=100), "b": rng.normal(size=100)})
    y = pd.Series(rng.exponential(2.0, size=100), name="y")
    return X, y


class TestCreateDataPartition:
    """Tests for create_data_partition."""

    def test_sizes(self, numeric_data: tuple[pd.DataFrame, pd.Series]) -> None:
        """Test partition sizes follow test_size and cover every row."""
        X, y = numeric_data
        split = create_data_partition(X, y, test_size=0.2)

        assert len(split.X_test) == 20
        assert len(split.X_train) == 80
        assert split.n_samples == 100
        assert set(split.X_train.index).isdisjoint(split.X_test.index)
        assert not split.predefined

    def test_deterministic(self, numeric_data: tuple[pd.DataFrame, pd.Series]) -> None:
        """Test the same seed gives the same partition."""
        X, y = numeric_data
        first = create_data_partition(X, y, random_state=7)
        second = create_data_partition(X, y, random_state=7)
        assert list(first.X_test.index) == list(second.X_test.index)

    def test_stratified_covers_response_range(
        self, numeric_data: tuple[pd.DataFrame, pd.Series]
    ) -> None:
        """Test every response quintile is represented in the test partition."""
        X, y = numeric_data
        split = create_data_partition(X, y, test_size=0.2, bins=5)

        quintiles = pd.qcut(y, q=5, labels=False)
        assert set(quintiles[split.y_test.index]) == set(range(5))

    def test_categorical(self) -> None:
        """Test class proportions are kept for a categorical response."""
        X = pd.DataFrame({"a": np.arange(60, dtype=float)})
        y = pd.Series(["a"] * 30 + ["b"] * 20 + ["c"] * 10)
        split = create_data_partition(X, y, test_size=0.5, categorical=True)

        counts = split.y_test.value_counts()
        assert counts.to_dict() == {"a": 15, "b": 10, "c": 5}

    def test_tiny_data_falls_back(self) -> None:
        """Test stratification is skipped when strata cannot be filled."""
        X = pd.DataFrame({"a": [1.0, 2.0, 3.0, 4.0]})
        y = pd.Series([1.0, 2.0, 3.0, 4.0])
        split = create_data_partition(X, y, test_size=0.25)
        assert len(split.X_test) == 1


class TestStratificationGroups:
    """Tests for quantile grouping of numeric responses."""

    def test_groups_have_two_members(self) -> None:
        """Test every group holds at least two rows."""
        y = pd.Series(np.arange(11, dtype=float))
        groups = stratification_groups(y, bins=5)
        assert groups is not None
        assert groups.value_counts().min() >= 2

    def test_impossible(self) -> None:
        """Test None is returned when fewer than four rows exist."""
        assert stratification_groups(pd.Series([1.0, 2.0, 3.0]), bins=5) is None


class TestSplitDataset:
    """Tests for split_dataset."""

    @pytest.fixture
    def predefined(self) -> Dataset:
        """Dataset with a predefined split."""
        X = pd.DataFrame({"a": np.arange(10, dtype=float)})
        y = pd.Series(np.arange(10, dtype=float), name="y")
        return Dataset(
            name="friedman1",
            X=X.iloc[:8],
            y=y.iloc[:8],
            kind=DatasetKind.REGRESSION,
            X_test=X.iloc[8:],
            y_test=y.iloc[8:],
        )

    def test_uses_predefined_split(
        self, predefined: Dataset, config: ExperimentConfig
    ) -> None:
        """Test a predefined split is returned unchanged."""
        split = split_dataset(predefined, config)
        assert split.predefined
        assert len(split.X_train) == 8
        assert len(split.X_test) == 2

    def test_resplit(
        self, predefined: Dataset, make_config: Callable[..., ExperimentConfig]
    ) -> None:
        """Test resplit pools the rows and partitions again."""
        config = make_config(split={"resplit": True, "test_size": 0.3})
        split = split_dataset(predefined, config)
        assert not split.predefined
        assert split.n_samples == 10
        assert len(split.X_test) == 3


def test_compute_target_stats() -> None:
    """Test response summary statistics."""
    stats = compute_target_stats(pd.Series([1.0, 2.0, 3.0, 4.0, 5.0]))
    assert stats["mean"] == pytest.approx(3.0)
    assert stats["median"] == pytest.approx(3.0)
    assert stats["min"] == 1.0
    assert stats["max"] == 5.0
    assert stats["q25"] == pytest.approx(2.0)
