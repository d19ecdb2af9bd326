"""Tests for predictor filters and preprocessing pipelines."""

import numpy as np
import pandas as pd
import pytest
from sklearn.compose import ColumnTransformer
from sklearn.pipeline import Pipeline

from predictlab.config.settings import PreprocessingConfig
from predictlab.preprocessing import (
    CorrelationFilter,
    ModelPreprocess,
    NearZeroVarianceFilter,
    build_preprocessor,
    nzv_table,
    split_feature_types,
)


@pytest.fixture
def correlated_frame() -> pd.DataFrame:
    """Predictors with two tight clusters and one independent column."""
    rng = np.random.default_rng(6)
    n = 200
    base1 = rng.normal(size=n)
    base2 = rng.normal(size=n)
    return pd.DataFrame(
        {
            "a1": base1,
            "a2": base1 + rng.normal(scale=0.05, size=n),
            "a3": base1 + rng.normal(scale=0.1, size=n),
            "b1": base2,
            "b2": -base2 + rng.normal(scale=0.05, size=n),
            "c": rng.normal(size=n),
        }
    )


class TestCorrelationFilter:
    """Tests for CorrelationFilter."""

    @pytest.mark.parametrize("cutoff", [0.5, 0.75, 0.9, 0.99])
    def test_column_count_and_cutoff(self, correlated_frame: pd.DataFrame, cutoff: float) -> None:
        """Test column count never grows and no retained pair exceeds the cutoff."""
        selector = CorrelationFilter(cutoff=cutoff).fit(correlated_frame)
        kept = selector.transform(correlated_frame)

        assert kept.shape[1] <= correlated_frame.shape[1]
        corr = kept.corr().abs().to_numpy(copy=True)
        np.fill_diagonal(corr, 0.0)
        assert (corr <= cutoff).all()

    @pytest.mark.parametrize("cutoff", [0.5, 0.75, 0.9, 0.99])
    def test_only_removes_correlated_columns(
        self, correlated_frame: pd.DataFrame, cutoff: float
    ) -> None:
        """Test every removed column exceeded the cutoff with some other column."""
        selector = CorrelationFilter(cutoff=cutoff).fit(correlated_frame)
        corr = correlated_frame.corr().abs()

        for column in selector.removed_:
            others = corr[column].drop(column)
            assert (others > cutoff).any()

    def test_expected_survivors(self, correlated_frame: pd.DataFrame) -> None:
        """Test one column per cluster survives plus the independent one."""
        selector = CorrelationFilter(cutoff=0.9).fit(correlated_frame)
        kept = list(selector.get_feature_names_out())

        assert "c" in kept
        assert len(kept) == 3
        assert sum(name.startswith("a") for name in kept) == 1
        assert sum(name.startswith("b") for name in kept) == 1

    def test_uncorrelated_data_untouched(self) -> None:
        """Test nothing is removed when all correlations are low."""
        X = pd.DataFrame(np.eye(5))
        selector = CorrelationFilter(cutoff=0.9).fit(X)
        assert selector.removed_ == []

    def test_numpy_input(self, correlated_frame: pd.DataFrame) -> None:
        """Test arrays are filtered to arrays with generated names."""
        array = correlated_frame.to_numpy()
        selector = CorrelationFilter(cutoff=0.9).fit(array)
        out = selector.transform(array)

        assert isinstance(out, np.ndarray)
        assert out.shape == (200, 3)
        assert list(selector.get_feature_names_out()) == [
            f"x{i}" for i in np.flatnonzero(selector.get_support())
        ]

    def test_invalid_cutoff(self, correlated_frame: pd.DataFrame) -> None:
        """Test a cutoff outside (0, 1] raises."""
        with pytest.raises(ValueError, match="cutoff"):
            CorrelationFilter(cutoff=1.5).fit(correlated_frame)

    def test_width_mismatch(self, correlated_frame: pd.DataFrame) -> None:
        """Test transform rejects data of a different width."""
        selector = CorrelationFilter().fit(correlated_frame)
        with pytest.raises(ValueError, match="features"):
            selector.transform(correlated_frame.iloc[:, :3])


class TestNearZeroVariance:
    """Tests for the near-zero-variance diagnostics and filter."""

    @pytest.fixture
    def degenerate_frame(self) -> pd.DataFrame:
        """A constant column, a rare-event column and a healthy column."""
        return pd.DataFrame(
            {
                "constant": [1.0] * 100,
                "rare": [0.0] * 98 + [1.0] * 2,
                "healthy": np.linspace(0, 1, 100),
            }
        )

    def test_nzv_table(self, degenerate_frame: pd.DataFrame) -> None:
        """Test frequency ratio, percent unique and flags."""
        table = nzv_table(degenerate_frame)

        assert table.loc["constant", "zero_var"]
        assert table.loc["rare", "freq_ratio"] == pytest.approx(49.0)
        assert table.loc["rare", "percent_unique"] == pytest.approx(2.0)
        assert table.loc["rare", "nzv"]
        assert not table.loc["healthy", "nzv"]

    def test_filter(self, degenerate_frame: pd.DataFrame) -> None:
        """Test the filter keeps only the healthy column."""
        selector = NearZeroVarianceFilter().fit(degenerate_frame)
        assert list(selector.transform(degenerate_frame).columns) == ["healthy"]
        assert selector.removed_ == ["constant", "rare"]

    def test_all_degenerate(self) -> None:
        """Test an error is raised when nothing would remain."""
        with pytest.raises(ValueError, match="near-zero-variance"):
            NearZeroVarianceFilter().fit(pd.DataFrame({"a": [1.0] * 10}))

    def test_categorical_columns(self) -> None:
        """Test the diagnostics work on categorical indicators."""
        X = pd.DataFrame({"leaf": pd.Categorical(["0"] * 97 + ["1"] * 3)})
        assert nzv_table(X).loc["leaf", "nzv"]


class TestBuildPreprocessor:
    """Tests for preprocessing pipeline construction."""

    def test_passthrough_when_nothing_needed(self) -> None:
        """Test no steps yields passthrough."""
        assert build_preprocessor(PreprocessingConfig()) == "passthrough"

    def test_step_order(self) -> None:
        """Test filters run before transforms, scaling and imputation."""
        config = PreprocessingConfig(
            near_zero_variance=True,
            correlation_cutoff=0.8,
            transform="yeo-johnson",
            impute="knn",
        )
        preprocessor = build_preprocessor(config, ModelPreprocess(pca=True))

        assert isinstance(preprocessor, Pipeline)
        assert [name for name, _ in preprocessor.steps] == [
            "nzv",
            "correlation",
            "power",
            "scale",
            "impute",
            "pca",
        ]

    def test_model_cutoff_used_when_config_silent(self) -> None:
        """Test a model family's correlation cutoff applies by default."""
        preprocessor = build_preprocessor(
            PreprocessingConfig(), ModelPreprocess(correlation_cutoff=0.75)
        )
        assert preprocessor.named_steps["correlation"].cutoff == 0.75

    def test_categorical_columns(self) -> None:
        """Test categorical predictors are one-hot encoded beside numeric ones."""
        X = pd.DataFrame(
            {
                "num": [1.0, 2.0, 3.0, 4.0],
                "cat": ["a", "b", "a", np.nan],
            }
        )
        numeric, categorical = split_feature_types(X)
        assert numeric == ["num"]
        assert categorical == ["cat"]

        preprocessor = build_preprocessor(
            PreprocessingConfig(),
            ModelPreprocess(center_scale=True),
            numeric_features=numeric,
            categorical_features=categorical,
        )
        assert isinstance(preprocessor, ColumnTransformer)
        out = preprocessor.fit_transform(X)
        assert out.shape == (4, 3)

    def test_median_imputation(self) -> None:
        """Test median imputation fills missing values."""
        X = pd.DataFrame({"a": [1.0, np.nan, 3.0, 5.0]})
        preprocessor = build_preprocessor(PreprocessingConfig(impute="median"))
        out = preprocessor.fit_transform(X)
        assert not np.isnan(out).any()
        assert out[1, 0] == pytest.approx(3.0)
