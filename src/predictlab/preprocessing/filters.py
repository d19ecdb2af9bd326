"""
Unsupervised predictor filters.

Both filters are scikit-learn transformers so they can sit inside a
Pipeline and be refit within every resampling fold.
"""

from typing import Any

import numpy as np
import pandas as pd
from sklearn.base import BaseEstimator, TransformerMixin
from sklearn.utils.validation import check_is_fitted

from predictlab.utils.logging import get_logger

log = get_logger(__name__)


def _as_frame(X: Any) -> pd.DataFrame:
    """View array-like input as a DataFrame, naming unnamed columns x0, x1, ..."""
    if isinstance(X, pd.DataFrame):
        return X
    array = np.asarray(X)
    if array.ndim != 2:
        msg = f"Expected a 2D predictor matrix, got shape {array.shape}"
        raise ValueError(msg)
    return pd.DataFrame(array, columns=[f"x{i}" for i in range(array.shape[1])])


class _ColumnSelector(BaseEstimator, TransformerMixin):
    """Shared fit bookkeeping for filters that keep a subset of columns."""

    support_: np.ndarray

    def _record_input(self, X: Any) -> pd.DataFrame:
        df = _as_frame(X)
        self.n_features_in_ = df.shape[1]
        if isinstance(X, pd.DataFrame):
            self.feature_names_in_ = np.asarray(df.columns, dtype=object)
        elif hasattr(self, "feature_names_in_"):
            del self.feature_names_in_
        return df

    def get_support(self) -> np.ndarray:
        """Boolean mask of retained columns."""
        check_is_fitted(self, "support_")
        return self.support_

    def transform(self, X: Any) -> Any:
        """Keep only the retained columns, preserving the input container."""
        check_is_fitted(self, "support_")
        if X.shape[1] != self.n_features_in_:
            msg = (
                f"X has {X.shape[1]} features, but {self.__class__.__name__} "
                f"was fitted with {self.n_features_in_}"
            )
            raise ValueError(msg)
        if isinstance(X, pd.DataFrame):
            return X.loc[:, self.support_]
        return np.asarray(X)[:, self.support_]

    def get_feature_names_out(self, input_features: Any = None) -> np.ndarray:
        """Names of the retained columns."""
        check_is_fitted(self, "support_")
        if input_features is None:
            input_features = getattr(
                self,
                "feature_names_in_",
                np.asarray([f"x{i}" for i in range(self.n_features_in_)], dtype=object),
            )
        return np.asarray(input_features, dtype=object)[self.support_]


def nzv_table(
    X: Any,
    freq_cut: float = 95 / 5,
    unique_cut: float = 10.0,
) -> pd.DataFrame:
    """
    Per-column degeneracy diagnostics.

    Args:
        X: Predictor table (numeric or categorical columns).
        freq_cut: Threshold on the ratio of the most common value's count
            to the second most common value's count.
        unique_cut: Threshold on the percentage of distinct values.

    Returns:
        DataFrame indexed by column with freq_ratio, percent_unique,
        zero_var and nzv.
    """
    df = _as_frame(X)
    n_rows = len(df)
    rows = []
    for col in df.columns:
        counts = df[col].value_counts(dropna=True)
        n_unique = len(counts)
        freq_ratio = float(counts.iloc[0] / counts.iloc[1]) if n_unique > 1 else 0.0
        percent_unique = 100.0 * n_unique / n_rows if n_rows else 0.0
        zero_var = n_unique <= 1
        rows.append(
            {
                "column": col,
                "freq_ratio": freq_ratio,
                "percent_unique": percent_unique,
                "zero_var": zero_var,
                "nzv": zero_var or (freq_ratio > freq_cut and percent_unique <= unique_cut),
            }
        )
    return pd.DataFrame(rows).set_index("column")


class NearZeroVarianceFilter(_ColumnSelector):
    """
    Remove zero- and near-zero-variance predictors.

    A column is near-zero-variance when its most frequent value outnumbers
    the second most frequent by more than ``freq_cut`` and at most
    ``unique_cut`` percent of its values are distinct. Columns with a single
    distinct value are always removed.

    Parameters:
        freq_cut: Frequency ratio cutoff (default 95/5).
        unique_cut: Percent-unique cutoff (default 10).
    """

    def __init__(self, freq_cut: float = 95 / 5, unique_cut: float = 10.0) -> None:
        self.freq_cut = freq_cut
        self.unique_cut = unique_cut

    def fit(self, X: Any, y: Any = None) -> "NearZeroVarianceFilter":
        """Flag degenerate columns."""
        df = self._record_input(X)
        table = nzv_table(df, self.freq_cut, self.unique_cut)
        self.support_ = ~table["nzv"].to_numpy(dtype=bool)
        self.removed_ = list(table.index[table["nzv"]])

        if not self.support_.any():
            msg = "Every predictor was flagged as near-zero-variance"
            raise ValueError(msg)

        log.debug(
            "Near-zero-variance filter fitted",
            n_in=self.n_features_in_,
            n_removed=len(self.removed_),
        )
        return self


class CorrelationFilter(_ColumnSelector):
    """
    Remove predictors to bring pairwise absolute correlation under a cutoff.

    Columns are visited in order of decreasing mean absolute correlation.
    For each pair above the cutoff, the member with the larger mean absolute
    correlation to the still-retained columns is dropped. The filter never
    adds columns, only drops a column that exceeded the cutoff with some
    other column, and leaves no retained pair above the cutoff.

    Parameters:
        cutoff: Absolute correlation threshold in (0, 1].
    """

    def __init__(self, cutoff: float = 0.9) -> None:
        self.cutoff = cutoff

    def fit(self, X: Any, y: Any = None) -> "CorrelationFilter":
        """Choose the columns to drop."""
        if not 0.0 < self.cutoff <= 1.0:
            msg = f"cutoff must be in (0, 1], got {self.cutoff}"
            raise ValueError(msg)

        df = self._record_input(X)
        corr = np.abs(df.astype(float).corr().to_numpy())
        # Constant columns have undefined correlation
        corr = np.nan_to_num(corr, nan=0.0)
        np.fill_diagonal(corr, 0.0)

        n = corr.shape[0]
        removed = np.zeros(n, dtype=bool)
        mean_abs = corr.sum(axis=1) / max(n - 1, 1)
        order = np.argsort(-mean_abs, kind="stable")

        for pos, i in enumerate(order):
            if removed[i]:
                continue
            for j in order[pos + 1 :]:
                if removed[j] or corr[i, j] <= self.cutoff:
                    continue
                retained = ~removed
                mean_i = corr[i, retained].sum() / max(retained.sum() - 1, 1)
                mean_j = corr[j, retained].sum() / max(retained.sum() - 1, 1)
                if mean_i > mean_j:
                    removed[i] = True
                    break
                removed[j] = True

        self.support_ = ~removed
        self.removed_ = list(df.columns[removed])

        log.debug(
            "Correlation filter fitted",
            cutoff=self.cutoff,
            n_in=self.n_features_in_,
            n_removed=len(self.removed_),
        )
        return self
