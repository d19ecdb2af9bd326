"""
Tabular summaries for exploring a predictor set.

Covers the usual first look at a dataset: per-predictor distributions and
skewness, missingness (overall and by class), degenerate predictors and
highly correlated pairs.
"""

import numpy as np
import pandas as pd
from scipy import stats
from sklearn.decomposition import PCA
from sklearn.preprocessing import StandardScaler

from predictlab.preprocessing.filters import nzv_table
from predictlab.utils.logging import get_logger

log = get_logger(__name__)


def _numeric(X: pd.DataFrame) -> pd.DataFrame:
    return X.select_dtypes(include=[np.number])


def summarize_predictors(X: pd.DataFrame) -> pd.DataFrame:
    """
    One row per predictor with type, missingness, cardinality and moments.

    Args:
        X: Predictor table.

    Returns:
        DataFrame indexed by predictor with dtype, n_missing, frac_missing,
        n_unique, and for numeric columns mean, std, min, max and skewness.
    """
    summary = pd.DataFrame(
        {
            "dtype": X.dtypes.astype(str),
            "n_missing": X.isna().sum(),
            "frac_missing": X.isna().mean(),
            "n_unique": X.nunique(dropna=True),
        }
    )

    numeric = _numeric(X)
    if not numeric.empty:
        summary["mean"] = numeric.mean()
        summary["std"] = numeric.std()
        summary["min"] = numeric.min()
        summary["max"] = numeric.max()
        summary["skewness"] = pd.Series(
            stats.skew(numeric.to_numpy(dtype=float), axis=0, nan_policy="omit"),
            index=numeric.columns,
            dtype=float,
        )

    summary.index.name = "predictor"
    return summary


def skewed_predictors(X: pd.DataFrame, threshold: float = 1.0) -> pd.Series:
    """
    Numeric predictors whose absolute skewness exceeds ``threshold``.

    Returns:
        Skewness values sorted by magnitude, largest first.
    """
    numeric = _numeric(X)
    if numeric.empty:
        return pd.Series(dtype=float, name="skewness")
    skewness = pd.Series(
        stats.skew(numeric.to_numpy(dtype=float), axis=0, nan_policy="omit"),
        index=numeric.columns,
        dtype=float,
        name="skewness",
    )
    skewed = skewness[skewness.abs() > threshold]
    return skewed.reindex(skewed.abs().sort_values(ascending=False).index)


def missing_by_class(X: pd.DataFrame, y: pd.Series) -> pd.DataFrame:
    """
    Fraction of missing values per predictor within each class.

    Args:
        X: Predictor table.
        y: Class labels aligned with X.

    Returns:
        DataFrame with one row per class and one column per predictor that
        has any missing value. Classes are sorted by their overall
        missingness, highest first.
    """
    has_missing = X.columns[X.isna().any()]
    if len(has_missing) == 0:
        return pd.DataFrame(index=pd.Index(sorted(y.unique()), name=y.name))

    fractions = X[has_missing].isna().groupby(y.to_numpy()).mean()
    fractions.index.name = y.name
    order = fractions.mean(axis=1).sort_values(ascending=False).index
    return fractions.loc[order]


def degenerate_predictors(
    X: pd.DataFrame,
    freq_cut: float = 95 / 5,
    unique_cut: float = 10.0,
) -> pd.DataFrame:
    """
    Zero- and near-zero-variance predictors, numeric or categorical.

    Returns:
        Rows of the near-zero-variance table flagged ``nzv``.
    """
    table = nzv_table(X, freq_cut=freq_cut, unique_cut=unique_cut)
    flagged = table[table["nzv"]]
    log.debug("Found degenerate predictors", n=len(flagged), n_columns=X.shape[1])
    return flagged


def high_correlation_pairs(X: pd.DataFrame, cutoff: float = 0.75) -> pd.DataFrame:
    """
    Pairs of numeric predictors whose absolute correlation exceeds ``cutoff``.

    Returns:
        DataFrame with columns first, second, correlation, sorted by
        absolute correlation.
    """
    corr = _numeric(X).corr()
    columns = list(corr.columns)
    rows = [
        {"first": columns[i], "second": columns[j], "correlation": float(corr.iat[i, j])}
        for i in range(len(columns))
        for j in range(i + 1, len(columns))
        if abs(corr.iat[i, j]) > cutoff
    ]
    pairs = pd.DataFrame(rows, columns=["first", "second", "correlation"])
    if pairs.empty:
        return pairs
    return pairs.reindex(
        pairs["correlation"].abs().sort_values(ascending=False).index
    ).reset_index(drop=True)


def pca_cumulative_variance(X: pd.DataFrame) -> np.ndarray:
    """Cumulative explained variance ratio of centred and scaled numeric predictors."""
    numeric = _numeric(X).dropna()
    pca = PCA().fit(StandardScaler().fit_transform(numeric))
    return np.cumsum(pca.explained_variance_ratio_)


def effective_dimension(X: pd.DataFrame, variance: float = 0.95) -> int:
    """Number of principal components needed to explain ``variance``."""
    cumulative = pca_cumulative_variance(X)
    return min(int(np.searchsorted(cumulative, variance)) + 1, len(cumulative))
