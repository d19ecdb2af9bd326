"""
Preprocessing pipeline construction.

Combines the dataset-level preprocessing from configuration with the
steps a model family needs (e.g. centring and scaling for penalized
models, a PCA pre-transform for robust regression).
"""

from dataclasses import dataclass
from typing import Any

from sklearn.compose import ColumnTransformer
from sklearn.decomposition import PCA
from sklearn.impute import KNNImputer, SimpleImputer
from sklearn.pipeline import Pipeline
from sklearn.preprocessing import OneHotEncoder, PowerTransformer, StandardScaler

from predictlab.config.settings import (
    ImputationMethod,
    PowerTransform,
    PreprocessingConfig,
)
from predictlab.preprocessing.filters import CorrelationFilter, NearZeroVarianceFilter
from predictlab.utils.logging import get_logger

log = get_logger(__name__)


@dataclass(frozen=True)
class ModelPreprocess:
    """
    Preprocessing a model family requires regardless of dataset config.

    Attributes:
        center_scale: Standardize numeric predictors.
        pca: Replace predictors by principal components.
        pca_variance: Fraction of variance the PCA step retains.
        correlation_cutoff: Correlation filter applied when the dataset
            config does not set one.
    """

    center_scale: bool = False
    pca: bool = False
    pca_variance: float = 0.95
    correlation_cutoff: float | None = None


def _numeric_steps(
    config: PreprocessingConfig,
    model: ModelPreprocess,
) -> list[tuple[str, Any]]:
    """
    Ordered numeric preprocessing steps.

    Order: near-zero-variance filter, correlation filter, power transform,
    centring/scaling, imputation, PCA. Imputation runs after scaling so
    KNN distances are computed on standardized predictors.
    """
    steps: list[tuple[str, Any]] = []

    if config.near_zero_variance:
        steps.append(
            (
                "nzv",
                NearZeroVarianceFilter(
                    freq_cut=config.freq_cut, unique_cut=config.unique_cut
                ),
            )
        )

    cutoff = config.correlation_cutoff or model.correlation_cutoff
    if cutoff is not None:
        steps.append(("correlation", CorrelationFilter(cutoff=cutoff)))

    if config.transform != PowerTransform.NONE:
        steps.append(
            (
                "power",
                PowerTransformer(method=config.transform.value, standardize=False),
            )
        )

    # KNN imputation and PCA both need comparable scales
    needs_scaling = (
        model.center_scale or model.pca or config.impute == ImputationMethod.KNN
    )
    if needs_scaling:
        steps.append(("scale", StandardScaler()))

    if config.impute == ImputationMethod.MEDIAN:
        steps.append(("impute", SimpleImputer(strategy="median")))
    elif config.impute == ImputationMethod.KNN:
        steps.append(("impute", KNNImputer(n_neighbors=config.knn_neighbors)))

    if model.pca:
        steps.append(
            ("pca", PCA(n_components=model.pca_variance, svd_solver="full"))
        )

    return steps


def build_preprocessor(
    config: PreprocessingConfig,
    model: ModelPreprocess | None = None,
    *,
    numeric_features: list[str] | None = None,
    categorical_features: list[str] | None = None,
) -> Any:
    """
    Build the preprocessing transformer placed in front of a model.

    Args:
        config: Dataset-level preprocessing configuration.
        model: Model-family requirements (defaults to none).
        numeric_features: Numeric column names.
        categorical_features: Categorical column names; one-hot encoded.

    Returns:
        A Pipeline for all-numeric data, a ColumnTransformer when categorical
        columns are present, or ``"passthrough"`` when nothing is needed.
    """
    model = model or ModelPreprocess()
    steps = _numeric_steps(config, model)
    categorical_features = categorical_features or []

    log.debug(
        "Built preprocessor",
        numeric_steps=[name for name, _ in steps],
        n_categorical=len(categorical_features),
    )

    if not categorical_features:
        return Pipeline(steps) if steps else "passthrough"

    numeric = Pipeline(steps) if steps else "passthrough"
    categorical = Pipeline(
        [
            ("impute", SimpleImputer(strategy="most_frequent")),
            ("onehot", OneHotEncoder(handle_unknown="ignore", sparse_output=False)),
        ]
    )
    return ColumnTransformer(
        transformers=[
            ("numeric", numeric, numeric_features or []),
            ("categorical", categorical, categorical_features),
        ],
        remainder="drop",
    )


def split_feature_types(X: Any) -> tuple[list[str], list[str]]:
    """Partition DataFrame columns into numeric and categorical names."""
    numeric = [col for col in X.columns if X[col].dtype.kind in "biuf"]
    categorical = [col for col in X.columns if col not in numeric]
    return numeric, categorical
