"""
Predictor importance for fitted pipelines.

Linear-type models (including PLS) report absolute coefficients on the
preprocessed predictors; everything else falls back to permutation
importance on the raw predictors.
"""

import contextlib
from dataclasses import dataclass
from typing import Any, Literal

import numpy as np
import pandas as pd
from sklearn.inspection import permutation_importance

from predictlab.utils.logging import get_logger

log = get_logger(__name__)

ImportanceMethod = Literal["auto", "coefficients", "permutation"]


@dataclass
class FeatureImportance:
    """Feature importance data for a model."""

    feature_names: list[str]
    importances: np.ndarray
    importance_type: str  # 'coefficients' or 'permutation'

    def to_frame(self) -> pd.DataFrame:
        """Importances sorted in descending order."""
        frame = pd.DataFrame(
            {"feature": self.feature_names, "importance": self.importances}
        )
        return frame.sort_values("importance", ascending=False, ignore_index=True)

    def top(self, n: int = 15) -> pd.DataFrame:
        """The ``n`` most important predictors."""
        return self.to_frame().head(n)


def _unwrap(model: Any) -> tuple[Any, Any]:
    """Split a ``preprocessor -> model`` pipeline into its two steps."""
    if hasattr(model, "named_steps"):
        return model.named_steps.get("preprocessor"), model.named_steps.get("model", model)
    return None, model


def coefficient_importance(
    model: Any,
    feature_names: list[str],
) -> FeatureImportance | None:
    """
    Absolute coefficients of the final estimator.

    Returns None when the estimator has no ``coef_`` or when its
    coefficients cannot be matched to predictor names.
    """
    preprocessor, estimator = _unwrap(model)
    if not hasattr(estimator, "coef_"):
        return None

    names = feature_names
    if preprocessor is not None and preprocessor != "passthrough":
        with contextlib.suppress(AttributeError, ValueError):
            names = list(preprocessor.get_feature_names_out())

    coef = np.abs(np.ravel(estimator.coef_))
    if len(coef) != len(names):
        log.warning(
            "Coefficient length mismatch",
            n_coefficients=len(coef),
            n_features=len(names),
        )
        return None

    return FeatureImportance(
        feature_names=[str(n) for n in names],
        importances=coef,
        importance_type="coefficients",
    )


def compute_importance(
    model: Any,
    X: pd.DataFrame,
    y: pd.Series | None = None,
    method: ImportanceMethod = "auto",
    *,
    n_repeats: int = 10,
    random_state: int | None = 1337,
) -> FeatureImportance:
    """
    Compute predictor importance for a fitted model.

    Args:
        model: Fitted estimator or ``preprocessor -> model`` pipeline.
        X: Predictors (the training partition is typical).
        y: Response; required for permutation importance.
        method: ``coefficients``, ``permutation`` or ``auto`` (coefficients
            when available, otherwise permutation).
        n_repeats: Shuffles per predictor for permutation importance.
        random_state: Seed for the shuffles.

    Returns:
        FeatureImportance.

    Raises:
        ValueError: If coefficients are requested from a model without
            them, or permutation importance is requested without ``y``.
    """
    if method in ("auto", "coefficients"):
        importance = coefficient_importance(model, list(X.columns))
        if importance is not None:
            return importance
        if method == "coefficients":
            msg = f"{type(_unwrap(model)[1]).__name__} has no usable coefficients"
            raise ValueError(msg)

    if y is None:
        msg = "Permutation importance requires the response"
        raise ValueError(msg)

    result = permutation_importance(
        model,
        X,
        np.ravel(y),
        scoring="neg_root_mean_squared_error",
        n_repeats=n_repeats,
        random_state=random_state,
    )
    log.debug("Computed permutation importance", n_features=X.shape[1])
    return FeatureImportance(
        feature_names=list(X.columns),
        importances=np.asarray(result.importances_mean),
        importance_type="permutation",
    )
