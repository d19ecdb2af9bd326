"""
Model registry and factory.

Provides registry of supported regression models with their default
parameters, tuning grids, and the preprocessing each family requires.
"""

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

import numpy as np
from sklearn.base import BaseEstimator
from sklearn.cross_decomposition import PLSRegression
from sklearn.decomposition import PCA
from sklearn.linear_model import (
    ElasticNet,
    HuberRegressor,
    Lasso,
    LinearRegression,
    Ridge,
)
from sklearn.neighbors import KNeighborsRegressor
from sklearn.neural_network import MLPRegressor
from sklearn.pipeline import Pipeline
from sklearn.preprocessing import SplineTransformer
from sklearn.svm import SVR

from predictlab.config.settings import ExperimentConfig
from predictlab.modeling.estimators import AveragedMLPRegressor
from predictlab.preprocessing.pipeline import ModelPreprocess, build_preprocessor
from predictlab.utils.logging import get_logger

log = get_logger(__name__)


def _principal_component_regression(**params: Any) -> Pipeline:
    """PCA followed by ordinary least squares."""
    pipeline = Pipeline([("pca", PCA()), ("regression", LinearRegression())])
    return pipeline.set_params(**params)


def _hinge_regression(**params: Any) -> Pipeline:
    """
    Additive piecewise-linear regression (MARS-style).

    Degree-1 B-splines span the same space as hinge functions at the
    knots; the lasso penalty prunes unneeded basis terms.
    """
    pipeline = Pipeline(
        [
            (
                "hinge",
                SplineTransformer(degree=1, knots="quantile", include_bias=False),
            ),
            ("fit", Lasso(max_iter=10000)),
        ]
    )
    return pipeline.set_params(**params)


@dataclass(frozen=True)
class ModelSpec:
    """
    Registry entry for a model family.

    Attributes:
        factory: Estimator class or function accepting keyword parameters.
        default_params: Parameters applied on construction.
        param_grid: Default tuning grid (bare estimator parameter names).
            Candidates run from the simplest model to the most flexible.
        preprocess: Preprocessing the family requires.
        component_params: Grid parameters counting components, clipped to
            the number of predictors and training rows.
        neighbor_params: Grid parameters counting neighbors, clipped to the
            number of training rows.
    """

    factory: Callable[..., BaseEstimator]
    default_params: dict[str, Any] = field(default_factory=dict)
    param_grid: dict[str, list[Any]] = field(default_factory=dict)
    preprocess: ModelPreprocess = field(default_factory=ModelPreprocess)
    component_params: tuple[str, ...] = ()
    neighbor_params: tuple[str, ...] = ()


CENTER_SCALE = ModelPreprocess(center_scale=True)

MODEL_REGISTRY: dict[str, ModelSpec] = {
    "Linear Regression": ModelSpec(
        LinearRegression,
        preprocess=ModelPreprocess(correlation_cutoff=0.9),
    ),
    # Huber loss breaks down on collinear inputs, so it sees principal components
    "Robust Regression": ModelSpec(
        HuberRegressor,
        default_params={"epsilon": 1.35, "max_iter": 1000},
        param_grid={"epsilon": [2.0, 1.5, 1.35, 1.2]},
        preprocess=ModelPreprocess(center_scale=True, pca=True),
    ),
    "PCR": ModelSpec(
        _principal_component_regression,
        param_grid={"pca__n_components": list(range(1, 21))},
        preprocess=CENTER_SCALE,
        component_params=("pca__n_components",),
    ),
    "PLS": ModelSpec(
        PLSRegression,
        default_params={"scale": False},
        param_grid={"n_components": list(range(1, 21))},
        preprocess=CENTER_SCALE,
        component_params=("n_components",),
    ),
    "Ridge": ModelSpec(
        Ridge,
        param_grid={"alpha": list(np.logspace(3, -3, 13))},
        preprocess=CENTER_SCALE,
    ),
    "Lasso": ModelSpec(
        Lasso,
        default_params={"max_iter": 10000},
        param_grid={"alpha": list(np.logspace(0, -4, 13))},
        preprocess=CENTER_SCALE,
    ),
    "Elastic Net": ModelSpec(
        ElasticNet,
        default_params={"max_iter": 10000},
        param_grid={
            "alpha": list(np.logspace(0, -4, 9)),
            "l1_ratio": [0.1, 0.25, 0.5, 0.75, 1.0],
        },
        preprocess=CENTER_SCALE,
    ),
    "Neural Network": ModelSpec(
        MLPRegressor,
        default_params={
            "hidden_layer_sizes": (5,),
            "solver": "lbfgs",
            "max_iter": 2000,
        },
        param_grid={
            "hidden_layer_sizes": [(1,), (3,), (5,), (7,), (9,)],
            "alpha": [0.1, 0.01, 0.0],
        },
        preprocess=ModelPreprocess(center_scale=True, correlation_cutoff=0.75),
    ),
    "Averaged Neural Network": ModelSpec(
        AveragedMLPRegressor,
        default_params={"n_networks": 5},
        param_grid={
            "hidden_layer_sizes": [(1,), (3,), (5,), (7,), (9,)],
            "alpha": [0.1, 0.01, 0.0],
        },
        preprocess=ModelPreprocess(center_scale=True, correlation_cutoff=0.75),
    ),
    "MARS": ModelSpec(
        _hinge_regression,
        param_grid={
            "hinge__n_knots": [3, 5, 8, 12],
            "fit__alpha": [0.1, 0.01, 0.001],
        },
    ),
    "SVM": ModelSpec(
        SVR,
        default_params={"kernel": "rbf", "gamma": "scale"},
        param_grid={
            "C": [2.0**k for k in range(-2, 8)],
            "epsilon": [0.1],
        },
        preprocess=CENTER_SCALE,
    ),
    "KNN": ModelSpec(
        KNeighborsRegressor,
        param_grid={"n_neighbors": list(range(20, 0, -1))},
        preprocess=CENTER_SCALE,
        neighbor_params=("n_neighbors",),
    ),
}


def get_spec(name: str) -> ModelSpec:
    """
    Get the registry entry for a model.

    Raises:
        KeyError: If model not found.
    """
    if name not in MODEL_REGISTRY:
        available = ", ".join(MODEL_REGISTRY.keys())
        msg = f"Unknown model '{name}'. Available: {available}"
        raise KeyError(msg)
    return MODEL_REGISTRY[name]


def get_model(name: str, *, random_state: int | None = None, **kwargs: Any) -> BaseEstimator:
    """
    Get a model instance by name.

    Args:
        name: Model name from registry.
        random_state: Seed applied when the estimator accepts one.
        **kwargs: Override default parameters.

    Returns:
        Model instance.

    Raises:
        KeyError: If model not found.
    """
    spec = get_spec(name)
    params = {**spec.default_params, **kwargs}
    model = spec.factory(**params)

    if random_state is not None and "random_state" in model.get_params(deep=False):
        model.set_params(random_state=random_state)

    log.debug("Creating model", name=name, params=params)
    return model


def get_param_grid(
    name: str,
    overrides: dict[str, list[Any]] | None = None,
    *,
    n_features: int | None = None,
    n_samples: int | None = None,
) -> dict[str, list[Any]]:
    """
    Get the hyperparameter grid for a model.

    Args:
        name: Model name.
        overrides: Replacement candidate lists per parameter.
        n_features: Number of predictors; caps component counts.
        n_samples: Rows in the smallest training fold; caps component and
            neighbor counts.

    Returns:
        Parameter grid with bare estimator parameter names (possibly empty).
    """
    spec = get_spec(name)
    grid = {**spec.param_grid, **(overrides or {})}

    limits: dict[str, int] = {}
    if n_samples is not None:
        for param in spec.neighbor_params:
            limits[param] = n_samples
    caps = [v for v in (n_features, n_samples) if v is not None]
    if caps:
        for param in spec.component_params:
            limits[param] = min(caps)

    for param, limit in limits.items():
        if param not in grid:
            continue
        clipped = [v for v in grid[param] if v <= limit]
        if len(clipped) < len(grid[param]):
            log.info("Clipped tuning grid", model=name, param=param, limit=limit)
        grid[param] = clipped or [limit]

    return grid


def list_models() -> list[str]:
    """List all available model names."""
    return list(MODEL_REGISTRY.keys())


def build_model_pipeline(
    name: str,
    config: ExperimentConfig,
    *,
    numeric_features: list[str] | None = None,
    categorical_features: list[str] | None = None,
) -> Pipeline:
    """
    Build ``preprocessor -> model`` for a registry model.

    Args:
        name: Model name.
        config: Experiment configuration.
        numeric_features: Numeric predictor names.
        categorical_features: Categorical predictor names.

    Returns:
        Unfitted Pipeline with steps ``preprocessor`` and ``model``.
    """
    spec = get_spec(name)
    preprocessor = build_preprocessor(
        config.preprocessing,
        spec.preprocess,
        numeric_features=numeric_features,
        categorical_features=categorical_features,
    )
    model = get_model(name, random_state=config.resampling.random_state)
    return Pipeline(steps=[("preprocessor", preprocessor), ("model", model)])
