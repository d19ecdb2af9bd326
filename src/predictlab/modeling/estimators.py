"""
Estimators assembled from scikit-learn building blocks.

Nothing here fits weights or searches knots itself; each class composes
library estimators so they can be tuned with a flat parameter grid.
"""

from typing import Any

import numpy as np
from sklearn.base import BaseEstimator, RegressorMixin
from sklearn.ensemble import VotingRegressor
from sklearn.neural_network import MLPRegressor
from sklearn.utils.validation import check_is_fitted


class AveragedMLPRegressor(RegressorMixin, BaseEstimator):
    """
    Average of several single-hidden-layer networks fit from different seeds.

    Averaging reduces the variance caused by random weight initialisation.
    Internally a VotingRegressor of ``n_networks`` MLPRegressors.

    Parameters:
        hidden_layer_sizes: Hidden units, e.g. ``(5,)``.
        alpha: L2 weight decay.
        n_networks: Number of networks averaged.
        max_iter: Optimizer iterations per network.
        solver: MLP solver (lbfgs suits small tabular data).
        random_state: Seed used to derive one seed per network.
    """

    def __init__(
        self,
        hidden_layer_sizes: tuple[int, ...] = (5,),
        alpha: float = 0.01,
        n_networks: int = 5,
        max_iter: int = 2000,
        solver: str = "lbfgs",
        random_state: int | None = None,
    ) -> None:
        self.hidden_layer_sizes = hidden_layer_sizes
        self.alpha = alpha
        self.n_networks = n_networks
        self.max_iter = max_iter
        self.solver = solver
        self.random_state = random_state

    def fit(self, X: Any, y: Any) -> "AveragedMLPRegressor":
        """Fit every network on the same data."""
        if self.n_networks < 1:
            msg = f"n_networks must be >= 1, got {self.n_networks}"
            raise ValueError(msg)

        seeds = np.random.RandomState(self.random_state).randint(
            0, np.iinfo(np.int32).max, size=self.n_networks
        )
        self.ensemble_ = VotingRegressor(
            estimators=[
                (
                    f"net{i}",
                    MLPRegressor(
                        hidden_layer_sizes=self.hidden_layer_sizes,
                        alpha=self.alpha,
                        max_iter=self.max_iter,
                        solver=self.solver,
                        random_state=int(seed),
                    ),
                )
                for i, seed in enumerate(seeds)
            ]
        )
        self.ensemble_.fit(X, np.ravel(y))
        self.n_features_in_ = self.ensemble_.n_features_in_
        return self

    def predict(self, X: Any) -> np.ndarray:
        """Mean prediction across networks."""
        check_is_fitted(self, "ensemble_")
        return self.ensemble_.predict(X)
