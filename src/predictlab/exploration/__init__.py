"""
Exploratory summaries and plots for predictor sets.
"""

from predictlab.exploration.plots import (
    plot_correlation_heatmap,
    plot_histograms,
    plot_missing_by_class,
    plot_pca_variance,
    save_exploration_plots,
)
from predictlab.exploration.summary import (
    degenerate_predictors,
    effective_dimension,
    high_correlation_pairs,
    missing_by_class,
    pca_cumulative_variance,
    skewed_predictors,
    summarize_predictors,
)

__all__ = [
    "degenerate_predictors",
    "effective_dimension",
    "high_correlation_pairs",
    "missing_by_class",
    "pca_cumulative_variance",
    "plot_correlation_heatmap",
    "plot_histograms",
    "plot_missing_by_class",
    "plot_pca_variance",
    "save_exploration_plots",
    "skewed_predictors",
    "summarize_predictors",
]
