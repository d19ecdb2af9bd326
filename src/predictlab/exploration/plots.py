"""
Exploration plots: predictor histograms, correlation heatmap,
missingness by class, and PCA cumulative explained variance.
"""

from pathlib import Path

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
from matplotlib.figure import Figure

from predictlab.exploration.summary import missing_by_class, pca_cumulative_variance
from predictlab.utils.logging import get_logger

log = get_logger(__name__)


def plot_histograms(
    X: pd.DataFrame,
    columns: list[str] | None = None,
    max_columns: int = 16,
    bins: int = 30,
) -> Figure:
    """
    Grid of histograms for numeric predictors.

    Args:
        X: Predictor table.
        columns: Columns to plot (default: the first ``max_columns`` numeric).
        max_columns: Upper bound on panels.
        bins: Histogram bins.

    Returns:
        Figure.
    """
    if columns is None:
        columns = X.select_dtypes(include=[np.number]).columns.tolist()[:max_columns]

    n_cols = 4
    n_rows = max(1, int(np.ceil(len(columns) / n_cols)))
    fig, axes = plt.subplots(n_rows, n_cols, figsize=(14, 3 * n_rows), squeeze=False)
    flat = axes.ravel()

    for ax, col in zip(flat, columns):
        ax.hist(X[col].dropna(), bins=bins, color="steelblue", edgecolor="white")
        ax.set_title(str(col), fontsize=10)
        ax.grid(True, alpha=0.3)

    for ax in flat[len(columns) :]:
        ax.set_visible(False)

    fig.suptitle("Predictor Distributions", fontsize=12)
    fig.tight_layout()
    return fig


def plot_correlation_heatmap(X: pd.DataFrame) -> Figure:
    """Heatmap of pairwise Pearson correlations between numeric predictors."""
    corr = X.select_dtypes(include=[np.number]).corr()
    size = min(14, max(6, 0.35 * len(corr)))

    fig, ax = plt.subplots(figsize=(size, size))
    image = ax.imshow(corr.to_numpy(), cmap="RdBu_r", vmin=-1, vmax=1)
    fig.colorbar(image, ax=ax, shrink=0.8, label="Correlation")

    # Tick labels are unreadable beyond a few dozen predictors
    if len(corr) <= 40:
        ax.set_xticks(range(len(corr)))
        ax.set_xticklabels(corr.columns, rotation=90, fontsize=8)
        ax.set_yticks(range(len(corr)))
        ax.set_yticklabels(corr.columns, fontsize=8)

    ax.set_title("Correlation Matrix (Pearson)", fontsize=12)
    fig.tight_layout()
    return fig


def plot_missing_by_class(X: pd.DataFrame, y: pd.Series) -> Figure:
    """Heatmap of missing-value fractions per class and predictor."""
    fractions = missing_by_class(X, y)

    fig, ax = plt.subplots(figsize=(max(8, 0.3 * fractions.shape[1]), max(4, 0.4 * len(fractions))))
    if fractions.empty or fractions.shape[1] == 0:
        ax.text(0.5, 0.5, "No missing values", ha="center", va="center")
        ax.set_axis_off()
        return fig

    image = ax.imshow(fractions.to_numpy(dtype=float), cmap="Reds", vmin=0, vmax=1, aspect="auto")
    fig.colorbar(image, ax=ax, label="Fraction missing")
    ax.set_xticks(range(fractions.shape[1]))
    ax.set_xticklabels(fractions.columns, rotation=90, fontsize=8)
    ax.set_yticks(range(len(fractions)))
    ax.set_yticklabels(fractions.index, fontsize=9)
    ax.set_title("Missing Values by Class", fontsize=12)
    fig.tight_layout()
    return fig


def plot_pca_variance(X: pd.DataFrame, variance: float = 0.95) -> Figure:
    """
    Cumulative explained variance of principal components.

    Predictors are centred and scaled; the component count reaching
    ``variance`` is marked.
    """
    cumulative = pca_cumulative_variance(X)
    n_needed = min(int(np.searchsorted(cumulative, variance)) + 1, len(cumulative))
    components = np.arange(1, len(cumulative) + 1)

    fig, ax = plt.subplots(figsize=(8, 5))
    ax.plot(components, cumulative * 100, marker="o", markersize=3, color="steelblue")
    ax.axhline(variance * 100, color="red", linestyle="--", alpha=0.8)
    ax.axvline(n_needed, color="red", linestyle=":", alpha=0.8, label=f"{n_needed} components")
    ax.set_xlabel("Number of components", fontsize=11)
    ax.set_ylabel("Cumulative variance explained (%)", fontsize=11)
    ax.set_title("PCA Cumulative Explained Variance", fontsize=12)
    ax.legend(loc="lower right")
    ax.grid(True, alpha=0.3)
    fig.tight_layout()
    return fig


def save_exploration_plots(
    X: pd.DataFrame,
    output_dir: Path,
    y: pd.Series | None = None,
    *,
    categorical_response: bool = False,
) -> list[Path]:
    """
    Write every applicable exploration plot as PNG.

    Missingness by class is drawn only for a categorical response.
    """
    output_dir.mkdir(parents=True, exist_ok=True)
    figures: dict[str, Figure] = {}

    numeric = X.select_dtypes(include=[np.number])
    if numeric.shape[1] > 0:
        figures["histograms"] = plot_histograms(X)
    if numeric.shape[1] > 1:
        figures["correlation"] = plot_correlation_heatmap(X)
        if len(numeric.dropna()) > 1:
            figures["pca_variance"] = plot_pca_variance(X)
    if categorical_response and y is not None:
        figures["missing_by_class"] = plot_missing_by_class(X, y)

    paths = []
    for name, fig in figures.items():
        path = output_dir / f"{name}.png"
        fig.savefig(path, format="png", dpi=150, bbox_inches="tight")
        plt.close(fig)
        paths.append(path)

    log.info("Saved exploration plots", output_dir=str(output_dir), n_plots=len(paths))
    return paths
