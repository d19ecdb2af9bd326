"""
Exploration of the glass and soybean data.

Question: What do the glass and soybean predictors look like?

Glass: skewness and correlation of the oxide measurements. Soybean:
degenerate indicators and whether missing values concentrate in a few
disease classes.
"""

from pathlib import Path

from predictlab.config import load_config
from predictlab.datasets.catalog import load_dataset
from predictlab.exploration import (
    degenerate_predictors,
    high_correlation_pairs,
    missing_by_class,
    save_exploration_plots,
    skewed_predictors,
)


def run_categorical_exploration(config_path: Path) -> None:
    """
    Print exploration summaries and save plots for one dataset.

    Args:
        config_path: Path to a glass or soybean configuration file.
    """
    config = load_config(config_path)
    dataset = load_dataset(config)
    X, y = dataset.combined()

    print(f"{dataset.name}: {len(X)} rows, {X.shape[1]} predictors, {y.nunique()} classes")
    print(f"Class counts:\n{y.value_counts().to_string()}")

    skewed = skewed_predictors(X)
    if not skewed.empty:
        print(f"\nSkewed predictors:\n{skewed.to_string(float_format='{:.2f}'.format)}")

    pairs = high_correlation_pairs(X, cutoff=0.5)
    if not pairs.empty:
        print(f"\nCorrelated pairs:\n{pairs.to_string(index=False)}")

    degenerate = degenerate_predictors(X)
    print(f"\nDegenerate predictors: {', '.join(degenerate.index) or 'none'}")

    by_class = missing_by_class(X, y)
    if by_class.shape[1] > 0:
        share = by_class.mean(axis=1)
        print(f"\nMean fraction missing by class:\n{share[share > 0].to_string()}")

    paths = save_exploration_plots(
        X, config.plots_dir / "exploration", y, categorical_response=True
    )
    print(f"\nSaved {len(paths)} plots to {config.plots_dir / 'exploration'}")


if __name__ == "__main__":
    import sys

    if len(sys.argv) < 2:
        print("Usage: python categorical_exploration.py <config_path>")
        sys.exit(1)

    run_categorical_exploration(Path(sys.argv[1]))
