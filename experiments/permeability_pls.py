"""
Sparse fingerprints and permeability.

Question: Does a sparse model beat PLS on binary fingerprints?

Near-zero-variance fingerprint bits are removed before tuning. PLS and the
elastic net are tuned with the one-standard-error rule, and the selected
component count, the tuning profile and the test RMSE are reported.
"""

from pathlib import Path

from predictlab.config import load_config
from predictlab.datasets.catalog import load_dataset
from predictlab.evaluation.comparison import summarize_test_metrics
from predictlab.evaluation.report import plot_tuning_profile, save_figure
from predictlab.exploration import degenerate_predictors
from predictlab.modeling.partition import split_dataset
from predictlab.modeling.tuning import tune_fit_evaluate


def run_permeability_pls(config_path: Path) -> None:
    """
    Tune PLS and the elastic net on the filtered fingerprints.

    Args:
        config_path: Path to configuration file.
    """
    config = load_config(config_path)
    dataset = load_dataset(config)

    degenerate = degenerate_predictors(
        dataset.X,
        freq_cut=config.preprocessing.freq_cut,
        unique_cut=config.preprocessing.unique_cut,
    )
    print(f"Fingerprints: {dataset.X.shape[1]}, near-zero variance: {len(degenerate)}")

    split = split_dataset(dataset, config)
    evaluations = {}
    for name in config.models.enabled:
        trained, evaluation = tune_fit_evaluate(
            split.X_train,
            split.y_train,
            split.X_test,
            split.y_test,
            name,
            config,
            plots_dir=config.plots_dir,
        )
        evaluations[name] = evaluation
        print(f"{name}: selected {trained.best_params}, CV R² {trained.cv_r2:.3f}")

        fig = plot_tuning_profile(trained)
        if fig is not None:
            save_figure(fig, config.plots_dir / f"{name.lower().replace(' ', '_')}_profile.png")

    print("\nTest set performance:")
    print(summarize_test_metrics(evaluations).to_string(index=False, float_format="{:.4f}".format))


if __name__ == "__main__":
    import sys

    if len(sys.argv) < 2:
        print("Usage: python permeability_pls.py <config_path>")
        sys.exit(1)

    run_permeability_pls(Path(sys.argv[1]))
