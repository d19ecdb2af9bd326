"""
Linear models on the solubility data.

Question: How far do linear models get on aqueous solubility?

Ordinary least squares (after removing highly correlated predictors),
robust regression on principal components, PLS and the penalized models
are tuned by 10-fold cross-validation on the predefined training set and
scored on the predefined test set.
"""

from pathlib import Path

from predictlab.config import load_config
from predictlab.datasets.catalog import load_dataset
from predictlab.evaluation.comparison import compare_resamples, summarize_test_metrics
from predictlab.modeling.partition import split_dataset
from predictlab.modeling.tuning import ModelTrainer


def run_solubility_linear(config_path: Path) -> None:
    """
    Tune every enabled linear model and compare resampled and test RMSE.

    Args:
        config_path: Path to configuration file.
    """
    config = load_config(config_path)
    split = split_dataset(load_dataset(config), config)

    print(f"Training: {len(split.X_train)} compounds, {len(split.feature_names)} predictors")
    print(f"Test: {len(split.X_test)} compounds")

    trainer = ModelTrainer(config)
    trained_models = trainer.train(split.X_train, split.y_train)
    evaluations = {
        name: trainer.evaluate(trained, split.X_test, split.y_test)
        for name, trained in trained_models.items()
    }

    for name, trained in trained_models.items():
        print(f"{name}: selected {trained.best_params or 'defaults'}")

    _, summary = compare_resamples(trained_models)
    print("\nResampled performance:")
    print(summary.to_string(index=False, float_format="{:.4f}".format))
    print("\nTest set performance:")
    print(summarize_test_metrics(evaluations).to_string(index=False, float_format="{:.4f}".format))


if __name__ == "__main__":
    import sys

    if len(sys.argv) < 2:
        print("Usage: python solubility_linear.py <config_path>")
        sys.exit(1)

    run_solubility_linear(Path(sys.argv[1]))
