"""
Latent-variable models on the tecator spectra.

Question: How many latent directions do the absorbance spectra need?

The 100 absorbance channels are almost perfectly correlated. PCA gives the
effective dimension of the predictor space; PCR and PLS are then tuned over
the component count and compared with ordinary least squares and the
penalized models under repeated cross-validation.
"""

from pathlib import Path

from predictlab.config import load_config
from predictlab.datasets.catalog import load_dataset
from predictlab.evaluation.comparison import compare_resamples, summarize_test_metrics
from predictlab.exploration import effective_dimension, high_correlation_pairs
from predictlab.modeling.partition import split_dataset
from predictlab.modeling.tuning import ModelTrainer


def run_tecator_latent(config_path: Path) -> None:
    """
    Report the effective dimension, then tune and compare latent models.

    Args:
        config_path: Path to configuration file.
    """
    config = load_config(config_path)
    dataset = load_dataset(config)

    n_pairs = len(high_correlation_pairs(dataset.X, cutoff=0.99))
    print(f"Channel pairs with |r| > 0.99: {n_pairs}")
    print(f"Components for 95% of variance: {effective_dimension(dataset.X, 0.95)}")
    print(f"Components for 99.9% of variance: {effective_dimension(dataset.X, 0.999)}")

    split = split_dataset(dataset, config)
    trainer = ModelTrainer(config)
    trained_models = trainer.train(split.X_train, split.y_train)

    for name in ("PCR", "PLS"):
        if name in trained_models:
            print(f"{name} components: {trained_models[name].best_params}")

    evaluations = {
        name: trainer.evaluate(trained, split.X_test, split.y_test)
        for name, trained in trained_models.items()
    }

    _, summary = compare_resamples(trained_models)
    print("\nResampled performance:")
    print(summary.to_string(index=False, float_format="{:.4f}".format))
    print("\nTest set performance:")
    print(summarize_test_metrics(evaluations).to_string(index=False, float_format="{:.4f}".format))


if __name__ == "__main__":
    import sys

    if len(sys.argv) < 2:
        print("Usage: python tecator_latent.py <config_path>")
        sys.exit(1)

    run_tecator_latent(Path(sys.argv[1]))
