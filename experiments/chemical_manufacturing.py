"""
Yield of a chemical manufacturing process.

Question: Which process predictors drive yield?

Missing values are imputed with nearest neighbours, skewed predictors are
Yeo-Johnson transformed, and the enabled models are tuned. The predictors
ranked highest by the best model are listed with their split into
biological and manufacturing measurements.
"""

from pathlib import Path

from predictlab.config import load_config
from predictlab.datasets.catalog import load_dataset
from predictlab.evaluation.comparison import summarize_test_metrics
from predictlab.evaluation.importance import compute_importance
from predictlab.modeling.partition import split_dataset
from predictlab.modeling.tuning import ModelTrainer


def run_chemical_manufacturing(config_path: Path, top_n: int = 10) -> None:
    """
    Tune the enabled models and rank predictors of the best one.

    Args:
        config_path: Path to configuration file (linear or nonlinear set).
        top_n: Number of predictors to list.
    """
    config = load_config(config_path)
    dataset = load_dataset(config)
    print(f"Missing values: {int(dataset.X.isna().sum().sum())}")

    split = split_dataset(dataset, config)
    trainer = ModelTrainer(config)
    trained_models = trainer.train(split.X_train, split.y_train)
    evaluations = {
        name: trainer.evaluate(trained, split.X_test, split.y_test)
        for name, trained in trained_models.items()
    }

    test_metrics = summarize_test_metrics(evaluations)
    print("\nTest set performance:")
    print(test_metrics.to_string(index=False, float_format="{:.4f}".format))

    best = test_metrics["model"].iloc[0]
    importance = compute_importance(
        trained_models[best].pipeline,
        split.X_train,
        split.y_train,
        random_state=config.resampling.random_state,
    )
    top = importance.top(top_n)
    n_process = int(top["feature"].str.startswith("ManufacturingProcess").sum())
    print(f"\nTop {top_n} predictors for {best} ({importance.importance_type}):")
    print(top.to_string(index=False, float_format="{:.4f}".format))
    print(f"Manufacturing process predictors: {n_process} of {len(top)}")


if __name__ == "__main__":
    import sys

    if len(sys.argv) < 2:
        print("Usage: python chemical_manufacturing.py <config_path>")
        sys.exit(1)

    run_chemical_manufacturing(Path(sys.argv[1]))
