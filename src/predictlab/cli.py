"""Command-line interface for predictlab."""

from pathlib import Path
from typing import TYPE_CHECKING, Annotated

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

if TYPE_CHECKING:
    import pandas as pd

    from predictlab.config.settings import ExperimentConfig
    from predictlab.datasets.base import Dataset

app = typer.Typer(
    name="predictlab",
    help="Tune, fit and evaluate regression models on benchmark datasets.",
    no_args_is_help=True,
)

console = Console()

ConfigOption = Annotated[
    Path,
    typer.Option(
        "--config",
        "-c",
        help="Path to configuration YAML file.",
        exists=True,
        dir_okay=False,
    ),
]


@app.callback()
def main(
    log_level: Annotated[
        str,
        typer.Option("--log-level", "-l", help="Log level (DEBUG, INFO, WARNING, ERROR)."),
    ] = "WARNING",
    json_logs: Annotated[
        bool,
        typer.Option("--json-logs", help="Emit log events as JSON lines."),
    ] = False,
) -> None:
    """Configure logging for every command."""
    from predictlab.utils.logging import configure_logging

    configure_logging(log_level, json_output=json_logs)


def _load_config(config: Path, output: Path | None = None) -> "ExperimentConfig":
    """Load configuration, optionally redirecting the output root."""
    from predictlab.config.loader import load_config
    from predictlab.config.settings import OutputConfig

    console.print(f"[blue]Loading configuration from {config}[/blue]")
    try:
        experiment_config = load_config(config)
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[red]Invalid configuration: {e}[/red]")
        raise typer.Exit(code=1) from e

    if output is not None:
        experiment_config = experiment_config.model_copy(
            update={"output": OutputConfig(output_root=output)}
        )
    return experiment_config


def _load_dataset(experiment_config: "ExperimentConfig") -> "Dataset":
    """Load the configured dataset, exiting with a message on failure."""
    from predictlab.datasets.catalog import load_dataset
    from predictlab.validation.core import SCHEMA_ERRORS, format_schema_error

    console.print(f"[blue]Loading dataset {experiment_config.dataset.name}[/blue]")
    try:
        return load_dataset(experiment_config)
    except FileNotFoundError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(code=1) from e
    except SCHEMA_ERRORS as e:
        message = escape(format_schema_error(e))
        console.print(f"[red]Schema validation failed:\n{message}[/red]")
        raise typer.Exit(code=1) from e
    except (KeyError, ValueError) as e:
        console.print(f"[red]Error loading dataset: {e}[/red]")
        raise typer.Exit(code=1) from e


@app.command()
def datasets() -> None:
    """List the dataset catalogue."""
    from predictlab.datasets.catalog import DATASET_CATALOG

    table = Table(title="Dataset Catalogue")
    table.add_column("Name", style="cyan")
    table.add_column("Kind", style="magenta")
    table.add_column("Response", style="green")
    table.add_column("Files", style="dim")
    table.add_column("Description")

    for spec in DATASET_CATALOG.values():
        table.add_row(
            spec.name,
            spec.kind.value,
            spec.default_target,
            ", ".join(spec.files) or "(generated)",
            spec.description,
        )

    console.print(table)


@app.command()
def validate(config: ConfigOption) -> None:
    """Validate the configured dataset against its schemas."""
    from predictlab.validation import ConsoleReporter, ValidationRunner, all_passed

    experiment_config = _load_config(config)
    console.print("[blue]Running schema validation...[/blue]")

    runner = ValidationRunner(experiment_config)
    results = runner.run()

    reporter = ConsoleReporter(console)
    reporter.print_results(results)

    if not all_passed(results):
        raise typer.Exit(code=1)


def _print_frame(frame: "pd.DataFrame", title: str, max_rows: int = 20) -> None:
    """Print the first rows of a DataFrame as a rich table."""
    table = Table(title=title)
    table.add_column(frame.index.name or "", style="cyan")
    for column in frame.columns:
        table.add_column(str(column), justify="right")

    for index, row in frame.head(max_rows).iterrows():
        cells = [
            f"{value:.4g}" if isinstance(value, float) else str(value) for value in row
        ]
        table.add_row(str(index), *cells)

    console.print(table)
    if len(frame) > max_rows:
        console.print(f"[dim]... {len(frame) - max_rows} more rows[/dim]")


@app.command()
def explore(
    config: ConfigOption,
    output: Annotated[
        Path | None,
        typer.Option(
            "--output",
            "-o",
            help="Directory for exploration plots. Default: <output_root>/<project>/plots/exploration.",
        ),
    ] = None,
    skew_threshold: Annotated[
        float,
        typer.Option("--skew", help="Absolute skewness that counts as skewed."),
    ] = 1.0,
    correlation_cutoff: Annotated[
        float,
        typer.Option("--cutoff", help="Absolute correlation that counts as high."),
    ] = 0.75,
) -> None:
    """Print predictor summaries and save exploration plots."""
    from predictlab.datasets.base import DatasetKind
    from predictlab.exploration import (
        degenerate_predictors,
        effective_dimension,
        high_correlation_pairs,
        missing_by_class,
        save_exploration_plots,
        skewed_predictors,
        summarize_predictors,
    )

    experiment_config = _load_config(config)
    dataset = _load_dataset(experiment_config)
    X, y = dataset.combined()
    categorical = dataset.kind == DatasetKind.CLASSIFICATION

    overview = Table(title=f"{dataset.name} Overview")
    overview.add_column("Metric", style="cyan")
    overview.add_column("Value", style="green")
    overview.add_row("Samples", str(len(X)))
    overview.add_row("Predictors", str(X.shape[1]))
    overview.add_row("Response", str(y.name))
    overview.add_row("Missing values", str(int(X.isna().sum().sum())))
    if categorical:
        overview.add_row("Classes", str(y.nunique()))
    console.print(overview)

    _print_frame(summarize_predictors(X), "Predictor Summary")

    skewed = skewed_predictors(X, threshold=skew_threshold)
    console.print(
        f"\n[blue]{len(skewed)} predictors with |skewness| > {skew_threshold}[/blue]"
    )
    if not skewed.empty:
        _print_frame(skewed.to_frame(), "Skewed Predictors", max_rows=10)

    degenerate = degenerate_predictors(
        X,
        freq_cut=experiment_config.preprocessing.freq_cut,
        unique_cut=experiment_config.preprocessing.unique_cut,
    )
    console.print(f"\n[blue]{len(degenerate)} degenerate predictors[/blue]")
    if not degenerate.empty:
        _print_frame(degenerate, "Degenerate Predictors", max_rows=10)

    pairs = high_correlation_pairs(X, cutoff=correlation_cutoff)
    console.print(
        f"\n[blue]{len(pairs)} predictor pairs with |r| > {correlation_cutoff}[/blue]"
    )
    if not pairs.empty:
        _print_frame(pairs, "Highly Correlated Pairs", max_rows=10)

    if X.select_dtypes("number").shape[1] > 1 and len(X.dropna()) > 1:
        console.print(
            f"\n[blue]Components for 95% of variance: {effective_dimension(X)}[/blue]"
        )

    if categorical:
        by_class = missing_by_class(X, y)
        if by_class.shape[1] > 0:
            _print_frame(by_class.mean(axis=1).to_frame("mean_missing"), "Missingness by Class")

    plots_dir = output or experiment_config.plots_dir / "exploration"
    paths = save_exploration_plots(X, plots_dir, y, categorical_response=categorical)
    console.print(f"\n[green]Saved {len(paths)} plots to {plots_dir}[/green]")


@app.command()
def train(
    config: ConfigOption,
    model: Annotated[
        str | None,
        typer.Option(
            "--model",
            "-m",
            help="Single model name to train. Trains all enabled models if not specified.",
        ),
    ] = None,
    no_tune: Annotated[
        bool,
        typer.Option("--no-tune", help="Skip the grid search; cross-validate defaults only."),
    ] = False,
    no_mlflow: Annotated[
        bool,
        typer.Option("--no-mlflow", help="Skip MLflow logging even if enabled in config."),
    ] = False,
    output: Annotated[
        Path | None,
        typer.Option("--output", "-o", help="Output root directory (overrides config)."),
    ] = None,
    report: Annotated[
        Path | None,
        typer.Option(
            "--report",
            "-r",
            help="Override path for HTML training report. Default: saved in output folder.",
        ),
    ] = None,
) -> None:
    """
    Tune, fit and evaluate models on the configured dataset.

    Every model is tuned by cross-validation on the training partition,
    refit with the selected hyperparameters and scored on the test partition.
    """
    import numpy as np
    from mlflow.exceptions import MlflowException

    from predictlab.datasets.base import DatasetKind
    from predictlab.evaluation.comparison import compare_resamples
    from predictlab.evaluation.experiment import Experiment
    from predictlab.evaluation.importance import FeatureImportance, compute_importance
    from predictlab.evaluation.report import (
        ReportData,
        generate_html_report,
        generate_metrics_table,
        print_cv_table,
        print_importance_table,
        print_resample_summary,
        save_model_plots,
        save_prediction_tables,
    )
    from predictlab.modeling.inference import save_model
    from predictlab.modeling.models import list_models
    from predictlab.modeling.partition import split_dataset
    from predictlab.modeling.tuning import ModelEvaluation, ModelTrainer

    experiment_config = _load_config(config, output)

    model_names = [model] if model is not None else experiment_config.models.enabled
    unknown = [name for name in model_names if name not in list_models()]
    if unknown:
        console.print(f"[red]Unknown model(s): {', '.join(unknown)}[/red]")
        console.print(f"[dim]Available: {', '.join(list_models())}[/dim]")
        raise typer.Exit(code=1)

    dataset = _load_dataset(experiment_config)
    if dataset.kind == DatasetKind.CLASSIFICATION:
        console.print(
            f"[red]Dataset '{dataset.name}' has a categorical response; "
            "use 'predictlab explore' instead.[/red]"
        )
        raise typer.Exit(code=1)

    try:
        split = split_dataset(dataset, experiment_config)
    except ValueError as e:
        console.print(f"[red]Error partitioning data: {e}[/red]")
        raise typer.Exit(code=1) from e

    stats = split.target_stats
    data_table = Table(title=f"{dataset.name} Data Summary")
    data_table.add_column("Metric", style="cyan")
    data_table.add_column("Value", style="green")
    data_table.add_row("Training samples", str(len(split.X_train)))
    data_table.add_row("Test samples", str(len(split.X_test)))
    data_table.add_row("Predictors", str(len(split.feature_names)))
    data_table.add_row("Split", "predefined" if split.predefined else "stratified random")
    data_table.add_row("Response mean", f"{stats['mean']:.4g}")
    data_table.add_row("Response std", f"{stats['std']:.4g}")
    data_table.add_row("Response range", f"{stats['min']:.4g} - {stats['max']:.4g}")
    console.print(data_table)

    resampling = experiment_config.resampling
    console.print(f"\n[blue]Training models: {', '.join(model_names)}[/blue]")
    console.print(
        f"[dim]Resampling: {resampling.method.value}, {resampling.folds} folds"
        + (f" x {resampling.repeats} repeats" if resampling.n_resamples > resampling.folds else "")
        + f", selection: {resampling.selection.value}[/dim]"
    )
    if no_tune:
        console.print("[dim]Hyperparameter tuning disabled[/dim]")

    trainer = ModelTrainer(experiment_config)
    trained_models = trainer.train(
        split.X_train, split.y_train, model_names=model_names, tune=not no_tune
    )

    for name, reason in trainer.failures.items():
        console.print(f"[yellow]Model {name} failed: {reason}[/yellow]")
    if not trained_models:
        console.print("[red]No model trained successfully.[/red]")
        raise typer.Exit(code=1)

    evaluations: dict[str, ModelEvaluation] = {}
    importances: dict[str, FeatureImportance] = {}
    for name, trained in trained_models.items():
        print_cv_table(trained, console)
        evaluations[name] = trainer.evaluate(trained, split.X_test, split.y_test)

        try:
            importances[name] = compute_importance(
                trained.pipeline,
                split.X_train,
                split.y_train,
                n_repeats=5,
                random_state=resampling.random_state,
            )
            print_importance_table(importances[name], name, console, top_n=10)
        except ValueError as e:
            console.print(f"[yellow]Importance unavailable for {name}: {e}[/yellow]")

    console.print()
    generate_metrics_table(trained_models, evaluations, console)
    _, summary = compare_resamples(trained_models)
    if not summary.empty:
        print_resample_summary(summary, console)

    # Artifacts
    artifacts: list[Path] = []
    console.print(f"\n[blue]Saving outputs to {experiment_config.project_dir}[/blue]")
    for name, trained in trained_models.items():
        evaluation = evaluations[name]
        y_train_pred = np.ravel(trained.pipeline.predict(split.X_train[trained.feature_names]))
        train_path, test_path = save_prediction_tables(
            model_name=name,
            y_train=split.y_train.to_numpy(),
            y_train_pred=y_train_pred,
            y_test=evaluation.observed.to_numpy(),
            y_test_pred=evaluation.predictions.to_numpy(),
            output_dir=experiment_config.predictions_dir,
            experiment_name=experiment_config.dataset.name,
        )
        artifacts += [train_path, test_path]
        save_model_plots(
            trained, evaluation, experiment_config.plots_dir, importances.get(name)
        )
        model_path = save_model(
            trained, experiment_config.models_dir, experiment_config, evaluation
        )
        console.print(f"[green]Saved: {model_path}[/green]")

    report_path = report or experiment_config.reports_dir / f"{experiment_config.project}_report.html"
    report_data = ReportData(
        project=experiment_config.project,
        dataset=dataset.name,
        target=str(split.y_train.name),
        n_train=len(split.X_train),
        n_test=len(split.X_test),
        feature_names=split.feature_names,
        trained_models=trained_models,
        evaluations=evaluations,
        importances=importances,
        failures=trainer.failures,
        resampling=f"{resampling.method.value} ({resampling.n_resamples} resamples)",
    )
    generate_html_report(report_data, report_path)
    artifacts.append(report_path)
    console.print(f"[green]Report: {report_path}[/green]")

    if experiment_config.mlflow.enabled and not no_mlflow:
        console.print("\n[blue]Logging to MLflow...[/blue]")
        try:
            run_id = Experiment(experiment_config).log_training(
                trained_models,
                evaluations,
                n_train=len(split.X_train),
                n_test=len(split.X_test),
                artifacts=artifacts,
            )
            console.print(f"[green]Logged to MLflow run: {run_id}[/green]")
        except (MlflowException, OSError) as e:
            console.print(f"[yellow]MLflow logging failed: {e}[/yellow]")

    best = min(evaluations.values(), key=lambda ev: ev.metrics.rmse)
    console.print(
        f"\n[green]Training complete. Lowest test RMSE: {best.name} ({best.metrics.rmse:.4f})[/green]"
    )


@app.command()
def predict(
    model_uri: Annotated[
        str,
        typer.Option(
            "--model",
            "-m",
            help="Path to a .joblib model or MLflow model URI (models:/name/version).",
        ),
    ],
    data: Annotated[
        Path,
        typer.Option(
            "--data",
            "-d",
            help="CSV with predictor columns.",
            exists=True,
            dir_okay=False,
        ),
    ],
    output: Annotated[
        Path,
        typer.Option("--output", "-o", help="Output CSV for predictions."),
    ],
) -> None:
    """Generate predictions for new data using a trained model."""
    from predictlab.datasets.base import read_r_csv
    from predictlab.modeling.inference import load_model, predict_frame
    from predictlab.validation.core import SCHEMA_ERRORS

    console.print(f"[blue]Loading model: {model_uri}[/blue]")
    try:
        loaded_model = load_model(model_uri)
    except FileNotFoundError as e:
        console.print(f"[red]Model not found: {e}[/red]")
        raise typer.Exit(code=1) from e

    if loaded_model.feature_names:
        console.print(f"[dim]Model expects {len(loaded_model.feature_names)} predictors[/dim]")

    try:
        frame = read_r_csv(data)
        result = predict_frame(loaded_model, frame)
    except (FileNotFoundError, ValueError, KeyError, *SCHEMA_ERRORS) as e:
        console.print(f"[red]Prediction failed: {e}[/red]")
        raise typer.Exit(code=1) from e

    output.parent.mkdir(parents=True, exist_ok=True)
    result.to_csv(output, index=False)

    predicted = result["predicted"]
    table = Table(title="Prediction Results")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="green")
    table.add_row("Model", loaded_model.name)
    table.add_row("Rows predicted", str(len(result)))
    table.add_row("Mean prediction", f"{predicted.mean():.4g}")
    table.add_row("Range", f"{predicted.min():.4g} - {predicted.max():.4g}")
    console.print(table)

    console.print(f"\n[green]Saved predictions to: {output}[/green]")


@app.command()
def version() -> None:
    """Show version information."""
    from predictlab import __version__

    console.print(f"predictlab version {__version__}")


if __name__ == "__main__":
    app()
