"""
Training report generation.

Diagnostic plots (observed vs predicted, residuals, tuning profiles,
importance, resample distributions), rich console tables, prediction table
export, and a self-contained HTML report with embedded plots.
"""

import base64
from dataclasses import dataclass, field
from datetime import datetime
from html import escape
from io import BytesIO
from pathlib import Path
from typing import TYPE_CHECKING, Any

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
from matplotlib.figure import Figure
from rich.console import Console
from rich.table import Table

from predictlab.evaluation.comparison import compare_resamples
from predictlab.evaluation.importance import FeatureImportance
from predictlab.schemas.registry import SchemaRegistry
from predictlab.utils.logging import get_logger

if TYPE_CHECKING:
    from predictlab.modeling.tuning import ModelEvaluation, TrainedModel

log = get_logger(__name__)


def safe_name(name: str) -> str:
    """Lower-case file name fragment for a model or experiment name."""
    return name.replace(" ", "_").replace("/", "_").lower()


def save_prediction_tables(
    model_name: str,
    y_train: np.ndarray,
    y_train_pred: np.ndarray,
    y_test: np.ndarray,
    y_test_pred: np.ndarray,
    output_dir: Path,
    *,
    experiment_name: str | None = None,
    timestamp: str | None = None,
) -> tuple[Path, Path]:
    """
    Save prediction tables for train and test splits.

    Creates CSV files with Actual, Predicted and Residual columns.

    Args:
        model_name: Name of the model (e.g., "PLS").
        y_train: Actual training response values.
        y_train_pred: Predicted training response values.
        y_test: Actual test response values.
        y_test_pred: Predicted test response values.
        output_dir: Directory to save prediction tables.
        experiment_name: Optional experiment prefix for filenames.
        timestamp: Optional timestamp string. If None, uses current time.

    Returns:
        Tuple of (train_predictions_path, test_predictions_path).
    """
    output_dir.mkdir(parents=True, exist_ok=True)

    if timestamp is None:
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")

    prefix = safe_name(model_name)
    if experiment_name:
        prefix = f"{safe_name(experiment_name)}_{prefix}"

    paths = []
    for split, actual, predicted in (
        ("train", y_train, y_train_pred),
        ("test", y_test, y_test_pred),
    ):
        actual = np.asarray(actual, dtype=float).ravel()
        predicted = np.asarray(predicted, dtype=float).ravel()
        frame = SchemaRegistry.validate(
            pd.DataFrame(
                {"Actual": actual, "Predicted": predicted, "Residual": actual - predicted}
            ),
            "prediction_table",
        )
        path = output_dir / f"{prefix}_{split}_predictions_{timestamp}.csv"
        frame.to_csv(path, index=False)
        paths.append(path)

    log.info(
        "Saved prediction tables",
        model=model_name,
        train_path=str(paths[0]),
        test_path=str(paths[1]),
        n_train=len(y_train),
        n_test=len(y_test),
    )
    return paths[0], paths[1]


def _fig_to_base64(fig: Figure) -> str:
    """Convert matplotlib figure to base64 PNG string."""
    buf = BytesIO()
    fig.savefig(buf, format="png", dpi=150, bbox_inches="tight")
    buf.seek(0)
    return base64.b64encode(buf.read()).decode("utf-8")


def save_figure(fig: Figure, path: Path) -> Path:
    """Write a figure as PNG and close it."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fig.savefig(path, format="png", dpi=150, bbox_inches="tight")
    plt.close(fig)
    log.debug("Saved plot", path=str(path))
    return path


def plot_observed_vs_predicted(evaluation: "ModelEvaluation") -> Figure:
    """Scatterplot of observed against predicted values with the identity line."""
    observed = evaluation.observed.to_numpy(dtype=float)
    predicted = evaluation.predictions.to_numpy(dtype=float)

    fig, ax = plt.subplots(figsize=(7, 6))
    ax.scatter(predicted, observed, alpha=0.6, s=25, c="steelblue", edgecolors="none")

    low = min(observed.min(), predicted.min())
    high = max(observed.max(), predicted.max())
    ax.plot([low, high], [low, high], "r--", alpha=0.8, linewidth=1.5, label="y = x")

    metrics = evaluation.metrics
    ax.text(
        0.05,
        0.95,
        f"RMSE = {metrics.rmse:.3f}\nR² = {metrics.r2:.3f}",
        transform=ax.transAxes,
        fontsize=10,
        verticalalignment="top",
        bbox={"boxstyle": "round", "facecolor": "white", "alpha": 0.8},
    )

    ax.set_xlabel("Predicted", fontsize=11)
    ax.set_ylabel("Observed", fontsize=11)
    ax.set_title(f"{evaluation.name}: Observed vs Predicted (test set)", fontsize=12)
    ax.legend(loc="lower right")
    ax.grid(True, alpha=0.3)
    fig.tight_layout()
    return fig


def plot_residuals(evaluation: "ModelEvaluation") -> Figure:
    """Residuals against predicted values; structure here signals misfit."""
    predicted = evaluation.predictions.to_numpy(dtype=float)
    residuals = evaluation.residuals.to_numpy(dtype=float)

    fig, ax = plt.subplots(figsize=(7, 5))
    ax.scatter(predicted, residuals, alpha=0.6, s=25, c="steelblue", edgecolors="none")
    ax.axhline(0.0, color="red", linestyle="--", linewidth=1.5, alpha=0.8)

    ax.set_xlabel("Predicted", fontsize=11)
    ax.set_ylabel("Residual (observed - predicted)", fontsize=11)
    ax.set_title(f"{evaluation.name}: Residuals (test set)", fontsize=12)
    ax.grid(True, alpha=0.3)
    fig.tight_layout()
    return fig


def _tuning_columns(cv_results: pd.DataFrame) -> list[str]:
    return list(cv_results.columns[: cv_results.columns.get_loc("mean_rmse")])


def plot_tuning_profile(trained: "TrainedModel") -> Figure | None:
    """
    Cross-validated RMSE across the tuning grid.

    The parameter with the most candidates goes on the x-axis; remaining
    parameters become separate lines. Returns None for an untuned model.
    """
    results = trained.cv_results
    params = _tuning_columns(results)
    if not params:
        return None

    x_param = max(params, key=lambda p: results[p].astype(str).nunique())
    others = [p for p in params if p != x_param]

    x_values = results[x_param]
    numeric_x = pd.api.types.is_numeric_dtype(x_values)
    if not numeric_x:
        categories = list(dict.fromkeys(x_values.astype(str)))
        positions = x_values.astype(str).map({c: i for i, c in enumerate(categories)})
    else:
        positions = x_values.astype(float)

    fig, ax = plt.subplots(figsize=(8, 5))
    if others:
        labels = results[others].astype(str).agg(", ".join, axis=1)
        groups = results.groupby(labels, sort=False).groups
    else:
        groups = {"": results.index}

    for label, index in groups.items():
        order = positions.loc[index].sort_values().index
        ax.plot(
            positions.loc[order],
            results.loc[order, "mean_rmse"],
            marker="o",
            markersize=4,
            label=f"{', '.join(others)} = {label}" if others else None,
        )

    best = trained.best_index
    ax.scatter(
        [positions.loc[best]],
        [results.loc[best, "mean_rmse"]],
        marker="*",
        s=200,
        c="red",
        zorder=5,
        label="selected",
    )

    if not numeric_x:
        ax.set_xticks(range(len(categories)))
        ax.set_xticklabels(categories, rotation=45, ha="right")
    elif x_values.min() > 0 and x_values.max() / x_values.min() > 100:
        ax.set_xscale("log")

    ax.set_xlabel(x_param, fontsize=11)
    ax.set_ylabel("RMSE (cross-validation)", fontsize=11)
    ax.set_title(f"{trained.name}: Tuning Profile", fontsize=12)
    ax.legend(loc="best", fontsize=8)
    ax.grid(True, alpha=0.3)
    fig.tight_layout()
    return fig


def plot_importance(
    importance: FeatureImportance,
    model_name: str,
    top_n: int = 15,
) -> Figure:
    """
    Horizontal bar plot of the most important predictors.

    Args:
        importance: FeatureImportance object.
        model_name: Name of the model.
        top_n: Number of top predictors to show.

    Returns:
        Figure.
    """
    top = importance.top(top_n).iloc[::-1]
    n_show = len(top)

    fig, ax = plt.subplots(figsize=(9, max(4, n_show * 0.4)))
    ax.barh(range(n_show), top["importance"], color="steelblue", edgecolor="none")
    ax.set_yticks(range(n_show))
    ax.set_yticklabels(top["feature"], fontsize=9)
    ax.set_xlabel(f"Importance ({importance.importance_type})", fontsize=11)
    ax.set_title(f"{model_name}: Predictor Importance", fontsize=12)
    ax.grid(axis="x", alpha=0.3)
    fig.tight_layout()
    return fig


def plot_resamples(resamples: pd.DataFrame) -> Figure:
    """Box plots of per-resample RMSE and R² for each model."""
    models = list(dict.fromkeys(resamples["model"]))

    fig, axes = plt.subplots(1, 2, figsize=(12, max(4, len(models) * 0.5)))
    for ax, metric, label in zip(axes, ("rmse", "r2"), ("RMSE", "R²")):
        data = [resamples.loc[resamples["model"] == m, metric].to_numpy() for m in models]
        ax.boxplot(data, orientation="horizontal")
        ax.set_yticks(range(1, len(models) + 1))
        ax.set_yticklabels(models, fontsize=9)
        ax.set_xlabel(label, fontsize=11)
        ax.grid(axis="x", alpha=0.3)

    fig.suptitle("Resampled Performance", fontsize=12)
    fig.tight_layout()
    return fig


def save_model_plots(
    trained: "TrainedModel",
    evaluation: "ModelEvaluation",
    output_dir: Path,
    importance: FeatureImportance | None = None,
) -> list[Path]:
    """Write every per-model diagnostic plot as PNG."""
    prefix = safe_name(trained.name)
    paths = [
        save_figure(
            plot_observed_vs_predicted(evaluation),
            output_dir / f"{prefix}_observed_vs_predicted.png",
        ),
        save_figure(plot_residuals(evaluation), output_dir / f"{prefix}_residuals.png"),
    ]

    profile = plot_tuning_profile(trained)
    if profile is not None:
        paths.append(save_figure(profile, output_dir / f"{prefix}_tuning.png"))

    if importance is not None:
        paths.append(
            save_figure(
                plot_importance(importance, trained.name),
                output_dir / f"{prefix}_importance.png",
            )
        )
    return paths


def _format_params(params: dict[str, Any]) -> str:
    if not params:
        return "-"
    parts = []
    for key, value in params.items():
        if isinstance(value, float):
            parts.append(f"{key}={value:.4g}")
        else:
            parts.append(f"{key}={value}")
    return ", ".join(parts)


def print_cv_table(
    trained: "TrainedModel",
    console: Console,
    top_n: int = 10,
) -> None:
    """Print the best grid points of a model's cross-validation."""
    params = _tuning_columns(trained.cv_results)
    rows = trained.cv_results.sort_values("rank").head(top_n)

    table = Table(title=f"{trained.name}: Cross-Validation")
    for param in params:
        table.add_column(param, style="cyan")
    table.add_column("RMSE", style="green", justify="right")
    table.add_column("RMSE SD", style="dim", justify="right")
    table.add_column("R²", style="green", justify="right")
    table.add_column("MAE", style="yellow", justify="right")
    table.add_column("Rank", style="dim", justify="right")

    for index, row in rows.iterrows():
        style = "bold" if index == trained.best_index else None
        table.add_row(
            *[str(row[p]) for p in params],
            f"{row['mean_rmse']:.4f}",
            f"{row['std_rmse']:.4f}",
            f"{row['mean_r2']:.4f}",
            f"{row['mean_mae']:.4f}",
            str(row["rank"]),
            style=style,
        )

    console.print(table)


def generate_metrics_table(
    trained_models: dict[str, "TrainedModel"],
    evaluations: dict[str, "ModelEvaluation"],
    console: Console | None = None,
) -> tuple[pd.DataFrame, str]:
    """
    Generate metrics table for all models.

    Returns both a DataFrame and HTML string.
    """
    rows = []
    for name, trained in trained_models.items():
        evaluation = evaluations.get(name)
        rows.append(
            {
                "Model": name,
                "CV RMSE": trained.cv_rmse,
                "CV R²": trained.cv_r2,
                "Test RMSE": evaluation.metrics.rmse if evaluation else np.nan,
                "Test R²": evaluation.metrics.r2 if evaluation else np.nan,
                "Test MAE": evaluation.metrics.mae if evaluation else np.nan,
                "Parameters": _format_params(trained.best_params),
                "Train Time (s)": trained.training_time_s,
            }
        )

    df = pd.DataFrame(rows)
    if not df.empty:
        df = df.sort_values("Test RMSE", ignore_index=True)

    if console is not None:
        table = Table(title="Model Metrics Comparison")
        table.add_column("Model", style="cyan")
        table.add_column("CV RMSE", style="green", justify="right")
        table.add_column("CV R²", style="green", justify="right")
        table.add_column("Test RMSE", style="magenta", justify="right")
        table.add_column("Test R²", style="magenta", justify="right")
        table.add_column("Test MAE", style="yellow", justify="right")
        table.add_column("Parameters", style="dim")
        table.add_column("Train (s)", style="dim", justify="right")

        for row in df.to_dict("records"):
            table.add_row(
                row["Model"],
                f"{row['CV RMSE']:.4f}",
                f"{row['CV R²']:.4f}",
                f"{row['Test RMSE']:.4f}",
                f"{row['Test R²']:.4f}",
                f"{row['Test MAE']:.4f}",
                row["Parameters"],
                f"{row['Train Time (s)']:.1f}",
            )

        console.print(table)

    html = df.to_html(
        index=False,
        float_format=lambda x: f"{x:.4f}",
        classes="metrics-table",
    )
    return df, html


def print_resample_summary(summary: pd.DataFrame, console: Console) -> None:
    """Print mean/std/min/max of resampled RMSE and R² per model."""
    table = Table(title="Resampled Performance")
    table.add_column("Model", style="cyan")
    for column in ("RMSE mean", "RMSE sd", "RMSE min", "RMSE max", "R² mean", "R² sd"):
        table.add_column(column, style="green" if "mean" in column else "dim", justify="right")

    for row in summary.to_dict("records"):
        table.add_row(
            row["model"],
            f"{row['rmse_mean']:.4f}",
            f"{row['rmse_std']:.4f}",
            f"{row['rmse_min']:.4f}",
            f"{row['rmse_max']:.4f}",
            f"{row['r2_mean']:.4f}",
            f"{row['r2_std']:.4f}",
        )

    console.print(table)


def print_importance_table(
    importance: FeatureImportance,
    model_name: str,
    console: Console | None = None,
    top_n: int = 15,
) -> None:
    """
    Print predictor importance table to console.

    Args:
        importance: FeatureImportance object.
        model_name: Name of the model.
        console: Rich console for output.
        top_n: Number of rows to show.
    """
    if console is None:
        return

    frame = importance.to_frame()
    total = frame["importance"].clip(lower=0).sum()

    table = Table(title=f"{model_name} Predictor Importance ({importance.importance_type})")
    table.add_column("Rank", style="dim", width=4)
    table.add_column("Predictor", style="cyan")
    table.add_column("Importance", style="green", justify="right")
    table.add_column("% Total", style="yellow", justify="right")

    for rank, row in enumerate(frame.head(top_n).to_dict("records"), 1):
        pct = max(row["importance"], 0) / total * 100 if total > 0 else 0.0
        table.add_row(str(rank), row["feature"], f"{row['importance']:.4f}", f"{pct:.1f}%")

    console.print(table)


@dataclass
class ReportData:
    """Data for generating a training report."""

    project: str
    dataset: str
    target: str
    n_train: int
    n_test: int
    feature_names: list[str]
    trained_models: dict[str, "TrainedModel"]
    evaluations: dict[str, "ModelEvaluation"]
    importances: dict[str, FeatureImportance] = field(default_factory=dict)
    failures: dict[str, str] = field(default_factory=dict)
    resampling: str = ""


_STYLE = """
        body {
            font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif;
            max-width: 1200px;
            margin: 0 auto;
            padding: 20px;
            background-color: #f5f5f5;
        }
        h1 { color: #333; border-bottom: 2px solid #4a90a4; padding-bottom: 10px; }
        h2 { color: #4a90a4; margin-top: 30px; }
        .section {
            background: white;
            border-radius: 8px;
            padding: 20px;
            margin-bottom: 20px;
            box-shadow: 0 2px 4px rgba(0,0,0,0.1);
        }
        .metadata {
            display: grid;
            grid-template-columns: repeat(auto-fit, minmax(200px, 1fr));
            gap: 15px;
        }
        .metadata-item { background: #f8f9fa; padding: 10px 15px; border-radius: 4px; }
        .metadata-item strong {
            display: block;
            color: #666;
            font-size: 0.85em;
            margin-bottom: 5px;
        }
        table { width: 100%; border-collapse: collapse; margin: 15px 0; }
        th, td { padding: 10px 12px; text-align: left; border-bottom: 1px solid #ddd; }
        th { background-color: #4a90a4; color: white; font-weight: 600; }
        tr:hover { background-color: #f5f5f5; }
        .model-plots { display: flex; flex-direction: column; gap: 20px; }
        .model-plot {
            background: #f8f9fa;
            padding: 15px;
            border-radius: 8px;
            text-align: center;
        }
        .model-plot img { max-width: 100%; height: auto; }
        .model-plot h3 { margin-top: 0; color: #333; }
        .failure { color: #a33; }
        .timestamp { color: #999; font-size: 0.9em; text-align: right; }
"""


def _img(plot_b64: str, alt: str) -> str:
    return f'<img src="data:image/png;base64,{plot_b64}" alt="{escape(alt)}">'


def _embed(fig: Figure | None) -> str | None:
    if fig is None:
        return None
    encoded = _fig_to_base64(fig)
    plt.close(fig)
    return encoded


def generate_html_report(
    report_data: ReportData,
    output_path: Path,
    console: Console | None = None,
) -> Path:
    """
    Generate complete HTML training report.

    Args:
        report_data: Report data containing all results.
        output_path: Path to save the HTML report.
        console: Optional console for printing tables.

    Returns:
        Path to the generated report.
    """
    log.info("Generating training report", output=str(output_path))

    _metrics_df, metrics_html = generate_metrics_table(
        report_data.trained_models, report_data.evaluations, console
    )

    resamples, summary = compare_resamples(report_data.trained_models)
    resample_section = ""
    if not resamples.empty:
        resample_plot = _embed(plot_resamples(resamples))
        summary_html = summary.to_html(
            index=False, float_format=lambda x: f"{x:.4f}", classes="summary-table"
        )
        resample_section = f"""
    <div class="section">
        <h2>Resampled Performance</h2>
        <p>Distribution of cross-validated RMSE and R² of each selected configuration.</p>
        {summary_html}
        <div class="model-plot">{_img(resample_plot, "Resampled performance")}</div>
    </div>
"""

    model_sections = []
    for name, trained in report_data.trained_models.items():
        evaluation = report_data.evaluations.get(name)
        blocks = [f"<h3>{escape(name)}</h3>"]
        blocks.append(f"<p><strong>Selected:</strong> {escape(_format_params(trained.best_params))}</p>")
        if evaluation is not None:
            blocks.append(_img(_embed(plot_observed_vs_predicted(evaluation)), f"{name} observed vs predicted"))
            blocks.append(_img(_embed(plot_residuals(evaluation)), f"{name} residuals"))
        profile = _embed(plot_tuning_profile(trained))
        if profile is not None:
            blocks.append(_img(profile, f"{name} tuning profile"))
        importance = report_data.importances.get(name)
        if importance is not None:
            blocks.append(_img(_embed(plot_importance(importance, name)), f"{name} importance"))
        model_sections.append(
            '            <div class="model-plot">\n                '
            + "\n                ".join(blocks)
            + "\n            </div>"
        )

    failures_html = ""
    if report_data.failures:
        items = "".join(
            f"<li><strong>{escape(name)}</strong>: {escape(reason)}</li>"
            for name, reason in report_data.failures.items()
        )
        failures_html = f"""
    <div class="section failure">
        <h2>Failed Models</h2>
        <ul>{items}</ul>
    </div>
"""

    features = ", ".join(report_data.feature_names[:50])
    if len(report_data.feature_names) > 50:
        features += f", ... ({len(report_data.feature_names) - 50} more)"

    html_content = f"""<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>Training Report - {escape(report_data.project)}</title>
    <style>{_STYLE}    </style>
</head>
<body>
    <h1>Model Training Report: {escape(report_data.project)}</h1>
    <p class="timestamp">Generated: {datetime.now().strftime("%Y-%m-%d %H:%M:%S")}</p>

    <div class="section">
        <h2>Dataset Overview</h2>
        <div class="metadata">
            <div class="metadata-item"><strong>Dataset</strong>{escape(report_data.dataset)}</div>
            <div class="metadata-item"><strong>Response</strong>{escape(report_data.target)}</div>
            <div class="metadata-item"><strong>Training Samples</strong>{report_data.n_train}</div>
            <div class="metadata-item"><strong>Test Samples</strong>{report_data.n_test}</div>
            <div class="metadata-item"><strong>Predictors</strong>{len(report_data.feature_names)}</div>
            <div class="metadata-item"><strong>Resampling</strong>{escape(report_data.resampling)}</div>
        </div>
        <p><strong>Predictors used:</strong> {escape(features)}</p>
    </div>

    <div class="section">
        <h2>Model Metrics Comparison</h2>
        <p>CV columns are resampled estimates for the selected configuration;
        test columns score the held-out partition.</p>
        {metrics_html}
    </div>
{resample_section}{failures_html}
    <div class="section">
        <h2>Model Diagnostics</h2>
        <div class="model-plots">
{chr(10).join(model_sections)}
        </div>
    </div>
</body>
</html>
"""

    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(html_content, encoding="utf-8")

    log.info("Report generated", path=str(output_path))
    return output_path
