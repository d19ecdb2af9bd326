"""
MLflow experiment management.

Provides structured experiment tracking with required metadata. Tracking
is optional and only used when ``mlflow.enabled`` is set.
"""

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, Any

import mlflow
import mlflow.sklearn

from predictlab import __version__
from predictlab.config.settings import ExperimentConfig
from predictlab.evaluation.metrics import RegressionMetrics
from predictlab.utils.logging import get_logger

if TYPE_CHECKING:
    from predictlab.modeling.tuning import ModelEvaluation, TrainedModel

log = get_logger(__name__)


@dataclass
class ExperimentInfo:
    """
    Metadata attached to an MLflow experiment.

    Attributes:
        name: Experiment name.
        question: Single question this experiment answers.
        experiment_type: Category of experiment.
        dataset: Dataset being modeled.
        tags: Additional run tags.
    """

    name: str
    question: str
    experiment_type: str  # model_comparison, tuning, exploration, etc.
    dataset: str
    tags: dict[str, str] = field(default_factory=dict)


class Experiment:
    """
    MLflow experiment for a tune-fit-evaluate run.

    A parent run carries dataset and resampling parameters; each model is
    logged in a nested run with its selected hyperparameters, resampled and
    test metrics, and the fitted pipeline.
    """

    def __init__(
        self,
        config: ExperimentConfig,
        info: ExperimentInfo | None = None,
    ) -> None:
        """
        Initialize experiment.

        Args:
            config: Experiment configuration.
            info: Experiment metadata (default: model comparison on the
                configured dataset).
        """
        self.config = config
        self.info = info or ExperimentInfo(
            name=config.mlflow.experiment_name or config.experiment_name,
            question="Which model achieves the lowest RMSE on held-out data?",
            experiment_type="model_comparison",
            dataset=config.dataset.name,
        )
        self._run_id: str | None = None

    def setup(self) -> None:
        """Setup MLflow experiment."""
        mlflow.set_tracking_uri(self.config.mlflow.tracking_uri)
        mlflow.set_experiment(self.info.name)

        log.info(
            "Experiment setup",
            name=self.info.name,
            tracking_uri=self.config.mlflow.tracking_uri,
        )

    def start_run(self, run_name: str | None = None) -> str:
        """
        Start an MLflow run.

        Args:
            run_name: Optional run name.

        Returns:
            Run ID.
        """
        self.setup()

        tags = {
            "experiment_type": self.info.experiment_type,
            "dataset": self.info.dataset,
            "question": self.info.question,
            "predictlab_version": __version__,
            **self.info.tags,
        }

        run = mlflow.start_run(run_name=run_name, tags=tags)
        self._run_id = run.info.run_id

        log.info("Started MLflow run", run_id=self._run_id)
        return self._run_id

    def end_run(self) -> None:
        """End the current MLflow run."""
        mlflow.end_run()
        log.info("Ended MLflow run", run_id=self._run_id)

    def log_params(self, params: dict[str, Any]) -> None:
        """Log parameters."""
        mlflow.log_params(params)

    def log_metrics(
        self,
        metrics: RegressionMetrics | dict[str, float],
        prefix: str = "",
    ) -> None:
        """Log metrics, optionally prefixed (e.g. ``test_``)."""
        if isinstance(metrics, RegressionMetrics):
            metrics = metrics.to_dict()
        mlflow.log_metrics({f"{prefix}{k}": float(v) for k, v in metrics.items()})

    def log_artifact(self, path: Path, artifact_path: str | None = None) -> None:
        """Log an artifact."""
        mlflow.log_artifact(str(path), artifact_path)

    def log_model(
        self,
        model: Any,
        artifact_path: str = "model",
        registered_name: str | None = None,
    ) -> None:
        """Log a model."""
        mlflow.sklearn.log_model(
            model,
            artifact_path=artifact_path,
            registered_model_name=registered_name,
        )

    def log_training(
        self,
        trained_models: dict[str, "TrainedModel"],
        evaluations: dict[str, "ModelEvaluation"],
        *,
        n_train: int,
        n_test: int,
        artifacts: list[Path] | None = None,
    ) -> str:
        """
        Log a complete training session.

        Args:
            trained_models: Tuned and refit models.
            evaluations: Test-set evaluations by model name.
            n_train: Training rows.
            n_test: Test rows.
            artifacts: Files (reports, prediction tables) for the parent run.

        Returns:
            Parent run ID.
        """
        resampling = self.config.resampling
        run_id = self.start_run(f"{self.config.project}-{datetime.now():%Y%m%d-%H%M}")

        try:
            self.log_params(
                {
                    "dataset": self.config.dataset.name,
                    "n_train_samples": n_train,
                    "n_test_samples": n_test,
                    "resampling": resampling.method.value,
                    "folds": resampling.folds,
                    "repeats": resampling.repeats,
                    "selection": resampling.selection.value,
                    "n_models": len(trained_models),
                }
            )

            for name, trained in trained_models.items():
                with mlflow.start_run(run_name=name, nested=True):
                    mlflow.set_tag("model_name", name)
                    if trained.best_params:
                        self.log_params(
                            {f"best_{k}": v for k, v in trained.best_params.items()}
                        )
                    self.log_metrics(
                        {
                            "cv_rmse": trained.cv_rmse,
                            "cv_r2": trained.cv_r2,
                            "training_time_s": trained.training_time_s,
                        }
                    )
                    evaluation = evaluations.get(name)
                    if evaluation is not None:
                        self.log_metrics(evaluation.metrics, prefix="test_")
                    self.log_model(trained.pipeline)

            for path in artifacts or []:
                self.log_artifact(path)
        finally:
            self.end_run()

        return run_id
