"""
Typed configuration models using Pydantic.

All configuration is defined here with explicit typing and validation.
Processing code never hardcodes dataset names, seeds, or fold counts.
"""

from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Catalogue names accepted by DatasetConfig.name (see predictlab.datasets)
KNOWN_DATASETS = (
    "solubility",
    "glass",
    "soybean",
    "tecator",
    "chemical_manufacturing",
    "permeability",
    "friedman1",
)


class ResamplingMethod(str, Enum):
    """Resampling scheme for hyperparameter tuning."""

    CV = "cv"  # Single k-fold cross-validation
    REPEATED_CV = "repeated_cv"  # k-fold repeated with different shuffles


class SelectionRule(str, Enum):
    """Rule for choosing the final grid point from CV results."""

    BEST = "best"  # Lowest mean RMSE
    ONE_SE = "one_se"  # Simplest candidate within one standard error of best


class ImputationMethod(str, Enum):
    """Missing value handling before model fitting."""

    NONE = "none"
    MEDIAN = "median"
    KNN = "knn"


class PowerTransform(str, Enum):
    """Skewness-reducing transformation applied to numeric predictors."""

    NONE = "none"
    YEO_JOHNSON = "yeo-johnson"
    BOX_COX = "box-cox"


class DatasetConfig(BaseModel):
    """Which benchmark dataset to load and where its files live."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(description="Catalogue name of the dataset")
    root: Path = Field(
        default=Path("./data"), description="Directory containing the dataset files"
    )
    target: str | None = Field(
        default=None, description="Response column (defaults to the dataset's own)"
    )
    files: dict[str, str] = Field(
        default_factory=dict,
        description="Overrides for the default file names (role -> file name)",
    )
    options: dict[str, Any] = Field(
        default_factory=dict,
        description="Loader-specific options (e.g. n_train for friedman1)",
    )

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        """Ensure the dataset is part of the catalogue."""
        if v not in KNOWN_DATASETS:
            msg = f"Unknown dataset {v!r}. Available: {', '.join(KNOWN_DATASETS)}"
            raise ValueError(msg)
        return v

    def resolve(self, file_name: str) -> Path:
        """Resolve a file name relative to the dataset root."""
        return self.root / file_name


class SplitConfig(BaseModel):
    """Train/test partitioning configuration."""

    model_config = ConfigDict(frozen=True)

    test_size: float = Field(default=0.2, ge=0.05, le=0.5)
    random_state: int = Field(default=1337)
    stratify_bins: int = Field(
        default=5, ge=1, le=20, description="Quantile groups for numeric responses"
    )
    resplit: bool = Field(
        default=False,
        description="Ignore a dataset's predefined split and partition again",
    )


class ResamplingConfig(BaseModel):
    """Cross-validation configuration used during tuning."""

    model_config = ConfigDict(frozen=True)

    method: ResamplingMethod = Field(default=ResamplingMethod.CV)
    folds: int = Field(default=10, ge=2, le=20)
    repeats: int = Field(default=5, ge=1, le=20)
    random_state: int = Field(default=1337)
    selection: SelectionRule = Field(default=SelectionRule.BEST)
    n_jobs: int = Field(default=1, description="Parallel jobs passed to GridSearchCV")

    @property
    def n_resamples(self) -> int:
        """Number of held-out folds evaluated per grid point."""
        if self.method == ResamplingMethod.REPEATED_CV:
            return self.folds * self.repeats
        return self.folds


class PreprocessingConfig(BaseModel):
    """Dataset-level preprocessing applied in front of every model."""

    model_config = ConfigDict(frozen=True)

    impute: ImputationMethod = Field(default=ImputationMethod.NONE)
    knn_neighbors: int = Field(default=5, ge=1)
    near_zero_variance: bool = Field(default=False)
    freq_cut: float = Field(default=95 / 5, gt=1.0)
    unique_cut: float = Field(default=10.0, gt=0.0, le=100.0)
    correlation_cutoff: float | None = Field(default=None, gt=0.0, le=1.0)
    transform: PowerTransform = Field(default=PowerTransform.NONE)


class ModelConfig(BaseModel):
    """Model selection and hyperparameter overrides."""

    model_config = ConfigDict(frozen=True)

    enabled: list[str] = Field(
        default_factory=lambda: ["Linear Regression"],
        description="Registry names of the models to tune",
    )
    hyperparameters: dict[str, dict[str, list[Any]]] = Field(
        default_factory=dict, description="Grid overrides per model"
    )


class MLflowConfig(BaseModel):
    """MLflow experiment tracking configuration."""

    model_config = ConfigDict(frozen=True)

    enabled: bool = Field(default=False)
    tracking_uri: str = Field(default="http://127.0.0.1:5000")
    # experiment_name is optional; derived from project if not set
    experiment_name: str | None = Field(default=None)


class OutputConfig(BaseModel):
    """Output root; per-project folders are derived from it."""

    model_config = ConfigDict(frozen=True)

    output_root: Path = Field(default=Path("./output"))


class ExperimentConfig(BaseModel):
    """Complete configuration for one modeling exercise.

    The project name drives:
    - MLflow experiment name (if not explicitly set)
    - Output directory structure: ./output/{project}/
    """

    model_config = ConfigDict(frozen=True)

    project: str = Field(description="Project identifier (e.g., 'solubility-linear')")

    dataset: DatasetConfig
    split: SplitConfig = Field(default_factory=SplitConfig)
    resampling: ResamplingConfig = Field(default_factory=ResamplingConfig)
    preprocessing: PreprocessingConfig = Field(default_factory=PreprocessingConfig)
    models: ModelConfig = Field(default_factory=ModelConfig)
    mlflow: MLflowConfig = Field(default_factory=MLflowConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)

    @property
    def experiment_name(self) -> str:
        """MLflow experiment name (derived from project if not set)."""
        return self.mlflow.experiment_name or self.project

    @property
    def project_dir(self) -> Path:
        """Root of this project's outputs."""
        return self.output.output_root / self.project

    @property
    def models_dir(self) -> Path:
        """Path to saved model directory."""
        return self.project_dir / "models"

    @property
    def predictions_dir(self) -> Path:
        """Path to prediction tables directory."""
        return self.project_dir / "predictions"

    @property
    def plots_dir(self) -> Path:
        """Path to plots output directory."""
        return self.project_dir / "plots"

    @property
    def reports_dir(self) -> Path:
        """Path to HTML report directory."""
        return self.project_dir / "reports"
