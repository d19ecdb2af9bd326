"""
Core validation logic for dataset files.

Validates each table of a catalogue dataset against its registered
Pandera schema and records one result per table.
"""

from dataclasses import dataclass
from pathlib import Path

import pandas as pd
import pandera.errors

from predictlab.config.settings import ExperimentConfig
from predictlab.datasets.base import DataLoader
from predictlab.datasets.catalog import get_dataset_spec
from predictlab.utils.logging import get_logger

log = get_logger(__name__)

# Strict-schema violations surface as SchemaErrors in newer pandera releases
SCHEMA_ERRORS = (pandera.errors.SchemaError, pandera.errors.SchemaErrors)


@dataclass
class ValidationResult:
    """Result of validating a single table."""

    dataset_name: str
    table: str
    schema_name: str | None
    file_path: Path | None  # None for generated data
    exists: bool
    schema_valid: bool | None
    row_count: int | None
    error_message: str | None

    @property
    def label(self) -> str:
        """``dataset/table`` identifier."""
        return f"{self.dataset_name}/{self.table}"


class ValidationRunner:
    """
    Runs validation for the configured dataset.

    Validates data files against their registered schemas and reports results.
    """

    def __init__(self, config: ExperimentConfig) -> None:
        """
        Initialize validation runner.

        Args:
            config: Experiment configuration naming the dataset.
        """
        self.config = config
        self.loader: DataLoader = get_dataset_spec(config.dataset.name).loader(config)

    def run(self) -> list[ValidationResult]:
        """
        Validate every table of the dataset.

        Returns:
            List of validation results, one per table.
        """
        name = self.config.dataset.name
        roles = list(self.loader.schemas)

        paths = {role: self._path(role) for role in roles}
        missing = [role for role, path in paths.items() if path is not None and not path.exists()]
        if missing:
            for role in missing:
                log.warning("Data file not found", dataset=name, path=str(paths[role]))
            return [
                ValidationResult(
                    dataset_name=name,
                    table=role,
                    schema_name=self.loader.schemas[role],
                    file_path=paths[role],
                    exists=role not in missing,
                    schema_valid=None,
                    row_count=None,
                    error_message="File not found" if role in missing else "Not checked",
                )
                for role in roles
            ]

        try:
            tables = self.loader.read_tables()
        except ValueError as e:
            error_msg = f"{type(e).__name__}: {e!s}"
            log.error("Dataset could not be read", dataset=name, error=error_msg)
            return [
                ValidationResult(
                    dataset_name=name,
                    table=role,
                    schema_name=self.loader.schemas[role],
                    file_path=paths[role],
                    exists=True,
                    schema_valid=False,
                    row_count=None,
                    error_message=error_msg,
                )
                for role in roles
            ]

        return [self._validate_table(role, tables[role], paths[role]) for role in roles]

    def _path(self, role: str) -> Path | None:
        if role not in self.loader.default_files and role not in self.config.dataset.files:
            return None
        return self.loader.file_path(role)

    def _validate_table(
        self,
        role: str,
        df: pd.DataFrame,
        file_path: Path | None,
    ) -> ValidationResult:
        """
        Validate a single table.

        Args:
            role: Table role within the dataset.
            df: Loaded table.
            file_path: Source file, if any.

        Returns:
            ValidationResult for the table.
        """
        name = self.config.dataset.name
        schema_name = self.loader.schemas[role]

        try:
            self.loader.validate_tables({role: df})
        except SCHEMA_ERRORS as e:
            error_msg = format_schema_error(e)
            log.error(
                "Schema validation failed",
                dataset=name,
                table=role,
                schema=schema_name,
                error=error_msg,
            )
            return ValidationResult(
                dataset_name=name,
                table=role,
                schema_name=schema_name,
                file_path=file_path,
                exists=True,
                schema_valid=False,
                row_count=len(df),
                error_message=error_msg,
            )

        log.info(
            "Validation passed",
            dataset=name,
            table=role,
            schema=schema_name,
            rows=len(df),
        )
        return ValidationResult(
            dataset_name=name,
            table=role,
            schema_name=schema_name,
            file_path=file_path,
            exists=True,
            schema_valid=True,
            row_count=len(df),
            error_message=None,
        )


def format_schema_error(
    error: pandera.errors.SchemaError | pandera.errors.SchemaErrors,
) -> str:
    """
    Format schema error for user-friendly display.

    Args:
        error: Pandera SchemaError, or SchemaErrors from a strict or lazy check.

    Returns:
        Formatted error message (first 5 violations).
    """
    failures = getattr(error, "failure_cases", None)
    if isinstance(failures, pd.DataFrame):
        n_failures = len(failures)
        if n_failures > 5:
            failures_str = failures.head(5).to_string(index=False)
            return f"{n_failures} validation errors (showing first 5):\n{failures_str}"
        return f"{n_failures} validation error(s):\n{failures.to_string(index=False)}"

    # First line, max 200 chars
    return str(error).split("\n")[0][:200]
