"""Dataset schema validation."""

from predictlab.validation.core import (
    SCHEMA_ERRORS,
    ValidationResult,
    ValidationRunner,
    format_schema_error,
)
from predictlab.validation.reporter import ConsoleReporter, all_passed, result_status

__all__ = [
    "SCHEMA_ERRORS",
    "ConsoleReporter",
    "ValidationResult",
    "ValidationRunner",
    "all_passed",
    "format_schema_error",
    "result_status",
]
