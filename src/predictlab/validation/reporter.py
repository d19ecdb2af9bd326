"""
Console reporter for validation results.

Formats per-table validation results using Rich.
"""

from rich.console import Console
from rich.table import Table

from predictlab.validation.core import ValidationResult

_STATUS = {
    "missing": "[yellow]Missing[/yellow]",
    "skipped": "[yellow]Skipped[/yellow]",
    "pass": "[green]Pass[/green]",
    "fail": "[red]Fail[/red]",
}


def result_status(result: ValidationResult) -> str:
    """One of ``missing``, ``skipped``, ``pass`` or ``fail``."""
    if not result.exists:
        return "missing"
    if result.schema_valid is None:
        return "skipped"
    return "pass" if result.schema_valid else "fail"


def all_passed(results: list[ValidationResult]) -> bool:
    """Whether every table was read and passed its schema."""
    return bool(results) and all(result_status(r) == "pass" for r in results)


class ConsoleReporter:
    """Formats and displays validation results to the console."""

    def __init__(self, console: Console) -> None:
        """
        Initialize console reporter.

        Args:
            console: Rich Console instance for output.
        """
        self.console = console

    def print_results(self, results: list[ValidationResult]) -> None:
        """
        Print validation results as a table, a summary and error details.

        Args:
            results: List of validation results to display.
        """
        table = Table(title="Schema Validation Results", show_header=True)
        table.add_column("Table", style="cyan", no_wrap=True)
        table.add_column("Schema", style="blue")
        table.add_column("Status", justify="center")
        table.add_column("Rows", justify="right")
        table.add_column("Details", style="dim")

        for result in results:
            status = result_status(result)
            if status == "fail":
                details = "See errors below"
            elif status == "pass":
                details = "OK"
            else:
                details = result.error_message or "-"
            table.add_row(
                result.label,
                result.schema_name or "-",
                _STATUS[status],
                str(result.row_count) if result.row_count is not None else "-",
                details,
            )

        self.console.print(table)
        self._print_summary(results)
        self._print_errors(results)

    def _print_summary(self, results: list[ValidationResult]) -> None:
        counts = {key: 0 for key in _STATUS}
        for result in results:
            counts[result_status(result)] += 1

        self.console.print()
        self.console.print(
            f"[bold]Summary:[/bold] {len(results)} tables, "
            f"[green]{counts['pass']} passed[/green], "
            f"[red]{counts['fail']} failed[/red], "
            f"[yellow]{counts['missing'] + counts['skipped']} not checked[/yellow]"
        )

    def _print_errors(self, results: list[ValidationResult]) -> None:
        failed = [r for r in results if result_status(r) == "fail"]
        if not failed:
            return

        self.console.print()
        self.console.print("[bold red]Validation Errors:[/bold red]")
        for result in failed:
            self.console.print()
            self.console.print(f"[bold]{result.label}[/bold] (schema: {result.schema_name}):")
            if result.file_path is not None:
                self.console.print(f"  File: {result.file_path}")
            for line in (result.error_message or "").split("\n"):
                self.console.print(f"  {line}")
