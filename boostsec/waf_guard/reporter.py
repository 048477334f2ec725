"""Render and persist test and suite reports."""

import logging

import typer

from boostsec.waf_guard.models.outcome import SuiteOutcome, TestOutcome
from boostsec.waf_guard.models.run_config import RunConfig

logger = logging.getLogger(__name__)

SEPARATOR = "=" * 36


def format_test_report(outcome: TestOutcome) -> str:
    """Render one test outcome as text."""
    lines = [
        f"Test: {outcome.test_name}",
        f"Status: {outcome.status}",
        f"Duration: {outcome.duration:.3f}s",
        f"Request: {outcome.request.method} {outcome.request.path}",
    ]
    if outcome.response is not None:
        lines.append(f"Response Status: {outcome.response.status_code}")
    else:
        lines.append("Response Status: no response")

    if outcome.errors:
        lines.append("Validation Errors:")
        lines.extend(f"  - {error}" for error in outcome.errors)

    if outcome.warnings:
        lines.append("Validation Warnings:")
        lines.extend(f"  - {warning}" for warning in outcome.warnings)

    lines.append("---")
    return "\n".join(lines)


def format_suite_report(outcome: SuiteOutcome) -> str:
    """Render a suite outcome, including every test, as text."""
    lines = [
        f"Suite: {outcome.suite_name}",
        f"Total Tests: {outcome.total_tests}",
        f"Passed: {outcome.passed_tests}",
        f"Failed: {outcome.failed_tests}",
        f"Duration: {outcome.duration:.3f}s",
        f"Success Rate: {outcome.success_rate:.2f}%",
    ]
    if outcome.cancelled:
        lines.append("Run was cancelled before all tests were scheduled")
    lines.append(SEPARATOR)
    lines.extend(format_test_report(test) for test in outcome.tests)
    return "\n".join(lines)


class Reporter:
    """Prints reports in the configured format and saves suite reports."""

    def __init__(self, config: RunConfig) -> None:
        """Initialize reporter with run configuration."""
        self.config = config

    def print_test_report(self, outcome: TestOutcome) -> None:
        """Print a single test outcome as soon as it completes."""
        if self.config.output_format == "json":
            typer.echo(outcome.model_dump_json(indent=2))
        else:
            typer.echo(format_test_report(outcome))

    def print_suite_report(self, outcome: SuiteOutcome) -> None:
        """Print the final suite report."""
        if self.config.output_format == "json":
            typer.echo(outcome.model_dump_json(indent=2))
        else:
            typer.echo(format_suite_report(outcome))

    def save_suite_report(self, outcome: SuiteOutcome) -> None:
        """Write the suite report as JSON to the configured output file.

        Raises:
            OSError: If the file can't be written

        """
        output_file = self.config.output_file
        if output_file is None:
            return

        output_file.write_text(outcome.model_dump_json(indent=2), encoding="utf-8")
        logger.info(
            "Report saved to file",
            extra={"file": str(output_file), "format": "json"},
        )
