"""CLI entry point for wafguard."""

import asyncio
import contextlib
import logging
import signal
from pathlib import Path

import typer
from pydantic import ValidationError

from boostsec.waf_guard.client import WafGuardClient
from boostsec.waf_guard.errors import ConfigurationError
from boostsec.waf_guard.logging_config import configure_logging
from boostsec.waf_guard.models.outcome import SuiteOutcome
from boostsec.waf_guard.models.run_config import RunConfig
from boostsec.waf_guard.reporter import Reporter

logger = logging.getLogger(__name__)

app = typer.Typer(
    help="WafGuard - run declarative HTTP tests against a WAF protected service."
)


async def _run_until_interrupted(client: WafGuardClient, path: Path) -> SuiteOutcome:
    """Run tests, turning SIGINT into a cancel signal that drains in-flight tests."""
    cancel_event = asyncio.Event()
    loop = asyncio.get_running_loop()
    with contextlib.suppress(NotImplementedError, RuntimeError):
        loop.add_signal_handler(signal.SIGINT, cancel_event.set)
    try:
        return await client.run_path(path, cancel_event)
    finally:
        with contextlib.suppress(NotImplementedError, RuntimeError):
            loop.remove_signal_handler(signal.SIGINT)


def _build_config(**kwargs: object) -> RunConfig:
    try:
        return RunConfig.model_validate(kwargs)
    except ValidationError as e:
        typer.echo(f"Error: invalid options: {e}", err=True)
        raise typer.Exit(code=1)


@app.command("run")
def run_command(
    path: Path = typer.Argument(..., help="Suite file or directory of suites"),  # noqa: B008
    concurrent: int = typer.Option(
        1, "--concurrent", "-c", help="Number of concurrent test executions"
    ),
    output_format: str = typer.Option(
        "text", "--format", "-F", help="Output format (json, text)"
    ),
    output: Path | None = typer.Option(  # noqa: B008
        None, "--output", "-o", help="Output file for test results"
    ),
    log_level: str = typer.Option(
        "info", "--log-level", "-l", help="Log level (debug, info, warn, error)"
    ),
    log_format: str = typer.Option(
        "text", "--log-format", "-f", help="Log format (json, text)"
    ),
) -> None:
    """Run WAF tests from a YAML file or a directory of YAML files."""
    config = _build_config(
        concurrency=concurrent,
        output_format=output_format,
        output_file=output,
        log_level=log_level,
        log_format=log_format,
    )
    configure_logging(config)
    logger.info(
        "Starting WAF tests",
        extra={
            "path": str(path),
            "concurrent": config.concurrency,
            "format": config.output_format,
        },
    )

    reporter = Reporter(config)
    client = WafGuardClient(config, on_outcome=reporter.print_test_report)

    try:
        outcome = asyncio.run(_run_until_interrupted(client, path))
    except ConfigurationError as e:
        logger.error(f"Failed to load tests: {e}")
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)

    if not outcome.tests and not outcome.cancelled:
        logger.warning("No tests found")
        typer.echo("No tests to run")
        return

    reporter.print_suite_report(outcome)

    try:
        reporter.save_suite_report(outcome)
    except OSError as e:
        logger.error(f"Failed to save report: {e}")

    if outcome.failed_tests > 0 or outcome.cancelled:
        logger.error(f"Tests failed: {outcome.failed_tests}/{outcome.total_tests}")
        raise typer.Exit(code=1)


@app.command("validate")
def validate_command(
    path: Path = typer.Argument(..., help="Suite file or directory of suites"),  # noqa: B008
    log_level: str = typer.Option(
        "info", "--log-level", "-l", help="Log level (debug, info, warn, error)"
    ),
    log_format: str = typer.Option(
        "text", "--log-format", "-f", help="Log format (json, text)"
    ),
) -> None:
    """Validate YAML test files without executing them."""
    config = _build_config(log_level=log_level, log_format=log_format)
    configure_logging(config)
    logger.info("Validating WAF test files", extra={"path": str(path)})

    client = WafGuardClient(config)
    try:
        suites = asyncio.run(client.validate_path(path))
    except ConfigurationError as e:
        logger.error(f"Validation failed: {e}")
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)

    logger.info("All test files are valid", extra={"test_count": len(suites)})
    typer.echo(f"{len(suites)} suite file(s) valid")


if __name__ == "__main__":  # pragma: no cover
    app()
