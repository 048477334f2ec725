"""Programmatic entry point for validating and running suite files."""

import asyncio
from pathlib import Path

from boostsec.waf_guard.executor import HttpExecutor
from boostsec.waf_guard.models.outcome import SuiteOutcome
from boostsec.waf_guard.models.run_config import RunConfig
from boostsec.waf_guard.models.suite_definition import SuiteDefinition
from boostsec.waf_guard.runner import OutcomeCallback, SuiteRunner
from boostsec.waf_guard.suite_loader import (
    load_suite_directory,
    load_suite_file,
    load_suites,
)

EMPTY_DIRECTORY_SUITE_NAME = "Empty Directory"


class WafGuardClient:
    """Loads suites from disk and runs them with one shared executor."""

    def __init__(
        self,
        config: RunConfig | None = None,
        on_outcome: OutcomeCallback | None = None,
    ) -> None:
        """Initialize client with run configuration and a streaming hook."""
        self.config = config or RunConfig()
        self.on_outcome = on_outcome

    async def validate_file(self, path: Path) -> SuiteDefinition:
        """Load and schema-check a single suite file."""
        return await load_suite_file(path)

    async def validate_directory(self, path: Path) -> list[SuiteDefinition]:
        """Load and schema-check every suite file in a directory."""
        return await load_suite_directory(path)

    async def validate_path(self, path: Path) -> list[SuiteDefinition]:
        """Load and schema-check a suite file, or every suite of a directory."""
        return await load_suites(path)

    async def run_file(
        self, path: Path, cancel_event: asyncio.Event | None = None
    ) -> SuiteOutcome:
        """Run the suite defined in a single file."""
        suite = await load_suite_file(path)
        async with HttpExecutor() as executor:
            runner = self._runner(executor)
            return await runner.run(suite, cancel_event=cancel_event)

    async def run_directory(
        self, path: Path, cancel_event: asyncio.Event | None = None
    ) -> SuiteOutcome:
        """Run every suite of a directory as one combined outcome."""
        suites = await load_suite_directory(path)
        if not suites:
            return SuiteOutcome(suite_name=EMPTY_DIRECTORY_SUITE_NAME, duration=0.0)

        async with HttpExecutor() as executor:
            runner = self._runner(executor)
            return await runner.run_combined(suites, cancel_event=cancel_event)

    async def run_path(
        self, path: Path, cancel_event: asyncio.Event | None = None
    ) -> SuiteOutcome:
        """Run a suite file, or every suite of a directory."""
        if path.is_dir():
            return await self.run_directory(path, cancel_event)
        return await self.run_file(path, cancel_event)

    def _runner(self, executor: HttpExecutor) -> SuiteRunner:
        return SuiteRunner(executor, self.config, on_outcome=self.on_outcome)
