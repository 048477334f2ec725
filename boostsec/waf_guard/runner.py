"""Suite runner coordinating request execution and validation."""

import asyncio
import logging
import time
from collections.abc import Callable, Sequence

from boostsec.waf_guard.errors import ExecutionError
from boostsec.waf_guard.executor import HttpExecutor
from boostsec.waf_guard.models.outcome import SuiteOutcome, TestOutcome
from boostsec.waf_guard.models.run_config import RunConfig
from boostsec.waf_guard.models.suite_definition import (
    SuiteDefinition,
    Target,
    TestCase,
)
from boostsec.waf_guard.validator import ResponseValidator

COMBINED_SUITE_NAME = "All Tests"

OutcomeCallback = Callable[[TestOutcome], None]


def _is_cancelled(cancel_event: asyncio.Event | None) -> bool:
    return cancel_event is not None and cancel_event.is_set()


class SuiteRunner:
    """Runs the tests of a suite, sequentially or with bounded concurrency.

    Every test becomes a TestOutcome. Request failures are recorded on the
    outcome and never stop the suite; only a set cancel event stops new
    tests from being scheduled. Tests already in flight are drained.
    """

    def __init__(
        self,
        executor: HttpExecutor,
        config: RunConfig | None = None,
        validator: ResponseValidator | None = None,
        on_outcome: OutcomeCallback | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        """Initialize runner around a shared executor."""
        self.executor = executor
        self.config = config or RunConfig()
        self.logger = logger or logging.getLogger(__name__)
        self.validator = validator or ResponseValidator(self.logger)
        self.on_outcome = on_outcome

    async def run(
        self,
        suite: SuiteDefinition,
        concurrency_limit: int | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> SuiteOutcome:
        """Run a single suite against its own target."""
        limit = self._resolve_limit(concurrency_limit)
        start = time.perf_counter()

        outcomes = await self._execute_suite(suite, limit, cancel_event)

        return SuiteOutcome(
            suite_name=suite.name,
            duration=time.perf_counter() - start,
            tests=outcomes,
            target=suite.spec.target,
            cancelled=_is_cancelled(cancel_event),
        )

    async def run_combined(
        self,
        suites: Sequence[SuiteDefinition],
        concurrency_limit: int | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> SuiteOutcome:
        """Run several suites one after another and merge their outcomes.

        Each suite runs against its own target with its own concurrency
        bound. The merged outcome reports the first suite's target for
        information only.
        """
        limit = self._resolve_limit(concurrency_limit)
        start = time.perf_counter()

        outcomes: list[TestOutcome] = []
        for suite in suites:
            if _is_cancelled(cancel_event):
                break
            outcomes.extend(await self._execute_suite(suite, limit, cancel_event))

        return SuiteOutcome(
            suite_name=COMBINED_SUITE_NAME,
            duration=time.perf_counter() - start,
            tests=outcomes,
            target=suites[0].spec.target if suites else None,
            cancelled=_is_cancelled(cancel_event),
        )

    def _resolve_limit(self, concurrency_limit: int | None) -> int:
        if concurrency_limit is None:
            return self.config.concurrency
        return concurrency_limit

    async def _execute_suite(
        self,
        suite: SuiteDefinition,
        limit: int,
        cancel_event: asyncio.Event | None,
    ) -> list[TestOutcome]:
        self.logger.info(
            "Executing test suite",
            extra={
                "test_suite": suite.name,
                "test_count": len(suite.spec.tests),
                "concurrency": limit,
            },
        )

        if limit <= 1:
            return await self._run_sequentially(suite, cancel_event)
        return await self._run_concurrently(suite, limit, cancel_event)

    async def _run_sequentially(
        self, suite: SuiteDefinition, cancel_event: asyncio.Event | None
    ) -> list[TestOutcome]:
        outcomes: list[TestOutcome] = []
        for test in suite.spec.tests:
            if _is_cancelled(cancel_event):
                self.logger.warning(
                    "Run cancelled, skipping remaining tests",
                    extra={"test_suite": suite.name},
                )
                break
            outcomes.append(
                await self._run_single_test(test, suite.spec.target, cancel_event)
            )
        return outcomes

    async def _run_concurrently(
        self,
        suite: SuiteDefinition,
        limit: int,
        cancel_event: asyncio.Event | None,
    ) -> list[TestOutcome]:
        semaphore = asyncio.Semaphore(limit)
        lock = asyncio.Lock()
        outcomes: list[TestOutcome] = []

        async def run_admitted(test: TestCase) -> None:
            async with semaphore:
                if _is_cancelled(cancel_event):
                    return
                outcome = await self._run_single_test(
                    test, suite.spec.target, cancel_event
                )
            async with lock:
                outcomes.append(outcome)

        results = await asyncio.gather(
            *(run_admitted(test) for test in suite.spec.tests),
            return_exceptions=True,
        )
        for result in results:
            if isinstance(result, BaseException):
                self.logger.error(
                    f"Test execution error: {type(result).__name__}: {result}",
                    exc_info=result,
                )
                raise result

        return outcomes

    async def _run_single_test(
        self,
        test: TestCase,
        target: Target,
        cancel_event: asyncio.Event | None,
    ) -> TestOutcome:
        start = time.perf_counter()

        try:
            response = await self.executor.execute(
                test.request,
                target.base_url,
                target.timeout,
                test_name=test.name,
                cancel_event=cancel_event,
            )
        except ExecutionError as e:
            self.logger.error(
                "Failed to execute test",
                extra={"test_name": test.name, "error": str(e)},
            )
            outcome = TestOutcome(
                test_name=test.name,
                duration=time.perf_counter() - start,
                request=test.request,
                error=str(e),
            )
        else:
            validation = self.validator.validate(response, test.expected, test.name)
            outcome = TestOutcome(
                test_name=test.name,
                duration=time.perf_counter() - start,
                request=test.request,
                response=response,
                validation=validation,
            )

        self.logger.info(f"Test result: {outcome.test_name} = {outcome.status}")
        if self.on_outcome is not None:
            self.on_outcome(outcome)
        return outcome
