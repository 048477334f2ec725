"""Models for responses, validation verdicts and test outcomes."""

from datetime import datetime, timezone
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, computed_field

from boostsec.waf_guard.models.suite_definition import RequestSpec, Target

TestStatus = Literal["PASS", "FAIL"]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ResponseSnapshot(BaseModel):
    """Normalized view of a received HTTP response."""

    model_config = ConfigDict(frozen=True)

    status_code: int = Field(..., description="HTTP status code")
    headers: dict[str, str] = Field(
        default_factory=dict,
        description="Canonical header names, repeated values joined with ', '",
    )
    body: str = Field(default="", description="Decoded response body")
    duration: float = Field(..., description="Request round trip in seconds")


class ValidationResult(BaseModel):
    """Verdict of the response validator."""

    model_config = ConfigDict(frozen=True)

    errors: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def passed(self) -> bool:
        """True when no rule produced an error."""
        return not self.errors


class TestOutcome(BaseModel):
    """Result of a single test execution."""

    __test__ = False

    model_config = ConfigDict(frozen=True)

    test_name: str = Field(..., description="Test name")
    duration: float = Field(..., description="Execution time in seconds")
    request: RequestSpec
    response: ResponseSnapshot | None = Field(
        default=None, description="Absent when the request itself failed"
    )
    validation: ValidationResult | None = Field(
        default=None, description="Absent when the request itself failed"
    )
    error: str | None = Field(
        default=None, description="Transport or address failure message"
    )
    timestamp: datetime = Field(default_factory=_utcnow)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def status(self) -> TestStatus:
        """PASS only for a received response that passed validation."""
        if self.error is None and self.validation is not None:
            if self.validation.passed:
                return "PASS"
        return "FAIL"

    @property
    def errors(self) -> list[str]:
        """Failure messages, the transport error alone if there was one."""
        if self.error is not None:
            return [self.error]
        if self.validation is None:
            return []
        return list(self.validation.errors)

    @property
    def warnings(self) -> list[str]:
        """Non-fatal validation remarks."""
        if self.validation is None:
            return []
        return list(self.validation.warnings)


class SuiteOutcome(BaseModel):
    """Aggregated result of a suite run."""

    model_config = ConfigDict(frozen=True)

    suite_name: str = Field(..., description="Suite name")
    duration: float = Field(..., description="Wall-clock run time in seconds")
    tests: list[TestOutcome] = Field(default_factory=list)
    target: Target | None = Field(
        default=None, description="Target of the suite, informational only"
    )
    cancelled: bool = Field(
        default=False, description="Run stopped scheduling after cancellation"
    )
    timestamp: datetime = Field(default_factory=_utcnow)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def total_tests(self) -> int:
        """Number of recorded outcomes."""
        return len(self.tests)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def passed_tests(self) -> int:
        """Number of outcomes with status PASS."""
        return sum(1 for test in self.tests if test.status == "PASS")

    @computed_field  # type: ignore[prop-decorator]
    @property
    def failed_tests(self) -> int:
        """Number of outcomes that did not pass."""
        return self.total_tests - self.passed_tests

    @property
    def success_rate(self) -> float:
        """Passed share in percent, 0 for an empty suite."""
        if not self.tests:
            return 0.0
        return self.passed_tests / self.total_tests * 100
