"""Data models for suites, run configuration and outcomes."""

from boostsec.waf_guard.models.outcome import (
    ResponseSnapshot,
    SuiteOutcome,
    TestOutcome,
    ValidationResult,
)
from boostsec.waf_guard.models.run_config import RunConfig
from boostsec.waf_guard.models.suite_definition import (
    BodyExpectation,
    ExpectationSpec,
    Metadata,
    RequestSpec,
    SuiteDefinition,
    SuiteSpec,
    Target,
    TestCase,
)

__all__ = [
    "BodyExpectation",
    "ExpectationSpec",
    "Metadata",
    "RequestSpec",
    "ResponseSnapshot",
    "RunConfig",
    "SuiteDefinition",
    "SuiteOutcome",
    "SuiteSpec",
    "Target",
    "TestCase",
    "TestOutcome",
    "ValidationResult",
]
