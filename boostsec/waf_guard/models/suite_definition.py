"""Models for WAF test suites loaded from YAML documents."""

import re
from typing import Literal
from urllib.parse import urlsplit

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

DEFAULT_TIMEOUT = 30.0

HttpMethod = Literal["GET", "POST", "PUT", "DELETE", "PATCH", "HEAD", "OPTIONS"]

_BARE_NUMBER = re.compile(r"\d+(?:\.\d*)?|\.\d+")
_DURATION_PART = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|ms|s|m|h)")
_UNIT_SECONDS = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}


def parse_duration(value: str) -> float:
    """Parse a duration string such as ``30s``, ``500ms`` or ``1m30s``.

    A bare number is read as seconds.

    Returns:
        Duration in seconds

    Raises:
        ValueError: If the string is not a valid duration

    """
    text = value.strip()
    if not text:
        raise ValueError("empty duration")

    if _BARE_NUMBER.fullmatch(text):
        return float(text)

    total = 0.0
    position = 0
    for match in _DURATION_PART.finditer(text):
        if match.start() != position:
            break
        total += float(match.group(1)) * _UNIT_SECONDS[match.group(2)]
        position = match.end()

    if position != len(text):
        raise ValueError(f"invalid duration: {value!r}")
    return total


class Metadata(BaseModel):
    """Descriptive metadata of a suite document."""

    name: str = Field(..., min_length=1, description="Suite name")
    description: str | None = Field(default=None, description="Free-form notes")


class Target(BaseModel):
    """Endpoint shared by every test of a suite."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    base_url: str = Field(..., alias="baseUrl", description="Absolute base URL")
    timeout: float = Field(
        default=DEFAULT_TIMEOUT, description="Per-request deadline in seconds"
    )

    @field_validator("base_url")
    @classmethod
    def _check_base_url(cls, value: str) -> str:
        parts = urlsplit(value)
        if parts.scheme not in {"http", "https"} or not parts.netloc:
            raise ValueError(f"baseUrl must be an absolute http(s) URL: {value!r}")
        return value

    @field_validator("timeout", mode="before")
    @classmethod
    def _parse_timeout(cls, value: object) -> float:
        if value is None:
            return DEFAULT_TIMEOUT
        if isinstance(value, bool):
            raise ValueError("timeout must be a duration")
        if isinstance(value, str):
            seconds = parse_duration(value)
        elif isinstance(value, (int, float)):
            seconds = float(value)
        else:
            raise ValueError("timeout must be a duration")

        if seconds < 0:
            raise ValueError("timeout must not be negative")
        return seconds or DEFAULT_TIMEOUT


class RequestSpec(BaseModel):
    """HTTP request issued by a test."""

    model_config = ConfigDict(frozen=True, coerce_numbers_to_str=True)

    method: HttpMethod = Field(..., description="HTTP method")
    path: str = Field(..., min_length=1, description="Path resolved against baseUrl")
    headers: dict[str, str] = Field(
        default_factory=dict, description="Request headers"
    )
    body: str = Field(default="", description="Request body, omitted when empty")


class BodyExpectation(BaseModel):
    """Rules applied to the response body.

    Only one mode is evaluated: ``exact`` wins over ``regex``, which wins over
    the ``contains``/``not_contains`` lists.
    """

    model_config = ConfigDict(frozen=True, coerce_numbers_to_str=True)

    contains: list[str] = Field(default_factory=list)
    not_contains: list[str] = Field(default_factory=list)
    exact: str | None = Field(default=None)
    regex: str | None = Field(default=None)


class ExpectationSpec(BaseModel):
    """Criteria a response must satisfy for the test to pass."""

    model_config = ConfigDict(frozen=True, coerce_numbers_to_str=True)

    status: list[int] = Field(
        default_factory=list, description="Acceptable status codes"
    )
    headers: dict[str, str] = Field(
        default_factory=dict, description="Header substring expectations"
    )
    body: BodyExpectation | None = Field(default=None)


class TestCase(BaseModel):
    """Single named request/expectation pair."""

    __test__ = False

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1, description="Test name")
    request: RequestSpec
    expected: ExpectationSpec

    @model_validator(mode="after")
    def _require_status(self) -> "TestCase":
        if not self.expected.status:
            raise ValueError(
                f"test {self.name!r} must list at least one expected status"
            )
        return self


class SuiteSpec(BaseModel):
    """Target plus the ordered tests run against it."""

    target: Target
    tests: list[TestCase] = Field(..., min_length=1)


class SuiteDefinition(BaseModel):
    """Complete suite document."""

    model_config = ConfigDict(populate_by_name=True)

    api_version: str = Field(..., alias="apiVersion", min_length=1)
    kind: Literal["WafTest", "SentinelTest"] = Field(...)
    metadata: Metadata
    spec: SuiteSpec

    @property
    def name(self) -> str:
        """Suite name from the metadata block."""
        return self.metadata.name
