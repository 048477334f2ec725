"""Validate HTTP responses against test expectations."""

import logging
import re
from collections.abc import Sequence

from boostsec.waf_guard.errors import FaultError
from boostsec.waf_guard.executor import canonical_header_key
from boostsec.waf_guard.models.outcome import ResponseSnapshot, ValidationResult
from boostsec.waf_guard.models.suite_definition import (
    BodyExpectation,
    ExpectationSpec,
)


def _format_codes(codes: Sequence[int]) -> str:
    return "[" + " ".join(str(code) for code in codes) + "]"


class ResponseValidator:
    """Applies status, header and body rules to a response.

    The three rule groups always run in that order and never short-circuit
    each other, so one response can collect errors from all of them.
    """

    def __init__(self, logger: logging.Logger | None = None) -> None:
        """Initialize validator with an optional logger."""
        self.logger = logger or logging.getLogger(__name__)

    def validate(
        self,
        response: ResponseSnapshot,
        expected: ExpectationSpec,
        test_name: str = "",
    ) -> ValidationResult:
        """Validate a response and return the verdict."""
        errors: list[str] = []
        warnings: list[str] = []

        self.logger.debug(
            "Starting response validation",
            extra={"test_name": test_name, "status_code": response.status_code},
        )

        self._validate_status_code(response, expected, errors, warnings)
        self._validate_headers(response, expected, errors)
        if expected.body is not None:
            self._validate_body(response, expected.body, errors)

        result = ValidationResult(errors=errors, warnings=warnings)

        self.logger.info(
            "Response validation completed",
            extra={
                "test_name": test_name,
                "passed": result.passed,
                "error_count": len(result.errors),
                "warning_count": len(result.warnings),
            },
        )
        return result

    def validate_multiple(
        self,
        responses: Sequence[ResponseSnapshot],
        expectations: Sequence[ExpectationSpec],
        test_names: Sequence[str],
    ) -> list[ValidationResult]:
        """Validate aligned lists of responses and expectations.

        Raises:
            FaultError: If the three sequences differ in length

        """
        if not len(responses) == len(expectations) == len(test_names):
            raise FaultError(
                "mismatched lengths in validate_multiple: "
                f"{len(responses)} responses, {len(expectations)} expectations, "
                f"{len(test_names)} test names"
            )

        return [
            self.validate(response, expected, test_name)
            for response, expected, test_name in zip(
                responses, expectations, test_names, strict=True
            )
        ]

    def _validate_status_code(
        self,
        response: ResponseSnapshot,
        expected: ExpectationSpec,
        errors: list[str],
        warnings: list[str],
    ) -> None:
        if not expected.status:
            warnings.append("No expected status codes defined")
            return

        if response.status_code in expected.status:
            return

        errors.append(
            "Status code mismatch: expected one of "
            f"{_format_codes(expected.status)}, got {response.status_code}"
        )

    def _validate_headers(
        self,
        response: ResponseSnapshot,
        expected: ExpectationSpec,
        errors: list[str],
    ) -> None:
        for key, expected_value in expected.headers.items():
            actual_value = response.headers.get(canonical_header_key(key))
            if actual_value is None:
                errors.append(f"Missing expected header: {key}")
                continue

            if expected_value not in actual_value:
                errors.append(
                    f"Header value mismatch for {key}: expected to contain "
                    f"'{expected_value}', got '{actual_value}'"
                )

    def _validate_body(
        self,
        response: ResponseSnapshot,
        expected: BodyExpectation,
        errors: list[str],
    ) -> None:
        # exact > regex > contains/not_contains
        if expected.exact:
            if response.body != expected.exact:
                errors.append(
                    f"Body exact match failed: expected '{expected.exact}', "
                    f"got '{response.body}'"
                )
            return

        if expected.regex:
            try:
                pattern = re.compile(expected.regex)
            except re.error as e:
                errors.append(f"Invalid regex pattern '{expected.regex}': {e}")
                return
            if pattern.search(response.body) is None:
                errors.append(
                    f"Body regex match failed: pattern '{expected.regex}' "
                    "did not match response body"
                )
            return

        for needle in expected.contains:
            if needle not in response.body:
                errors.append(f"Body should contain '{needle}' but it was not found")

        for needle in expected.not_contains:
            if needle in response.body:
                errors.append(f"Body should not contain '{needle}' but it was found")
