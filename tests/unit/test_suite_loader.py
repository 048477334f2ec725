"""Tests for suite loader."""

from pathlib import Path

import pytest

from boostsec.waf_guard.errors import ConfigurationError
from boostsec.waf_guard.suite_loader import (
    load_suite_directory,
    load_suite_file,
    load_suites,
    parse_suite,
)

VALID_SUITE = """
apiVersion: waf-test/v1
kind: WafTest
metadata:
  name: {name}
  description: SQL injection probes
spec:
  target:
    baseUrl: https://example.com
    timeout: 45s
  tests:
    - name: sqli-union
      request:
        method: GET
        path: /search?q=1 UNION SELECT
        headers:
          User-Agent: wafguard
      expected:
        status: [403]
        headers:
          Server: cloudflare
        body:
          contains: ["blocked"]
          not_contains: ["SQL syntax"]
"""


async def test_load_suite_file_valid(tmp_path: Path) -> None:
    """load_suite_file loads and parses a valid suite."""
    suite_file = tmp_path / "sqli.yaml"
    suite_file.write_text(VALID_SUITE.format(name="sqli"))

    suite = await load_suite_file(suite_file)

    assert suite.api_version == "waf-test/v1"
    assert suite.kind == "WafTest"
    assert suite.name == "sqli"
    assert suite.metadata.description == "SQL injection probes"
    assert suite.spec.target.base_url == "https://example.com"
    assert suite.spec.target.timeout == 45.0
    test = suite.spec.tests[0]
    assert test.name == "sqli-union"
    assert test.request.method == "GET"
    assert test.request.headers == {"User-Agent": "wafguard"}
    assert test.request.body == ""
    assert test.expected.status == [403]
    assert test.expected.headers == {"Server": "cloudflare"}
    assert test.expected.body is not None
    assert test.expected.body.contains == ["blocked"]
    assert test.expected.body.not_contains == ["SQL syntax"]


async def test_load_suite_file_not_found(tmp_path: Path) -> None:
    """load_suite_file raises ConfigurationError for missing file."""
    with pytest.raises(ConfigurationError, match="Failed to read suite file"):
        await load_suite_file(tmp_path / "missing.yaml")


def test_parse_suite_invalid_yaml() -> None:
    """parse_suite raises ConfigurationError for invalid YAML."""
    with pytest.raises(ConfigurationError, match="Invalid YAML in inline"):
        parse_suite("invalid: yaml: content: [", "inline")


def test_parse_suite_empty() -> None:
    """parse_suite raises ConfigurationError for an empty document."""
    with pytest.raises(ConfigurationError, match="Empty suite file"):
        parse_suite("")


@pytest.mark.parametrize(
    "document",
    [
        # missing required fields
        """
apiVersion: waf-test/v1
kind: WafTest
metadata:
  name: ""
spec:
  target:
    baseUrl: not-a-url
  tests: []
""",
        # unknown kind
        """
apiVersion: waf-test/v1
kind: InvalidKind
metadata:
  name: test
spec:
  target:
    baseUrl: https://example.com
  tests:
    - name: test1
      request: {method: GET, path: /test}
      expected: {status: [200]}
""",
        # empty test list
        """
apiVersion: waf-test/v1
kind: WafTest
metadata:
  name: test
spec:
  target:
    baseUrl: https://example.com
  tests: []
""",
        # unsupported method
        """
apiVersion: waf-test/v1
kind: WafTest
metadata:
  name: test
spec:
  target:
    baseUrl: https://example.com
  tests:
    - name: test1
      request: {method: TRACE, path: /test}
      expected: {status: [200]}
""",
        # no expected status
        """
apiVersion: waf-test/v1
kind: WafTest
metadata:
  name: test
spec:
  target:
    baseUrl: https://example.com
  tests:
    - name: test1
      request: {method: GET, path: /test}
      expected: {status: []}
""",
    ],
    ids=["missing-fields", "invalid-kind", "no-tests", "bad-method", "no-status"],
)
def test_parse_suite_invalid_schema(document: str) -> None:
    """parse_suite rejects documents violating the schema."""
    with pytest.raises(ConfigurationError, match="Invalid suite schema"):
        parse_suite(document)


def test_parse_suite_accepts_sentinel_kind() -> None:
    """SentinelTest documents are accepted as well."""
    suite = parse_suite(
        VALID_SUITE.format(name="legacy").replace("kind: WafTest", "kind: SentinelTest")
    )

    assert suite.kind == "SentinelTest"


async def test_load_suite_directory_sorted_and_recursive(tmp_path: Path) -> None:
    """load_suite_directory loads every YAML file in sorted path order."""
    (tmp_path / "nested").mkdir()
    (tmp_path / "b.yml").write_text(VALID_SUITE.format(name="b"))
    (tmp_path / "a.yaml").write_text(VALID_SUITE.format(name="a"))
    (tmp_path / "nested" / "c.yaml").write_text(VALID_SUITE.format(name="c"))
    (tmp_path / "notes.txt").write_text("not a suite")

    suites = await load_suite_directory(tmp_path)

    assert [suite.name for suite in suites] == ["a", "b", "c"]


async def test_load_suite_directory_fails_on_invalid_file(tmp_path: Path) -> None:
    """One invalid file aborts the directory load and is named."""
    (tmp_path / "good.yaml").write_text(VALID_SUITE.format(name="good"))
    (tmp_path / "broken.yaml").write_text("invalid: yaml: [")

    with pytest.raises(ConfigurationError, match="broken.yaml"):
        await load_suite_directory(tmp_path)


async def test_load_suite_directory_empty(tmp_path: Path) -> None:
    """An empty directory yields no suites."""
    assert await load_suite_directory(tmp_path) == []


async def test_load_suite_directory_missing(tmp_path: Path) -> None:
    """A missing directory is a configuration error."""
    with pytest.raises(ConfigurationError, match="Suite directory not found"):
        await load_suite_directory(tmp_path / "missing")


async def test_load_suites_dispatches_on_path_type(tmp_path: Path) -> None:
    """load_suites accepts both files and directories."""
    suite_file = tmp_path / "one.yaml"
    suite_file.write_text(VALID_SUITE.format(name="one"))

    from_file = await load_suites(suite_file)
    from_directory = await load_suites(tmp_path)

    assert [suite.name for suite in from_file] == ["one"]
    assert [suite.name for suite in from_directory] == ["one"]
