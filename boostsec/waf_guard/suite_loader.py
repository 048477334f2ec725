"""Load and parse WAF test suites from YAML files."""

import logging
from pathlib import Path

import yaml
from pydantic import ValidationError

from boostsec.waf_guard.errors import ConfigurationError
from boostsec.waf_guard.models.suite_definition import SuiteDefinition

logger = logging.getLogger(__name__)

SUITE_SUFFIXES = frozenset({".yaml", ".yml"})


def parse_suite(text: str, source: str = "<string>") -> SuiteDefinition:
    """Parse a suite document from YAML text.

    Args:
        text: YAML document
        source: Name used in error messages

    Returns:
        Validated suite definition

    Raises:
        ConfigurationError: If the YAML is invalid or doesn't match the schema

    """
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {source}: {e}") from e

    if data is None:
        raise ConfigurationError(f"Empty suite file: {source}")

    try:
        return SuiteDefinition.model_validate(data)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid suite schema in {source}: {e}") from e


async def load_suite_file(path: Path) -> SuiteDefinition:
    """Load a suite from a single YAML file.

    Raises:
        ConfigurationError: If the file is missing, unreadable or invalid

    """
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigurationError(f"Failed to read suite file {path}: {e}") from e

    return parse_suite(text, str(path))


async def load_suite_directory(directory: Path) -> list[SuiteDefinition]:
    """Load every YAML suite below a directory, in sorted path order.

    Raises:
        ConfigurationError: If the directory can't be read or any file is invalid

    """
    if not directory.is_dir():
        raise ConfigurationError(f"Suite directory not found: {directory}")

    suite_files = sorted(
        path
        for path in directory.rglob("*")
        if path.is_file() and path.suffix in SUITE_SUFFIXES
    )
    logger.debug(
        "Found suite files",
        extra={"directory": str(directory), "file_count": len(suite_files)},
    )

    return [await load_suite_file(path) for path in suite_files]


async def load_suites(path: Path) -> list[SuiteDefinition]:
    """Load a suite file, or every suite in a directory."""
    if path.is_dir():
        return await load_suite_directory(path)
    return [await load_suite_file(path)]
