"""Checks on the declared dependencies used by setup.py."""

from pathlib import Path

import pytest

pytestmark = pytest.mark.unit

REQUIREMENTS = Path(__file__).resolve().parents[2] / "requirements.txt"


def _requirement_lines() -> list[str]:
    lines = [line.strip() for line in REQUIREMENTS.read_text().splitlines()]
    return [line for line in lines if line and not line.startswith("#")]


def test_runtime_stack_declared() -> None:
    names = {line.split(">=")[0].split("==")[0] for line in _requirement_lines()}
    assert {"pydantic", "python-dateutil", "icalendar", "pytest"} <= names


def test_only_pytest_pins_start_with_pytest() -> None:
    """setup.py routes lines starting with ``pytest`` into the dev extra."""
    dev = [line for line in _requirement_lines() if line.startswith("pytest")]
    assert dev == ["pytest>=7.4.0"]
