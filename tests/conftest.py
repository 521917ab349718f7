"""Pytest configuration for the localeforge test suite.

Hypothesis profiles (max_examples):
    dev      300, local runs (default)
    ci       50, derandomized; chosen automatically when CI=true
    verbose  100, prints every example

HYPOTHESIS_PROFILE=<name> selects a profile explicitly.
"""

import json
import os
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest
from hypothesis import HealthCheck, Verbosity, settings

from localeforge.config import LocalesOptions

_PROFILES: dict[str, dict[str, Any]] = {
    "dev": {"max_examples": 300},
    "ci": {"max_examples": 50, "derandomize": True, "print_blob": True},
    "verbose": {"max_examples": 100, "verbosity": Verbosity.verbose},
}

for _name, _overrides in _PROFILES.items():
    # Engines and parsers are built inside examples; keep slow data off the deadline.
    settings.register_profile(
        _name,
        deadline=None,
        suppress_health_check=[HealthCheck.too_slow],
        **_overrides,
    )


def _profile_name() -> str:
    requested = os.environ.get("HYPOTHESIS_PROFILE", "")
    if requested in _PROFILES:
        return requested
    return "ci" if os.environ.get("CI") == "true" else "dev"


settings.load_profile(_profile_name())


@pytest.fixture
def options() -> LocalesOptions:
    """Default options."""
    return LocalesOptions()


@pytest.fixture
def write_file(tmp_path: Path) -> Callable[[str, str], Path]:
    """Write a UTF-8 text file below tmp_path, creating parent directories."""

    def write(relative: str, text: str) -> Path:
        path = tmp_path / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
        return path

    return write


@pytest.fixture
def read_json() -> Callable[[Path], Any]:
    """Parse a JSON file."""

    def read(path: Path) -> Any:
        return json.loads(path.read_text(encoding="utf-8"))

    return read
