"""Shared fixtures for unit and integration tests."""

import json
from pathlib import Path

import pytest

from folio.contexts.rendering import PageGeometry
from folio.contexts.templating import ResumeData, resolve_template

FIXTURES_PATH = Path(__file__).parent / "fixtures"


@pytest.fixture
def fixtures_path() -> Path:
    return FIXTURES_PATH


@pytest.fixture
def resume() -> ResumeData:
    """Canonical sample resume (Jane Doe)."""
    return ResumeData.from_yaml(FIXTURES_PATH / "jane_doe.yaml")


@pytest.fixture
def legacy_raw() -> dict:
    """Stored record with flat skills and a flat custom section."""
    return json.loads((FIXTURES_PATH / "legacy_record.json").read_text(encoding="utf-8"))


@pytest.fixture
def letter() -> PageGeometry:
    return PageGeometry.letter()


@pytest.fixture
def modern():
    return resolve_template("modern")
