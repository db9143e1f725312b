"""Shared fixtures for the stack advisor tests."""

import pytest

from stack_advisor.config import reset_config
from tech_catalog.schema import TechnologyCatalog


@pytest.fixture(autouse=True)
def default_config(monkeypatch):
    """Run every test against the default configuration."""
    monkeypatch.delenv("STACK_ADVISOR_CONFIG", raising=False)
    reset_config()
    yield
    reset_config()


def make_tech(tech_id: str, category: str, **scores) -> dict:
    """Build a minimal technology dict with the given axis tables."""
    return {
        "id": tech_id,
        "name": tech_id.title(),
        "category": category,
        "scores": scores,
    }


def make_catalog(*technologies: dict) -> TechnologyCatalog:
    return TechnologyCatalog.model_validate({"technologies": list(technologies)})
