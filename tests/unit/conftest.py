"""Fixtures and markers for unit tests."""

import pytest


def pytest_collection_modifyitems(items):
    """Mark every test collected from tests/unit as a unit test."""
    for item in items:
        if "unit" in item.path.parts:
            item.add_marker(pytest.mark.unit)
