"""
Shared test configuration, fixtures, and markers for libcoverage tests.
"""

import pytest

from libcoverage import create_registry


def pytest_configure(config):
    """Configure test markers."""
    config.addinivalue_line("markers", "unit: marks unit tests (fast, pure logic)")
    config.addinivalue_line("markers", "property: marks property-based tests")
    config.addinivalue_line("markers", "contract: marks tests against recorded service responses")


@pytest.fixture
def registry():
    """Isolated registry holding the core and EO-WCS parsers."""
    return create_registry()


@pytest.fixture
def core_registry():
    """Isolated registry holding the core parsers only."""
    return create_registry(eowcs_profile=False)

