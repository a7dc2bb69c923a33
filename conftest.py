"""Adds the slow/extreme test switches to pytest."""
import pytest


def pytest_addoption(parser):
    parser.addoption("--skip-slow", action="store_true", default=False, help="skip slower tests")
    parser.addoption("--run-extreme", action="store_true", default=False, help="run extremely slow tests")


def pytest_collection_modifyitems(config, items):
    skips = {}
    if config.getoption("--skip-slow"):
        skips["slow"] = pytest.mark.skip(reason="Slow test: run without --skip-slow")
    if not config.getoption("--run-extreme"):
        skips["extreme"] = pytest.mark.skip(reason="Extreme test: needs --run-extreme")
    for item in items:
        for marker, skip in skips.items():
            if marker in item.keywords:
                item.add_marker(skip)
