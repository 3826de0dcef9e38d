"""Configures pytest further."""
import random

import pytest


def pytest_addoption(parser):
    parser.addoption("--skip-slow", action="store_true", default=False, help="skip slower tests")
    parser.addoption("--rng-seed", action="store", type=int, default=20250101, help="seed for the rng fixture")


def pytest_collection_modifyitems(config, items):
    if not config.getoption("--skip-slow"):
        return
    skip = pytest.mark.skip(reason="Slow test: needs no --skip-slow option")
    for item in items:
        if "slow" in item.keywords:
            item.add_marker(skip)


@pytest.fixture
def rng(request) -> random.Random:
    """A freshly seeded generator per test, so every test is reproducible on its own."""
    return random.Random(request.config.getoption("--rng-seed"))
