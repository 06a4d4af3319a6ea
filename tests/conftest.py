"""Shared test configuration and fixtures."""

import os
from collections.abc import Iterator
from unittest.mock import patch

import pytest

import clob_signing.core.config as config_module


@pytest.fixture(autouse=True)
def _isolate_polymarket_env() -> Iterator[None]:  # pyright: ignore[reportUnusedFunction]
    """Hide any ``POLYMARKET_*`` variables from the developer's shell.

    The default ``settings.yaml`` reads chain id, signature type, funder and
    API credentials from the environment, so a configured shell would change
    the outcome of config and CLI tests.  The config singleton is reset so
    each test loads settings from its own environment.
    """
    cleaned = {k: v for k, v in os.environ.items() if not k.startswith("POLYMARKET_")}
    with patch.dict(os.environ, cleaned, clear=True):
        config_module._config = None  # pyright: ignore[reportPrivateUsage]
        yield
        config_module._config = None  # pyright: ignore[reportPrivateUsage]
