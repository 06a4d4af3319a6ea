"""Shared helpers for the signing CLI commands.

Centralise private key lookup, verbose logging setup, settings loading,
and JSON output so each command module stays small.
"""

import json
import logging
import os
from typing import Any

import typer

from clob_signing.core.config import ConfigError, SigningSettings, get_config

PRIVATE_KEY_ENV_VAR = "POLYMARKET_PRIVATE_KEY"


def configure_verbose_logging() -> None:
    """Enable DEBUG-level logging for order build details."""
    logging.basicConfig(
        level=logging.DEBUG,
        format="%(asctime)s %(name)s %(message)s",
        datefmt="%H:%M:%S",
    )


def require_private_key() -> str:
    """Read the signing key from the environment.

    Abort with an error if the private key is not set.

    Returns:
        Hex-encoded private key.

    """
    private_key = os.environ.get(PRIVATE_KEY_ENV_VAR, "")
    if not private_key:
        typer.echo(f"Error: {PRIVATE_KEY_ENV_VAR} environment variable is required.", err=True)
        raise typer.Exit(code=1)
    return private_key


def load_settings() -> SigningSettings:
    """Load signing settings, aborting on configuration errors.

    Returns:
        Parsed signing settings.

    """
    try:
        return get_config().get_signing_settings()
    except ConfigError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


def fail(message: str) -> typer.Exit:
    """Print ``message`` to stderr and return an exit to raise."""
    typer.echo(f"Error: {message}", err=True)
    return typer.Exit(code=1)


def echo_json(payload: Any) -> None:
    """Print ``payload`` as indented JSON."""
    typer.echo(json.dumps(payload, indent=2))
