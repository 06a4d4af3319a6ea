"""CLI commands for wallet address and authentication headers.

Provide ``address``, ``l1-headers`` and ``l2-headers`` subcommands that
print what a transport layer would attach to CLOB requests.
"""

from typing import Annotated

import typer

from clob_signing.cli._helpers import echo_json, fail, load_settings, require_private_key
from clob_signing.signing.exceptions import ClobSigningError
from clob_signing.signing.headers import (
    create_l1_headers,
    create_l2_headers,
    inject_builder_headers,
)
from clob_signing.signing.keys import derive_address


def address() -> None:
    """Print the address controlled by ``POLYMARKET_PRIVATE_KEY``."""
    private_key = require_private_key()
    try:
        typer.echo(derive_address(private_key))
    except ClobSigningError as exc:
        raise fail(str(exc)) from None


def l1_headers(
    nonce: Annotated[str, typer.Option(help="Nonce signed in the ClobAuth challenge")] = "0",
    timestamp: Annotated[int | None, typer.Option(help="Unix seconds, defaults to now")] = None,
) -> None:
    """Print wallet-signature (Level 1) headers.

    Args:
        nonce: Nonce signed in the ClobAuth challenge.
        timestamp: Unix seconds, defaults to now.

    """
    private_key = require_private_key()
    settings = load_settings()
    try:
        headers = create_l1_headers(private_key, settings.chain_id, nonce, timestamp)
    except ClobSigningError as exc:
        raise fail(str(exc)) from None
    echo_json(headers)


def l2_headers(
    method: Annotated[str, typer.Option(help="HTTP method")],
    path: Annotated[str, typer.Option(help="Request path, e.g. /order")],
    body: Annotated[str, typer.Option(help="Raw request body")] = "",
    timestamp: Annotated[int | None, typer.Option(help="Unix seconds, defaults to now")] = None,
    builder: Annotated[  # noqa: FBT002
        bool, typer.Option("--builder", help="Add builder attribution headers")
    ] = False,
) -> None:
    """Print API-key (Level 2) headers for one request.

    Args:
        method: HTTP method.
        path: Request path.
        body: Raw request body.
        timestamp: Unix seconds, defaults to now.
        builder: Add builder attribution headers.

    """
    private_key = require_private_key()
    settings = load_settings()
    if settings.api_creds is None:
        raise fail(
            "POLYMARKET_API_KEY, POLYMARKET_API_SECRET and POLYMARKET_API_PASSPHRASE are required."
        )
    if builder and settings.builder_creds is None:
        raise fail("Builder credentials are not configured.")

    try:
        headers = create_l2_headers(
            private_key, settings.api_creds, method.upper(), path, body, timestamp
        )
        if builder and settings.builder_creds is not None:
            headers = inject_builder_headers(
                headers,
                settings.builder_creds,
                method.upper(),
                path,
                body,
                int(headers["POLY_TIMESTAMP"]),
            )
    except ClobSigningError as exc:
        raise fail(str(exc)) from None
    echo_json(headers)
