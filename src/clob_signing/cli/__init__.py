"""CLI subpackage for CLOB order signing.

Create the Typer application and register all command modules.
"""

import typer

from clob_signing.cli.auth_cmd import address, l1_headers, l2_headers
from clob_signing.cli.order_cmd import sign_order

app = typer.Typer(help="Polymarket CLOB order signing tools")

app.command()(address)
app.command(name="sign-order")(sign_order)
app.command(name="l1-headers")(l1_headers)
app.command(name="l2-headers")(l2_headers)

__all__ = ["app"]
