"""CLI command for building and signing an order.

Print the signed order as the JSON body expected by the CLOB ``/order``
endpoint.  Nothing is submitted: posting the order is left to the caller.
"""

from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Annotated, Any

import typer

from clob_signing.cli._helpers import (
    configure_verbose_logging,
    echo_json,
    fail,
    load_settings,
    require_private_key,
)
from clob_signing.signing.exceptions import ClobSigningError
from clob_signing.signing.models import (
    OrderType,
    Side,
    TickSize,
    UserMarketOrder,
    UserOrder,
    order_to_post_payload,
)
from clob_signing.signing.order_builder import OrderBuilder


def _parse_decimal(name: str, value: str) -> Decimal:
    """Parse a decimal option, aborting on invalid input."""
    try:
        return Decimal(value)
    except InvalidOperation:
        raise fail(f"Invalid {name} '{value}'.") from None


def _parse_choice(enum_cls: type[Enum], name: str, value: str) -> Any:
    """Parse an enum option by value, aborting on invalid input."""
    try:
        return enum_cls(value)
    except ValueError:
        raise fail(f"Invalid {name} '{value}'.") from None


def sign_order(
    token_id: Annotated[str, typer.Option(help="Outcome token ID (decimal string)")],
    side: Annotated[str, typer.Option(help="Order side: buy or sell")],
    size: Annotated[
        str, typer.Option(help="Shares, or collateral (buy) and shares (sell) with --market")
    ],
    price: Annotated[str | None, typer.Option(help="Limit price in (0, 1]")] = None,
    tick_size: Annotated[str, typer.Option(help="Market tick size")] = TickSize.HUNDREDTH.value,
    order_type: Annotated[
        str | None,
        typer.Option("--type", help="Order type: GTC, GTD, FOK or FAK (GTC, or FOK with --market)"),
    ] = None,
    market: Annotated[  # noqa: FBT002
        bool, typer.Option("--market", help="Build a market order from --size as amount")
    ] = False,
    expiration: Annotated[int | None, typer.Option(help="Expiry as Unix seconds")] = None,
    nonce: Annotated[int | None, typer.Option(help="Exchange nonce")] = None,
    fee_rate_bps: Annotated[int | None, typer.Option(help="Fee rate in basis points")] = None,
    taker: Annotated[str | None, typer.Option(help="Restrict fills to this address")] = None,
    verbose: Annotated[  # noqa: FBT002
        bool, typer.Option("--verbose", "-v", help="Log order build details")
    ] = False,
) -> None:
    """Build, sign and print an order.

    Read the private key from ``POLYMARKET_PRIVATE_KEY`` and the chain,
    signature type, funder and API key from the configuration.

    Args:
        token_id: Outcome token ID.
        side: Order side (buy or sell).
        size: Share size, or amount for market orders.
        price: Limit price; required unless ``--market`` is given.
        tick_size: Market tick size.
        order_type: Time-in-force written to the payload, GTC for limit
            orders and FOK for market orders by default.
        market: Treat ``size`` as a market order amount.
        expiration: Expiry as Unix seconds.
        nonce: Exchange nonce.
        fee_rate_bps: Fee rate in basis points.
        taker: Restrict fills to this address.
        verbose: Enable debug logging.

    """
    if verbose:
        configure_verbose_logging()

    side_enum: Side = _parse_choice(Side, "side", side.upper())
    tick: TickSize = _parse_choice(TickSize, "tick size", tick_size)
    time_in_force: OrderType | None = (
        _parse_choice(OrderType, "order type", order_type.upper()) if order_type else None
    )
    size_dec = _parse_decimal("size", size)
    price_dec = _parse_decimal("price", price) if price is not None else None

    request: UserOrder | UserMarketOrder
    if market:
        request = UserMarketOrder(
            token_id=token_id,
            amount=size_dec,
            side=side_enum,
            price=price_dec,
            fee_rate_bps=fee_rate_bps,
            nonce=nonce,
            taker=taker,
            order_type=time_in_force or OrderType.FOK,
        )
    elif price_dec is not None:
        request = UserOrder(
            token_id=token_id,
            price=price_dec,
            size=size_dec,
            side=side_enum,
            fee_rate_bps=fee_rate_bps,
            nonce=nonce,
            expiration=expiration,
            taker=taker,
        )
    else:
        raise fail("--price is required for limit orders.")

    private_key = require_private_key()
    settings = load_settings()
    builder = OrderBuilder(
        private_key,
        chain_id=settings.chain_id,
        signature_type=settings.signature_type,
        funder_address=settings.funder_address,
    )

    try:
        if isinstance(request, UserMarketOrder):
            signed = builder.build_market_order(request, tick)
            payload_type = request.order_type
        else:
            signed = builder.build_order(request, tick)
            payload_type = time_in_force or OrderType.GTC
    except (ClobSigningError, ValueError) as exc:
        raise fail(str(exc)) from None

    if settings.api_creds is not None:
        echo_json(order_to_post_payload(signed, settings.api_creds.key, payload_type))
    else:
        echo_json(signed.to_dict())
