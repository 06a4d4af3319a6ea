"""Price validation and fixed-point amount computation for orders.

Convert a human-facing price and size into the maker and taker legs the
exchange contract settles.  Each leg is first rounded to the decimal
precision configured for the market's tick size, then scaled to base units
(10^6) and rounded again to an integer, matching the amounts the
counterpart service computes for the same order.

All arithmetic uses ``Decimal``.  Floats supplied by callers are converted
through their shortest ``repr`` so ``0.52`` means ``Decimal("0.52")``.
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from clob_signing.signing.exceptions import InvalidPriceError
from clob_signing.signing.models import RoundConfig, Side, TickSize

Number = Decimal | float | int | str

BASE_UNIT_DECIMALS = 6
_BASE_UNIT_SCALE = Decimal(10) ** BASE_UNIT_DECIMALS
_ZERO = Decimal(0)
_ONE = Decimal(1)
_TICK_TOLERANCE_DIVISOR = Decimal(100)

_ROUND_CONFIGS: dict[TickSize, RoundConfig] = {
    TickSize.TENTH: RoundConfig(price=1, size=1, amount=1),
    TickSize.HUNDREDTH: RoundConfig(price=2, size=2, amount=2),
    TickSize.THOUSANDTH: RoundConfig(price=3, size=3, amount=3),
    TickSize.TEN_THOUSANDTH: RoundConfig(price=4, size=4, amount=4),
}


def to_decimal(value: Number) -> Decimal:
    """Convert a caller-supplied number to ``Decimal`` without float noise.

    Args:
        value: A ``Decimal``, ``int``, ``float`` or numeric string.

    Returns:
        The equivalent ``Decimal``.

    Raises:
        ValueError: When ``value`` is not numeric.

    """
    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(str(value)) if isinstance(value, float) else Decimal(value)
    except InvalidOperation as exc:
        msg = f"Not a decimal number: {value!r}"
        raise ValueError(msg) from exc


def get_round_config(tick_size: TickSize) -> RoundConfig:
    """Return the fixed rounding precision for a tick size."""
    return _ROUND_CONFIGS[tick_size]


def round_decimal(value: Number, precision: int) -> Decimal:
    """Round to ``precision`` decimal digits, ties away from zero.

    Args:
        value: Number to round.
        precision: Number of digits to keep after the decimal point.

    Returns:
        The rounded value, quantized to exactly ``precision`` digits.

    """
    return to_decimal(value).quantize(_ONE.scaleb(-precision), rounding=ROUND_HALF_UP)


def to_base_units(value: Number) -> str:
    """Scale a decimal amount by 10^6 and round to the nearest integer.

    Args:
        value: Human-readable amount, e.g. ``Decimal("5.2")``.

    Returns:
        Base-10 integer string, e.g. ``"5200000"``.

    """
    scaled = to_decimal(value) * _BASE_UNIT_SCALE
    return str(int(scaled.quantize(_ONE, rounding=ROUND_HALF_UP)))


def _checked_price(price: Number) -> Decimal:
    """Convert ``price`` and enforce ``0 < price <= 1``."""
    try:
        value = to_decimal(price)
    except ValueError as exc:
        raise InvalidPriceError(price, "not a number") from exc
    if not value.is_finite():
        raise InvalidPriceError(price, "not a finite number")
    if value <= _ZERO or value > _ONE:
        raise InvalidPriceError(price, "must be between 0 (exclusive) and 1 (inclusive)")
    return value


def validate_price(price: Number, tick_size: TickSize) -> None:
    """Check that a price is in ``(0, 1]`` and aligned to the tick size.

    A price within ``tick / 100`` of a tick multiple is accepted so that
    float inputs such as ``0.1 + 0.2`` are not rejected.

    Args:
        price: Limit price.
        tick_size: Market tick size.

    Raises:
        InvalidPriceError: When the price is out of range or off-tick.

    """
    value = _checked_price(price)
    tick = tick_size.decimal
    epsilon = tick / _TICK_TOLERANCE_DIVISOR
    remainder = value % tick
    if remainder > epsilon and (tick - remainder) > epsilon:
        raise InvalidPriceError(price, f"must be a multiple of tick size {tick_size.value}")


def compute_legs(
    price: Number,
    size: Number,
    side: Side,
    round_config: RoundConfig,
) -> tuple[Decimal, Decimal]:
    """Compute the rounded maker and taker legs of an order.

    A buyer gives up collateral (``price * size``) and receives shares; a
    seller gives up shares and receives collateral.

    Args:
        price: Limit price in ``(0, 1]``.
        size: Number of shares.
        side: Order side.
        round_config: Precision for the size and notional legs.

    Returns:
        Tuple of ``(maker_leg, taker_leg)`` as decimals.

    Raises:
        InvalidPriceError: When the price is outside ``(0, 1]``.
        ValueError: When the size is negative or not a number.

    """
    price_value = _checked_price(price)
    size_value = to_decimal(size)
    if not size_value.is_finite() or size_value < _ZERO:
        msg = f"Order size must be a non-negative number, got {size}"
        raise ValueError(msg)

    notional = price_value * size_value
    if side is Side.BUY:
        return (
            round_decimal(notional, round_config.amount),
            round_decimal(size_value, round_config.size),
        )
    return (
        round_decimal(size_value, round_config.size),
        round_decimal(notional, round_config.amount),
    )


def calculate_order_amounts(
    price: Number,
    size: Number,
    side: Side,
    round_config: RoundConfig,
) -> tuple[str, str]:
    """Compute maker and taker amounts in base units.

    Args:
        price: Limit price in ``(0, 1]``.
        size: Number of shares.
        side: Order side.
        round_config: Precision for the size and notional legs.

    Returns:
        Tuple of ``(maker_amount, taker_amount)`` integer strings.

    """
    maker_leg, taker_leg = compute_legs(price, size, side, round_config)
    return to_base_units(maker_leg), to_base_units(taker_leg)
