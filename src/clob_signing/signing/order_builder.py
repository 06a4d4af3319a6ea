"""Build fully signed CTF exchange orders from user order requests.

The builder is a single-pass pipeline: derive the signer address, resolve
the maker (funder) address, validate the price, compute the base-unit
amounts, draw a random salt, apply field defaults, then sign the order
struct.  It holds no mutable state, so one instance may be shared across
threads.
"""

import logging
import secrets
from collections.abc import Callable, Mapping
from decimal import Decimal

from clob_signing.signing.amounts import (
    calculate_order_amounts,
    get_round_config,
    to_decimal,
    validate_price,
)
from clob_signing.signing.eip712 import sign_order
from clob_signing.signing.exceptions import RandomnessError
from clob_signing.signing.keys import PrivateKeyMaterial, derive_address, to_checksum
from clob_signing.signing.models import (
    ZERO_ADDRESS,
    Chain,
    SignatureType,
    SignedOrder,
    Side,
    TickSize,
    UnsignedOrder,
    UserMarketOrder,
    UserOrder,
)

logger = logging.getLogger(__name__)

RandomBytes = Callable[[int], bytes]

MAX_SALT = 2**63 - 1
_SALT_BYTES = 8
_MAX_SALT_ATTEMPTS = 16
_MARKET_BUY_PRICE = Decimal(1)


def generate_salt(random_bytes: RandomBytes | None = None) -> int:
    """Draw a uniformly random salt in ``[1, 2**63 - 1]``.

    Args:
        random_bytes: Provider returning ``n`` secure random bytes.
            Defaults to ``secrets.token_bytes``.

    Returns:
        Positive salt that fits in a signed 64-bit integer.

    Raises:
        RandomnessError: When the provider fails, returns the wrong number
            of bytes, or keeps returning zero.

    """
    source = random_bytes or secrets.token_bytes
    for _ in range(_MAX_SALT_ATTEMPTS):
        try:
            raw = source(_SALT_BYTES)
        except (OSError, NotImplementedError) as exc:
            msg = f"Secure random source unavailable: {exc}"
            raise RandomnessError(msg) from exc
        if len(raw) != _SALT_BYTES:
            msg = f"Random source returned {len(raw)} bytes, expected {_SALT_BYTES}"
            raise RandomnessError(msg)
        # Drop the sign bit; zero is rejected and redrawn
        salt = int.from_bytes(raw, "big") & MAX_SALT
        if salt:
            return salt
    msg = f"Random source returned zero {_MAX_SALT_ATTEMPTS} times in a row"
    raise RandomnessError(msg)


def _optional_int(value: int | None) -> str:
    """Render an optional integer field, defaulting to ``"0"``."""
    return "0" if value is None else str(int(value))


class OrderBuilder:
    """Create signed orders for one wallet on one chain.

    When ``funder_address`` is set, orders are funded by that proxy or
    Safe wallet and signed by the EOA behind ``private_key``; pair it with
    ``SignatureType.POLY_PROXY`` or ``SignatureType.POLY_GNOSIS_SAFE``.

    Args:
        private_key: Key of the signing EOA.
        chain_id: Chain on which the exchange contract lives.
        signature_type: Verification scheme recorded in each order.
        funder_address: Wallet holding the funds, if not the signer.
        random_bytes: Secure random-bytes provider for salts.
        exchange_addresses: Optional chain to exchange contract table.
        strict_chain: Reject chains missing from the exchange table
            instead of falling back to Polygon mainnet.

    """

    def __init__(
        self,
        private_key: PrivateKeyMaterial,
        chain_id: int = Chain.POLYGON.value,
        signature_type: SignatureType = SignatureType.EOA,
        funder_address: str | None = None,
        random_bytes: RandomBytes | None = None,
        exchange_addresses: Mapping[int, str] | None = None,
        *,
        strict_chain: bool = False,
    ) -> None:
        """Initialize the order builder.

        Args:
            private_key: Key of the signing EOA.
            chain_id: Chain on which the exchange contract lives.
            signature_type: Verification scheme recorded in each order.
            funder_address: Wallet holding the funds, if not the signer.
            random_bytes: Secure random-bytes provider for salts.
            exchange_addresses: Optional chain to exchange contract table.
            strict_chain: Reject chains missing from the exchange table.

        """
        self._private_key = private_key
        self.chain_id = chain_id
        self.signature_type = signature_type
        self.funder_address = funder_address
        self._random_bytes = random_bytes
        self._exchange_addresses = exchange_addresses
        self._strict_chain = strict_chain

    def __repr__(self) -> str:
        """Describe the builder without exposing the private key."""
        return (
            f"{type(self).__name__}(chain_id={self.chain_id}, "
            f"signature_type={self.signature_type.name}, "
            f"funder_address={self.funder_address!r})"
        )

    def build_order(self, user_order: UserOrder, tick_size: TickSize | str) -> SignedOrder:
        """Build and sign a limit order.

        Args:
            user_order: Trader's order request.
            tick_size: Tick size of the market, as enum or string.

        Returns:
            Signed order ready to be posted.

        Raises:
            InvalidKeyMaterialError: When the private key cannot be decoded.
            InvalidPriceError: When the price is out of range or off-tick.
            RandomnessError: When no salt can be drawn.
            HashingError: When the order fields cannot be hashed.
            SigningError: When the signing primitive fails.
            ValueError: When the tick size or an address is malformed.

        """
        tick = TickSize(tick_size)
        signer = derive_address(self._private_key)
        maker = to_checksum(self.funder_address) if self.funder_address else signer

        validate_price(user_order.price, tick)
        maker_amount, taker_amount = calculate_order_amounts(
            user_order.price,
            user_order.size,
            user_order.side,
            get_round_config(tick),
        )
        salt = generate_salt(self._random_bytes)

        order = UnsignedOrder(
            salt=salt,
            maker=maker,
            signer=signer,
            taker=to_checksum(user_order.taker) if user_order.taker else ZERO_ADDRESS,
            token_id=str(user_order.token_id),
            maker_amount=maker_amount,
            taker_amount=taker_amount,
            expiration=_optional_int(user_order.expiration),
            nonce=_optional_int(user_order.nonce),
            fee_rate_bps=_optional_int(user_order.fee_rate_bps),
            side=user_order.side,
            signature_type=self.signature_type,
        )
        signature = sign_order(
            self._private_key,
            order,
            self.chain_id,
            self._exchange_addresses,
            strict=self._strict_chain,
        )
        logger.debug(
            "Signed %s order for token %s: salt=%d maker=%s signer=%s "
            "makerAmount=%s takerAmount=%s",
            order.side.value,
            order.token_id,
            order.salt,
            order.maker,
            order.signer,
            order.maker_amount,
            order.taker_amount,
        )
        return order.with_signature(signature)

    def build_market_order(
        self,
        user_market_order: UserMarketOrder,
        tick_size: TickSize | str,
    ) -> SignedOrder:
        """Build and sign a market order as a marketable limit order.

        For ``BUY`` orders the collateral ``amount`` is converted into a
        share size at the worst acceptable price.  Without an explicit
        price a buy crosses at ``1`` and a sell at one tick.

        Args:
            user_market_order: Trader's market order request.
            tick_size: Tick size of the market, as enum or string.

        Returns:
            Signed order ready to be posted.

        """
        tick = TickSize(tick_size)
        side = user_market_order.side
        if user_market_order.price is not None:
            price = to_decimal(user_market_order.price)
        else:
            price = _MARKET_BUY_PRICE if side is Side.BUY else tick.decimal
        validate_price(price, tick)

        amount = to_decimal(user_market_order.amount)
        size = amount / price if side is Side.BUY else amount

        user_order = UserOrder(
            token_id=user_market_order.token_id,
            price=price,
            size=size,
            side=side,
            fee_rate_bps=user_market_order.fee_rate_bps,
            nonce=user_market_order.nonce,
            taker=user_market_order.taker,
        )
        return self.build_order(user_order, tick)
