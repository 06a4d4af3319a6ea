"""Typed data models for CLOB order signing.

Provide enums for the exchange's fixed vocabularies (side, signature type,
tick size, order type, chain) and frozen dataclasses for user-facing order
requests and the unsigned/signed order records that cross the wire.
All human-facing prices and sizes use ``Decimal``; all on-chain amounts are
base-10 integer strings scaled by 10^6.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"


class Side(Enum):
    """Order side as sent on the wire."""

    BUY = "BUY"
    SELL = "SELL"

    @property
    def typed_data_value(self) -> int:
        """Return the ``uint8`` encoding used in the order struct (BUY=0, SELL=1)."""
        return 0 if self is Side.BUY else 1


class SignatureType(Enum):
    """How the exchange contract verifies the order signature.

    ``EOA`` orders are signed and funded by the same externally owned
    account.  ``POLY_PROXY`` and ``POLY_GNOSIS_SAFE`` orders are signed by
    an EOA on behalf of a proxy or Safe wallet that holds the funds.
    """

    EOA = 0
    POLY_PROXY = 1
    POLY_GNOSIS_SAFE = 2


class TickSize(Enum):
    """Minimum price increment supported by a market."""

    TENTH = "0.1"
    HUNDREDTH = "0.01"
    THOUSANDTH = "0.001"
    TEN_THOUSANDTH = "0.0001"

    @property
    def decimal(self) -> Decimal:
        """Return the tick size as a ``Decimal``."""
        return Decimal(self.value)


class OrderType(Enum):
    """Time-in-force of a posted order."""

    GTC = "GTC"
    FOK = "FOK"
    GTD = "GTD"
    FAK = "FAK"


class Chain(Enum):
    """Chains on which the CTF exchange is deployed."""

    POLYGON = 137
    AMOY = 80002


@dataclass(frozen=True)
class RoundConfig:
    """Decimal precision applied to each order leg for a given tick size.

    Args:
        price: Digits kept on the price.
        size: Digits kept on the share size.
        amount: Digits kept on the collateral notional (price x size).

    """

    price: int
    size: int
    amount: int


@dataclass(frozen=True)
class UserOrder:
    """Limit order as expressed by a trader.

    Optional fields left as ``None`` are resolved to their exchange
    defaults by the order builder: zero-address taker, nonce ``0``,
    no expiration and a zero fee rate.

    Args:
        token_id: Decimal string of the outcome token identifier.
        price: Limit price in ``(0, 1]``.
        size: Number of outcome shares.
        side: ``Side.BUY`` or ``Side.SELL``.
        fee_rate_bps: Fee rate in basis points.
        nonce: Exchange nonce used for onchain cancellation.
        expiration: Unix timestamp in seconds after which the order expires.
        taker: Address allowed to fill the order.

    """

    token_id: str
    price: Decimal
    size: Decimal
    side: Side
    fee_rate_bps: int | None = None
    nonce: int | None = None
    expiration: int | None = None
    taker: str | None = None


@dataclass(frozen=True)
class UserMarketOrder:
    """Market order as expressed by a trader.

    For ``BUY`` orders ``amount`` is collateral to spend; for ``SELL``
    orders it is the number of shares to sell.  When ``price`` is omitted
    the worst acceptable price is used (``1`` to buy, one tick to sell).

    Args:
        token_id: Decimal string of the outcome token identifier.
        amount: Collateral (buy) or shares (sell).
        side: ``Side.BUY`` or ``Side.SELL``.
        price: Optional worst acceptable price.
        fee_rate_bps: Fee rate in basis points.
        nonce: Exchange nonce.
        taker: Address allowed to fill the order.
        order_type: Time-in-force, ``FOK`` by default.

    """

    token_id: str
    amount: Decimal
    side: Side
    price: Decimal | None = None
    fee_rate_bps: int | None = None
    nonce: int | None = None
    taker: str | None = None
    order_type: OrderType = OrderType.FOK


@dataclass(frozen=True)
class UnsignedOrder:
    """Fully resolved order record ready for typed-data signing.

    Args:
        salt: Random entropy in ``[1, 2**63 - 1]``.
        maker: Address that funds the order.
        signer: Address whose key signs the order.
        taker: Address allowed to fill, zero address when public.
        token_id: Decimal string of the outcome token identifier.
        maker_amount: Base units the maker gives up.
        taker_amount: Base units the maker receives.
        expiration: Unix seconds as a string, ``"0"`` for none.
        nonce: Exchange nonce as a string.
        fee_rate_bps: Fee rate in basis points as a string.
        side: Order side.
        signature_type: Verification scheme for the signature.

    """

    salt: int
    maker: str
    signer: str
    taker: str
    token_id: str
    maker_amount: str
    taker_amount: str
    expiration: str
    nonce: str
    fee_rate_bps: str
    side: Side
    signature_type: SignatureType

    def with_signature(self, signature: str) -> "SignedOrder":
        """Return a ``SignedOrder`` carrying these fields and ``signature``."""
        values = {f: getattr(self, f) for f in self.__dataclass_fields__}
        return SignedOrder(**values, signature=signature)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the camelCase wire form expected by the exchange."""
        return {
            "salt": self.salt,
            "maker": self.maker,
            "signer": self.signer,
            "taker": self.taker,
            "tokenId": self.token_id,
            "makerAmount": self.maker_amount,
            "takerAmount": self.taker_amount,
            "expiration": self.expiration,
            "nonce": self.nonce,
            "feeRateBps": self.fee_rate_bps,
            "side": self.side.value,
            "signatureType": self.signature_type.value,
        }


@dataclass(frozen=True)
class SignedOrder(UnsignedOrder):
    """Unsigned order plus its 65-byte hex ECDSA signature."""

    signature: str

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the camelCase wire form, signature included."""
        payload = super().to_dict()
        payload["signature"] = self.signature
        return payload


@dataclass(frozen=True)
class ApiKeyCreds:
    """HMAC credentials for an authenticated (Level 2) session.

    The secret and passphrase are excluded from ``repr`` so the
    credentials can be logged by reference without leaking them.
    """

    key: str
    secret: str = field(repr=False)
    passphrase: str = field(repr=False)


@dataclass(frozen=True)
class BuilderApiKey:
    """HMAC credentials for an order-flow builder account."""

    key: str
    secret: str = field(repr=False)
    passphrase: str = field(repr=False)


def order_to_post_payload(
    order: SignedOrder,
    owner: str,
    order_type: OrderType = OrderType.GTC,
) -> dict[str, Any]:
    """Build the JSON body for submitting a signed order.

    Args:
        order: The signed order.
        owner: API key of the session posting the order.
        order_type: Time-in-force for the order.

    Returns:
        Dictionary with ``order``, ``owner`` and ``orderType`` keys.

    """
    return {"order": order.to_dict(), "owner": owner, "orderType": order_type.value}

