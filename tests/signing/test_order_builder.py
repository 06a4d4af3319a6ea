"""Tests for salt generation and the order builder pipeline."""

import logging
from decimal import Decimal

import pytest

from clob_signing.signing.eip712 import (
    build_order_typed_data,
    get_exchange_address,
    hash_typed_data,
    recover_signer,
)
from clob_signing.signing.exceptions import (
    InvalidKeyMaterialError,
    InvalidPriceError,
    RandomnessError,
    UnsupportedChainError,
)
from clob_signing.signing.models import (
    ZERO_ADDRESS,
    SignatureType,
    SignedOrder,
    Side,
    TickSize,
    UnsignedOrder,
    UserMarketOrder,
    UserOrder,
)
from clob_signing.signing.order_builder import MAX_SALT, OrderBuilder, generate_salt

_PRIVATE_KEY = "0xac0974bec39a17e36ba4a6b4d238ff944bacb478cbed5efcae784d7bf4f2ff80"
_ADDRESS = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"
_FUNDER = "0x70997970C51812dc3A010C7d01b50e0d17dc79C8"
_TOKEN_ID = "1234"
_POLYGON = 137
_AMOY = 80002
_UNKNOWN_CHAIN = 31337
_FIXED_SALT = 5
_SALT_DRAWS = 1000


def _fixed_bytes(n: int) -> bytes:
    """Return a constant provider output that decodes to salt 5."""
    return b"\x00" * (n - 1) + b"\x05"


def _buy(price: str = "0.52", size: str = "10", **overrides: object) -> UserOrder:
    """Create a BUY UserOrder for the test token."""
    return UserOrder(
        token_id=_TOKEN_ID,
        price=Decimal(price),
        size=Decimal(size),
        side=Side.BUY,
        **overrides,  # type: ignore[arg-type]
    )


def _recover(order: SignedOrder, chain_id: int = _POLYGON) -> str:
    """Recover the signer of a signed order from its own fields."""
    fields = {name: getattr(order, name) for name in UnsignedOrder.__dataclass_fields__}
    unsigned = UnsignedOrder(**fields)
    typed_data = build_order_typed_data(unsigned, chain_id, get_exchange_address(chain_id))
    return recover_signer(hash_typed_data(typed_data), order.signature)


class TestGenerateSalt:
    """Test suite for generate_salt."""

    def test_range_and_uniqueness(self) -> None:
        """Test default salts are positive, fit in int64 and do not repeat."""
        salts = [generate_salt() for _ in range(_SALT_DRAWS)]
        assert all(1 <= salt <= MAX_SALT for salt in salts)
        assert len(set(salts)) == _SALT_DRAWS

    def test_deterministic_provider(self) -> None:
        """Test salts decode the provider bytes big-endian."""
        assert generate_salt(_fixed_bytes) == _FIXED_SALT

    def test_sign_bit_masked(self) -> None:
        """Test the top bit is dropped so the salt fits in int64."""
        assert generate_salt(lambda n: b"\xff" * n) == MAX_SALT

    def test_zero_redrawn(self) -> None:
        """Test a zero draw is rejected and the next draw used."""
        draws = iter([b"\x00" * 8, b"\x80" + b"\x00" * 6 + b"\x07"])
        assert generate_salt(lambda _n: next(draws)) == 7

    def test_always_zero_fails(self) -> None:
        """Test a provider stuck at zero raises RandomnessError."""
        with pytest.raises(RandomnessError, match="zero"):
            generate_salt(lambda n: b"\x00" * n)

    def test_provider_failure(self) -> None:
        """Test provider OSErrors are wrapped in RandomnessError."""

        def _broken(_n: int) -> bytes:
            msg = "entropy pool exhausted"
            raise OSError(msg)

        with pytest.raises(RandomnessError, match="unavailable"):
            generate_salt(_broken)

    def test_short_read(self) -> None:
        """Test a provider returning too few bytes raises RandomnessError."""
        with pytest.raises(RandomnessError, match="4 bytes"):
            generate_salt(lambda _n: b"\x01" * 4)


class TestBuildOrder:
    """Test suite for OrderBuilder.build_order."""

    def test_buy_amounts_and_defaults(self) -> None:
        """Test a BUY of 10 at 0.52 with every optional field defaulted."""
        builder = OrderBuilder(_PRIVATE_KEY, random_bytes=_fixed_bytes)
        order = builder.build_order(_buy(), TickSize.HUNDREDTH)
        assert order.maker_amount == "5200000"
        assert order.taker_amount == "10000000"
        assert order.maker == _ADDRESS
        assert order.signer == _ADDRESS
        assert order.taker == ZERO_ADDRESS
        assert order.expiration == "0"
        assert order.nonce == "0"
        assert order.fee_rate_bps == "0"
        assert order.salt == _FIXED_SALT
        assert order.signature_type is SignatureType.EOA

    def test_sell_amounts(self) -> None:
        """Test a SELL swaps the maker and taker legs."""
        builder = OrderBuilder(_PRIVATE_KEY)
        user_order = UserOrder(
            token_id=_TOKEN_ID, price=Decimal("0.52"), size=Decimal(10), side=Side.SELL
        )
        order = builder.build_order(user_order, TickSize.HUNDREDTH)
        assert order.maker_amount == "10000000"
        assert order.taker_amount == "5200000"

    def test_tick_size_as_string(self) -> None:
        """Test the tick size may be given as its string form."""
        builder = OrderBuilder(_PRIVATE_KEY, random_bytes=_fixed_bytes)
        order = builder.build_order(_buy(price="0.523", size="10"), "0.001")
        assert order.maker_amount == "5230000"

    def test_signature_recovers_signer(self) -> None:
        """Test the order signature recovers to the signing wallet."""
        order = OrderBuilder(_PRIVATE_KEY).build_order(_buy(), TickSize.HUNDREDTH)
        assert _recover(order) == _ADDRESS

    def test_amoy_signature_uses_amoy_exchange(self) -> None:
        """Test orders for Amoy are signed against the Amoy exchange."""
        order = OrderBuilder(_PRIVATE_KEY, chain_id=_AMOY).build_order(_buy(), TickSize.HUNDREDTH)
        assert _recover(order, _AMOY) == _ADDRESS
        assert _recover(order, _POLYGON) != _ADDRESS

    def test_funder_is_maker(self) -> None:
        """Test a proxy funder becomes the maker while the EOA signs."""
        builder = OrderBuilder(
            _PRIVATE_KEY,
            signature_type=SignatureType.POLY_PROXY,
            funder_address=_FUNDER.lower(),
        )
        order = builder.build_order(_buy(), TickSize.HUNDREDTH)
        assert order.maker == _FUNDER
        assert order.signer == _ADDRESS
        assert order.signature_type is SignatureType.POLY_PROXY
        assert _recover(order) == _ADDRESS

    def test_explicit_fields_pass_through(self) -> None:
        """Test explicit nonce, expiration, fee and taker are kept."""
        builder = OrderBuilder(_PRIVATE_KEY)
        user_order = _buy(fee_rate_bps=100, nonce=7, expiration=1800000000, taker=_FUNDER.lower())
        order = builder.build_order(user_order, TickSize.HUNDREDTH)
        assert order.fee_rate_bps == "100"
        assert order.nonce == "7"
        assert order.expiration == "1800000000"
        assert order.taker == _FUNDER

    def test_fixed_provider_is_deterministic(self) -> None:
        """Test a fixed random source yields identical signed orders."""
        builder = OrderBuilder(_PRIVATE_KEY, random_bytes=_fixed_bytes)
        first = builder.build_order(_buy(), TickSize.HUNDREDTH)
        second = builder.build_order(_buy(), TickSize.HUNDREDTH)
        assert first == second

    def test_default_provider_varies_salt(self) -> None:
        """Test two orders from the default source get different salts."""
        builder = OrderBuilder(_PRIVATE_KEY)
        first = builder.build_order(_buy(), TickSize.HUNDREDTH)
        second = builder.build_order(_buy(), TickSize.HUNDREDTH)
        assert first.salt != second.salt
        assert first.signature != second.signature

    @pytest.mark.parametrize("price", ["0", "1.01", "0.525"])
    def test_invalid_price(self, price: str) -> None:
        """Test out-of-range and off-tick prices are rejected."""
        with pytest.raises(InvalidPriceError):
            OrderBuilder(_PRIVATE_KEY).build_order(_buy(price=price), TickSize.HUNDREDTH)

    def test_invalid_key(self) -> None:
        """Test an undecodable key is rejected."""
        with pytest.raises(InvalidKeyMaterialError):
            OrderBuilder("0x1234").build_order(_buy(), TickSize.HUNDREDTH)

    def test_invalid_tick_size(self) -> None:
        """Test an unsupported tick size string is rejected."""
        with pytest.raises(ValueError, match="TickSize"):
            OrderBuilder(_PRIVATE_KEY).build_order(_buy(), "0.05")

    def test_invalid_taker(self) -> None:
        """Test a malformed taker address is rejected."""
        with pytest.raises(ValueError, match="Not a valid address"):
            OrderBuilder(_PRIVATE_KEY).build_order(_buy(taker="0x1234"), TickSize.HUNDREDTH)

    def test_randomness_failure(self) -> None:
        """Test salt failures propagate as RandomnessError."""
        builder = OrderBuilder(_PRIVATE_KEY, random_bytes=lambda n: b"\x00" * n)
        with pytest.raises(RandomnessError):
            builder.build_order(_buy(), TickSize.HUNDREDTH)

    def test_strict_chain(self) -> None:
        """Test strict builders refuse unmapped chains."""
        builder = OrderBuilder(_PRIVATE_KEY, chain_id=_UNKNOWN_CHAIN, strict_chain=True)
        with pytest.raises(UnsupportedChainError):
            builder.build_order(_buy(), TickSize.HUNDREDTH)

    def test_unknown_chain_falls_back(self) -> None:
        """Test non-strict builders sign unmapped chains against mainnet."""
        builder = OrderBuilder(_PRIVATE_KEY, chain_id=_UNKNOWN_CHAIN)
        order = builder.build_order(_buy(), TickSize.HUNDREDTH)
        typed_data = build_order_typed_data(
            UnsignedOrder(
                **{name: getattr(order, name) for name in UnsignedOrder.__dataclass_fields__}
            ),
            _UNKNOWN_CHAIN,
            get_exchange_address(_POLYGON),
        )
        assert recover_signer(hash_typed_data(typed_data), order.signature) == _ADDRESS

    def test_debug_log(self, caplog: pytest.LogCaptureFixture) -> None:
        """Test a debug line is logged for each signed order."""
        with caplog.at_level(logging.DEBUG, logger="clob_signing.signing.order_builder"):
            OrderBuilder(_PRIVATE_KEY).build_order(_buy(), TickSize.HUNDREDTH)
        assert "Signed BUY order for token 1234" in caplog.text

    def test_repr_hides_key(self) -> None:
        """Test the builder repr never contains the private key."""
        text = repr(OrderBuilder(_PRIVATE_KEY, funder_address=_FUNDER))
        assert _PRIVATE_KEY[2:] not in text
        assert "chain_id=137" in text
        assert _FUNDER in text


class TestBuildMarketOrder:
    """Test suite for OrderBuilder.build_market_order."""

    def test_buy_without_price(self) -> None:
        """Test a market BUY without a price crosses at 1."""
        builder = OrderBuilder(_PRIVATE_KEY)
        market = UserMarketOrder(token_id=_TOKEN_ID, amount=Decimal(10), side=Side.BUY)
        order = builder.build_market_order(market, TickSize.HUNDREDTH)
        assert order.maker_amount == "10000000"
        assert order.taker_amount == "10000000"

    def test_buy_with_price(self) -> None:
        """Test a market BUY converts collateral into shares at the price."""
        builder = OrderBuilder(_PRIVATE_KEY)
        market = UserMarketOrder(
            token_id=_TOKEN_ID, amount=Decimal(10), side=Side.BUY, price=Decimal("0.5")
        )
        order = builder.build_market_order(market, TickSize.HUNDREDTH)
        assert order.maker_amount == "10000000"
        assert order.taker_amount == "20000000"

    def test_sell_without_price(self) -> None:
        """Test a market SELL without a price crosses at one tick."""
        builder = OrderBuilder(_PRIVATE_KEY)
        market = UserMarketOrder(token_id=_TOKEN_ID, amount=Decimal(5), side=Side.SELL)
        order = builder.build_market_order(market, TickSize.HUNDREDTH)
        assert order.maker_amount == "5000000"
        assert order.taker_amount == "50000"

    def test_market_order_recovers_signer(self) -> None:
        """Test market orders are signed like limit orders."""
        builder = OrderBuilder(_PRIVATE_KEY)
        market = UserMarketOrder(token_id=_TOKEN_ID, amount=Decimal(10), side=Side.BUY)
        assert _recover(builder.build_market_order(market, "0.01")) == _ADDRESS

    def test_invalid_market_price(self) -> None:
        """Test an explicit zero price is rejected before sizing."""
        builder = OrderBuilder(_PRIVATE_KEY)
        market = UserMarketOrder(
            token_id=_TOKEN_ID, amount=Decimal(10), side=Side.BUY, price=Decimal(0)
        )
        with pytest.raises(InvalidPriceError):
            builder.build_market_order(market, TickSize.HUNDREDTH)
