"""EIP-712 structured-data hashing and signing for CLOB messages.

Two message shapes are signed:

* ``ClobAuth`` -- the wallet challenge that proves key ownership when
  deriving or using API credentials (Level 1 authentication).
* ``Order`` -- the order struct verified on-chain by the CTF exchange.

The digest is ``keccak256(0x19 0x01 || domainSeparator || hashStruct(message))``
as produced by ``eth_account.messages.encode_typed_data``.  It is signed with
``eth_keys`` and the recovery byte is shifted into ``{27, 28}``.

The field names, type strings and field order below are part of the wire
contract: changing any of them changes every hash.
"""

import logging
from collections.abc import Mapping
from types import MappingProxyType
from typing import Any

from eth_abi.exceptions import EncodingError
from eth_account.messages import encode_typed_data
from eth_keys import keys
from eth_keys.exceptions import BadSignature, ValidationError
from eth_utils import ValidationError as SchemaValidationError
from eth_utils import decode_hex, keccak, to_checksum_address

from clob_signing.signing.exceptions import HashingError, SigningError, UnsupportedChainError
from clob_signing.signing.keys import PrivateKeyMaterial, derive_address, load_private_key
from clob_signing.signing.models import Chain, UnsignedOrder

logger = logging.getLogger(__name__)

CLOB_AUTH_DOMAIN_NAME = "ClobAuthDomain"
CLOB_DOMAIN_VERSION = "1"
CLOB_AUTH_MESSAGE = "Signing in to ClobAuth"
EXCHANGE_DOMAIN_NAME = "Polymarket CTF Exchange"
EXCHANGE_DOMAIN_VERSION = "1"

EXCHANGE_ADDRESSES: Mapping[int, str] = MappingProxyType(
    {
        Chain.POLYGON.value: "0x4bFb41d5B3570DeFd03C39a9A4D8dE6Bd8B8982E",
        Chain.AMOY.value: "0xdFE02Eb6733538f8Ea35D585af8DE5958AD99E40",
    }
)

_SIGNATURE_LENGTH = 65
_DIGEST_LENGTH = 32
_RECOVERY_OFFSET = 27

_AUTH_DOMAIN_TYPE: list[dict[str, str]] = [
    {"name": "name", "type": "string"},
    {"name": "version", "type": "string"},
    {"name": "chainId", "type": "uint256"},
]

_EXCHANGE_DOMAIN_TYPE: list[dict[str, str]] = [
    *_AUTH_DOMAIN_TYPE,
    {"name": "verifyingContract", "type": "address"},
]

_CLOB_AUTH_TYPE: list[dict[str, str]] = [
    {"name": "address", "type": "address"},
    {"name": "timestamp", "type": "string"},
    {"name": "nonce", "type": "string"},
    {"name": "message", "type": "string"},
]

_ORDER_TYPE: list[dict[str, str]] = [
    {"name": "salt", "type": "uint256"},
    {"name": "maker", "type": "address"},
    {"name": "signer", "type": "address"},
    {"name": "taker", "type": "address"},
    {"name": "tokenId", "type": "uint256"},
    {"name": "makerAmount", "type": "uint256"},
    {"name": "takerAmount", "type": "uint256"},
    {"name": "expiration", "type": "uint256"},
    {"name": "nonce", "type": "uint256"},
    {"name": "feeRateBps", "type": "uint256"},
    {"name": "side", "type": "uint8"},
    {"name": "signatureType", "type": "uint8"},
]


def get_exchange_address(
    chain_id: int,
    exchange_addresses: Mapping[int, str] | None = None,
    *,
    strict: bool = False,
) -> str:
    """Resolve the CTF exchange contract used as ``verifyingContract``.

    Unknown chains fall back to the Polygon mainnet exchange unless
    ``strict`` is set.  A signature produced against the fallback address
    is only valid on mainnet, so the fallback is logged.

    Args:
        chain_id: Chain identifier.
        exchange_addresses: Optional caller-supplied table, replacing the
            built-in one.
        strict: Raise instead of falling back when the chain is unmapped.

    Returns:
        Exchange contract address.

    Raises:
        UnsupportedChainError: When ``strict`` is set and the chain is unmapped.

    """
    table = EXCHANGE_ADDRESSES if exchange_addresses is None else exchange_addresses
    address = table.get(chain_id)
    if address is not None:
        return address
    if strict:
        raise UnsupportedChainError(chain_id)
    fallback = EXCHANGE_ADDRESSES[Chain.POLYGON.value]
    logger.warning(
        "No exchange contract for chain %d, falling back to Polygon mainnet %s",
        chain_id,
        fallback,
    )
    return fallback


def build_clob_auth_typed_data(
    address: str,
    chain_id: int,
    timestamp: int,
    nonce: str,
) -> dict[str, Any]:
    """Build the ``ClobAuth`` typed-data payload.

    Args:
        address: Address of the signing wallet.
        chain_id: Chain identifier for the domain.
        timestamp: Unix timestamp in seconds.
        nonce: Caller-chosen nonce, rendered as a string.

    Returns:
        Full EIP-712 message with ``types``, ``primaryType``, ``domain`` and
        ``message`` keys.

    """
    return {
        "types": {"EIP712Domain": _AUTH_DOMAIN_TYPE, "ClobAuth": _CLOB_AUTH_TYPE},
        "primaryType": "ClobAuth",
        "domain": {
            "name": CLOB_AUTH_DOMAIN_NAME,
            "version": CLOB_DOMAIN_VERSION,
            "chainId": chain_id,
        },
        "message": {
            "address": address,
            "timestamp": str(timestamp),
            "nonce": str(nonce),
            "message": CLOB_AUTH_MESSAGE,
        },
    }


def build_order_typed_data(
    order: UnsignedOrder,
    chain_id: int,
    verifying_contract: str,
) -> dict[str, Any]:
    """Build the ``Order`` typed-data payload.

    Numeric fields are rendered as decimal strings, with ``side`` as its
    ``uint8`` code and ``signatureType`` as its integer value.

    Args:
        order: The resolved order to sign.
        chain_id: Chain identifier for the domain.
        verifying_contract: Exchange contract address.

    Returns:
        Full EIP-712 message with ``types``, ``primaryType``, ``domain`` and
        ``message`` keys.

    """
    return {
        "types": {"EIP712Domain": _EXCHANGE_DOMAIN_TYPE, "Order": _ORDER_TYPE},
        "primaryType": "Order",
        "domain": {
            "name": EXCHANGE_DOMAIN_NAME,
            "version": EXCHANGE_DOMAIN_VERSION,
            "chainId": chain_id,
            "verifyingContract": verifying_contract,
        },
        "message": {
            "salt": str(order.salt),
            "maker": order.maker,
            "signer": order.signer,
            "taker": order.taker,
            "tokenId": order.token_id,
            "makerAmount": order.maker_amount,
            "takerAmount": order.taker_amount,
            "expiration": order.expiration,
            "nonce": order.nonce,
            "feeRateBps": order.fee_rate_bps,
            "side": str(order.side.typed_data_value),
            "signatureType": str(order.signature_type.value),
        },
    }


def _coerce_struct(fields: list[dict[str, str]], values: Mapping[str, Any]) -> dict[str, Any]:
    """Convert decimal-string integers and addresses into hashable values.

    Raises:
        KeyError: When a field declared in ``fields`` is missing.
        ValueError: When a value cannot be parsed for its declared type.

    """
    coerced: dict[str, Any] = {}
    for field in fields:
        name, type_ = field["name"], field["type"]
        value = values[name]
        if type_.startswith("uint"):
            coerced[name] = value if isinstance(value, int) else int(str(value), 10)
        elif type_ == "address":
            coerced[name] = to_checksum_address(value)
        else:
            coerced[name] = value
    return coerced


def hash_typed_data(typed_data: Mapping[str, Any]) -> bytes:
    """Compute the 32-byte EIP-712 digest of a full typed-data message.

    Args:
        typed_data: Payload from ``build_clob_auth_typed_data`` or
            ``build_order_typed_data``.

    Returns:
        ``keccak256(0x19 0x01 || domainSeparator || hashStruct(message))``.

    Raises:
        HashingError: When the payload does not match its declared schema.

    """
    try:
        types = typed_data["types"]
        primary_type = typed_data["primaryType"]
        full_message = {
            "types": types,
            "primaryType": primary_type,
            "domain": _coerce_struct(types["EIP712Domain"], typed_data["domain"]),
            "message": _coerce_struct(types[primary_type], typed_data["message"]),
        }
        signable = encode_typed_data(full_message=full_message)
    except (KeyError, TypeError, ValueError, EncodingError, SchemaValidationError) as exc:
        msg = f"Cannot hash typed data: {exc}"
        raise HashingError(msg) from exc
    return bytes(keccak(b"\x19" + signable.version + signable.header + signable.body))


def sign_hash(private_key: PrivateKeyMaterial, digest: bytes) -> str:
    """Sign a 32-byte digest and return the 65-byte signature as hex.

    Args:
        private_key: Signing key material.
        digest: Message hash to sign.

    Returns:
        ``0x``-prefixed hex of ``r || s || v`` with ``v`` in ``{27, 28}``.

    Raises:
        InvalidKeyMaterialError: When the key cannot be decoded.
        SigningError: When the signing primitive fails.

    """
    key = load_private_key(private_key)
    if len(digest) != _DIGEST_LENGTH:
        msg = f"Digest must be {_DIGEST_LENGTH} bytes, got {len(digest)}"
        raise SigningError(msg)
    try:
        raw = bytearray(key.sign_msg_hash(digest).to_bytes())
    except (ValueError, ValidationError) as exc:
        msg = f"Signing failed: {exc}"
        raise SigningError(msg) from exc
    if raw[-1] < _RECOVERY_OFFSET:
        raw[-1] += _RECOVERY_OFFSET
    return "0x" + raw.hex()


def recover_signer(digest: bytes, signature: str) -> str:
    """Recover the checksummed address that produced ``signature``.

    Args:
        digest: The 32-byte message hash that was signed.
        signature: ``0x``-prefixed 65-byte hex signature, ``v`` in
            ``{0, 1}`` or ``{27, 28}``.

    Returns:
        Checksummed address of the signer.

    Raises:
        ValueError: When the signature is malformed or cannot be recovered.

    """
    raw = bytearray(decode_hex(signature))
    if len(raw) != _SIGNATURE_LENGTH:
        msg = f"Signature must be {_SIGNATURE_LENGTH} bytes, got {len(raw)}"
        raise ValueError(msg)
    if raw[-1] >= _RECOVERY_OFFSET:
        raw[-1] -= _RECOVERY_OFFSET
    try:
        public_key = keys.Signature(signature_bytes=bytes(raw)).recover_public_key_from_msg_hash(
            digest
        )
    except (BadSignature, ValidationError) as exc:
        msg = f"Cannot recover signer: {exc}"
        raise ValueError(msg) from exc
    return str(public_key.to_checksum_address())


def sign_typed_data(private_key: PrivateKeyMaterial, typed_data: Mapping[str, Any]) -> str:
    """Hash a typed-data payload and sign the digest."""
    return sign_hash(private_key, hash_typed_data(typed_data))


def sign_clob_auth(
    private_key: PrivateKeyMaterial,
    chain_id: int,
    timestamp: int,
    nonce: str = "0",
) -> str:
    """Sign the ``ClobAuth`` wallet challenge.

    Args:
        private_key: Signing key material.
        chain_id: Chain identifier for the domain.
        timestamp: Unix timestamp in seconds.
        nonce: Caller-chosen nonce.

    Returns:
        Hex signature with normalized recovery byte.

    """
    address = derive_address(private_key)
    typed_data = build_clob_auth_typed_data(address, chain_id, timestamp, nonce)
    return sign_typed_data(private_key, typed_data)


def sign_order(
    private_key: PrivateKeyMaterial,
    order: UnsignedOrder,
    chain_id: int,
    exchange_addresses: Mapping[int, str] | None = None,
    *,
    strict: bool = False,
) -> str:
    """Sign an order for the CTF exchange deployed on ``chain_id``.

    Args:
        private_key: Key of ``order.signer``.
        order: The resolved order.
        chain_id: Chain identifier for the domain.
        exchange_addresses: Optional exchange table, see ``get_exchange_address``.
        strict: Reject chains missing from the exchange table.

    Returns:
        Hex signature with normalized recovery byte.

    """
    verifying_contract = get_exchange_address(chain_id, exchange_addresses, strict=strict)
    typed_data = build_order_typed_data(order, chain_id, verifying_contract)
    return sign_typed_data(private_key, typed_data)
