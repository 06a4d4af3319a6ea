"""Private key decoding and address derivation.

This is the only module that turns caller-supplied key material into
``eth_keys`` objects.  Decoding errors from the Ethereum libraries are
converted into ``InvalidKeyMaterialError`` so callers never see a library
exception, and the key itself never appears in error messages or logs.
"""

from eth_account import Account
from eth_keys import keys
from eth_keys.exceptions import ValidationError
from eth_utils import is_address, to_checksum_address

from clob_signing.signing.exceptions import InvalidKeyMaterialError

PrivateKeyMaterial = str | bytes


def load_private_key(private_key: PrivateKeyMaterial) -> keys.PrivateKey:
    """Decode key material into an ``eth_keys`` private key.

    Args:
        private_key: Hex string (with or without ``0x``) or raw 32 bytes.

    Returns:
        The decoded secp256k1 private key.

    Raises:
        InvalidKeyMaterialError: When the input is not a valid scalar for
            the secp256k1 curve.

    """
    try:
        account = Account.from_key(private_key)
        return keys.PrivateKey(bytes(account.key))
    except (ValueError, TypeError, ValidationError) as exc:
        msg = "Private key cannot be decoded"
        raise InvalidKeyMaterialError(msg) from exc


def derive_address(private_key: PrivateKeyMaterial) -> str:
    """Derive the EIP-55 checksummed address controlled by a private key.

    Args:
        private_key: Hex string (with or without ``0x``) or raw 32 bytes.

    Returns:
        Checksummed Ethereum address string.

    Raises:
        InvalidKeyMaterialError: When the key cannot be decoded.

    """
    return str(load_private_key(private_key).public_key.to_checksum_address())


def is_valid_address(address: str) -> bool:
    """Return whether ``address`` is a well-formed 20-byte hex address."""
    return bool(is_address(address))


def to_checksum(address: str) -> str:
    """Normalize an address to its EIP-55 checksummed form.

    Raises:
        ValueError: When ``address`` is not a valid address.

    """
    if not is_valid_address(address):
        msg = f"Not a valid address: {address!r}"
        raise ValueError(msg)
    return str(to_checksum_address(address))
