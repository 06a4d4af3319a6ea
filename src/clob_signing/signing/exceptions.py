"""Exception hierarchy for CLOB signing errors.

Every failure path of the signing core raises a distinct subclass of
``ClobSigningError`` so callers (and the transport layer wrapping this
package) can tell a bad key from a bad price without parsing messages.
No message ever contains private key material.
"""


class ClobSigningError(Exception):
    """Base exception for all CLOB signing errors."""


class InvalidKeyMaterialError(ClobSigningError):
    """Private key cannot be decoded into a valid secp256k1 scalar."""


class InvalidPriceError(ClobSigningError):
    """Price is outside ``(0, 1]`` or is not aligned to the tick size.

    Args:
        price: The rejected price, as given by the caller.
        reason: Human-readable explanation of the rejection.

    """

    def __init__(self, price: object, reason: str) -> None:
        """Initialize invalid price error.

        Args:
            price: The rejected price, as given by the caller.
            reason: Human-readable explanation of the rejection.

        """
        super().__init__(f"Invalid price {price}: {reason}")
        self.price = price
        self.reason = reason


class HashingError(ClobSigningError):
    """Typed-data payload could not be encoded or hashed."""


class SigningError(ClobSigningError):
    """The ECDSA signing primitive failed."""


class RandomnessError(ClobSigningError):
    """The secure random source could not supply entropy."""


class UnsupportedChainError(ClobSigningError):
    """No exchange contract is configured for the requested chain.

    Args:
        chain_id: The chain identifier that has no mapping.

    """

    def __init__(self, chain_id: int) -> None:
        """Initialize unsupported chain error.

        Args:
            chain_id: The chain identifier that has no mapping.

        """
        super().__init__(f"No exchange contract configured for chain {chain_id}")
        self.chain_id = chain_id


class InvalidSecretError(ClobSigningError):
    """HMAC secret cannot be encoded into key bytes."""
