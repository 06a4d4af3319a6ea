"""Authentication header sets for CLOB REST requests.

Level 1 headers prove control of the wallet with an EIP-712 ``ClobAuth``
signature and are used to create or derive API credentials.  Level 2
headers sign each request with the session's HMAC secret.  Header names
are part of the wire contract with the CLOB service.
"""

import time

from clob_signing.signing.eip712 import sign_clob_auth
from clob_signing.signing.hmac_signer import build_hmac_signature
from clob_signing.signing.keys import PrivateKeyMaterial, derive_address
from clob_signing.signing.models import ApiKeyCreds, BuilderApiKey

POLY_ADDRESS = "POLY_ADDRESS"
POLY_SIGNATURE = "POLY_SIGNATURE"
POLY_TIMESTAMP = "POLY_TIMESTAMP"
POLY_NONCE = "POLY_NONCE"
POLY_API_KEY = "POLY_API_KEY"
POLY_PASSPHRASE = "POLY_PASSPHRASE"
POLY_BUILDER_API_KEY = "POLY_BUILDER_API_KEY"
POLY_BUILDER_TIMESTAMP = "POLY_BUILDER_TIMESTAMP"
POLY_BUILDER_PASSPHRASE = "POLY_BUILDER_PASSPHRASE"
POLY_BUILDER_SIGNATURE = "POLY_BUILDER_SIGNATURE"


def _now() -> int:
    """Return the current Unix time in whole seconds."""
    return int(time.time())


def create_l1_headers(
    private_key: PrivateKeyMaterial,
    chain_id: int,
    nonce: str = "0",
    timestamp: int | None = None,
) -> dict[str, str]:
    """Create wallet-signature (Level 1) headers.

    Args:
        private_key: Key of the wallet proving ownership.
        chain_id: Chain identifier for the ``ClobAuth`` domain.
        nonce: Caller-chosen nonce.
        timestamp: Unix seconds; defaults to now.

    Returns:
        Header mapping with address, signature, timestamp and nonce.

    """
    ts = _now() if timestamp is None else timestamp
    return {
        POLY_ADDRESS: derive_address(private_key),
        POLY_SIGNATURE: sign_clob_auth(private_key, chain_id, ts, nonce),
        POLY_TIMESTAMP: str(ts),
        POLY_NONCE: str(nonce),
    }


def create_l2_headers(
    private_key: PrivateKeyMaterial,
    creds: ApiKeyCreds,
    method: str,
    request_path: str,
    body: str = "",
    timestamp: int | None = None,
) -> dict[str, str]:
    """Create API-key (Level 2) headers for a single request.

    Args:
        private_key: Key of the wallet owning the API key.
        creds: Session credentials.
        method: HTTP method.
        request_path: API endpoint path.
        body: Raw request body.
        timestamp: Unix seconds; defaults to now.

    Returns:
        Header mapping with address, HMAC signature, timestamp, API key
        and passphrase.

    """
    ts = _now() if timestamp is None else timestamp
    return {
        POLY_ADDRESS: derive_address(private_key),
        POLY_SIGNATURE: build_hmac_signature(creds.secret, ts, method, request_path, body),
        POLY_TIMESTAMP: str(ts),
        POLY_API_KEY: creds.key,
        POLY_PASSPHRASE: creds.passphrase,
    }


def inject_builder_headers(
    headers: dict[str, str],
    builder_creds: BuilderApiKey,
    method: str,
    request_path: str,
    body: str,
    timestamp: int,
) -> dict[str, str]:
    """Return a copy of ``headers`` with builder attribution headers added.

    Args:
        headers: Existing Level 2 headers.
        builder_creds: Builder account credentials.
        method: HTTP method.
        request_path: API endpoint path.
        body: Raw request body.
        timestamp: Unix seconds, normally the Level 2 timestamp.

    Returns:
        New header mapping including the four ``POLY_BUILDER_*`` headers.

    """
    signature = build_hmac_signature(builder_creds.secret, timestamp, method, request_path, body)
    return {
        **headers,
        POLY_BUILDER_API_KEY: builder_creds.key,
        POLY_BUILDER_TIMESTAMP: str(timestamp),
        POLY_BUILDER_PASSPHRASE: builder_creds.passphrase,
        POLY_BUILDER_SIGNATURE: signature,
    }
