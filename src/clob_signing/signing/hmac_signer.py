"""HMAC-SHA256 request signatures for Level 2 (API key) authentication.

The signed message is the concatenation of:
Timestamp + HTTP Method + Request Path + Request Body
with no delimiters.  The server rebuilds the same string, so the order of
the components must not change.
"""

import base64

from cryptography.hazmat.primitives import hashes, hmac

from clob_signing.signing.exceptions import InvalidSecretError


def build_hmac_signature(
    secret: str,
    timestamp: int | str,
    method: str,
    request_path: str,
    body: str = "",
) -> str:
    """Generate the HMAC signature for an authenticated API request.

    Args:
        secret: API secret issued with the session credentials.
        timestamp: Unix timestamp in seconds.
        method: HTTP method (GET, POST, etc.).
        request_path: API endpoint path, e.g. ``/order``.
        body: Raw request body as sent on the wire.

    Returns:
        Base64url HMAC-SHA256 digest with ``=`` padding stripped.

    Raises:
        InvalidSecretError: If the secret cannot be encoded as UTF-8.

    """
    try:
        key = secret.encode("utf-8")
    except (AttributeError, UnicodeEncodeError) as exc:
        msg = "API secret cannot be encoded"
        raise InvalidSecretError(msg) from exc

    message = f"{timestamp}{method}{request_path}{body}"

    mac = hmac.HMAC(key, hashes.SHA256())
    mac.update(message.encode("utf-8"))
    digest = mac.finalize()

    return base64.urlsafe_b64encode(digest).decode("ascii").rstrip("=")
