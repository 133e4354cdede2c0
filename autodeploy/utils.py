"""the beautiful world start from here."""

from __future__ import annotations

import hashlib
import hmac

from autodeploy.errors import AuthError, ConfigError

SIGNATURE_PREFIX = "sha256="


def _decode_header(signature_header: str | bytes) -> str:
    if isinstance(signature_header, bytes):
        try:
            return signature_header.decode("ascii")
        except UnicodeDecodeError as exc:
            raise AuthError(
                "Unable to decode signature header.", f"undecodable header: {exc}"
            ) from exc
    return signature_header


def gh_verify(secret: str, body: bytes, signature_header: str | bytes | None) -> None:
    """
    Verify GitHub webhook HMAC signature (X-Hub-Signature-256).

    The digest is HMAC-SHA256 of the raw body keyed by ``secret``, hex-encoded,
    compared in constant time against the header value with its ``sha256=``
    prefix and surrounding whitespace removed.

    Raises
    ------
    AuthError
        Header missing, undecodable, or not matching the body.
    ConfigError
        The shared secret is empty or cannot be used as a MAC key.
    """
    if signature_header is None:
        raise AuthError("Required header not provided.", "missing header")
    received = _decode_header(signature_header).strip()
    if received.startswith(SIGNATURE_PREFIX):
        received = received[len(SIGNATURE_PREFIX):].strip()

    if not secret:
        raise ConfigError("Unable to verify token.", "webhook secret is not configured")
    try:
        key = secret.encode("utf-8")
    except UnicodeEncodeError as exc:
        raise ConfigError("Unable to verify token.", str(exc)) from exc

    computed = hmac.new(key, msg=body, digestmod=hashlib.sha256).hexdigest()
    if not hmac.compare_digest(computed.encode("ascii"), received.encode("ascii", "replace")):
        raise AuthError("Invalid token.", "mismatch")
