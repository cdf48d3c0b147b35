"""Validation of Ed25519 request signatures on inbound interactions."""

from __future__ import annotations

from nacl.exceptions import BadSignatureError
from nacl.signing import VerifyKey


def is_valid_discord_request(
    *, public_key: str, timestamp: str, body: bytes | str, signature: str
) -> bool:
    """Return True when *signature* signs ``timestamp + body`` for *public_key*."""

    if not timestamp or not signature:
        return False

    raw_body = body.encode("utf-8") if isinstance(body, str) else body

    try:
        verify_key = VerifyKey(bytes.fromhex(public_key))
        verify_key.verify(timestamp.encode("utf-8") + raw_body, bytes.fromhex(signature))
    except (BadSignatureError, ValueError, TypeError):
        return False
    return True
