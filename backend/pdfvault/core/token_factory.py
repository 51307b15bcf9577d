"""Pure functions for creating and decoding signed JWTs.

Two token types share one format: short-lived ``access`` tokens and
long-lived ``refresh`` tokens. Each type is signed with its own secret and
carries a ``typ`` claim, so neither can stand in for the other.
"""

import hashlib
import hmac
import base64
import json
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

ACCESS = "access"
REFRESH = "refresh"
ISSUER = "pdf-vault"


@dataclass(frozen=True)
class TokenPayload:
    """Decoded JWT payload. Immutable."""
    sub: str
    typ: str
    exp: datetime


def create_token(
    subject: str,
    secret: str,
    token_type: str = ACCESS,
    expires_seconds: int = 3600,
    algorithm: str = "HS256",
) -> str:
    """Create a signed JWT.

    Args:
        subject: The user id.
        secret: HMAC signing key for this token type.
        token_type: ``"access"`` or ``"refresh"``.
        expires_seconds: Lifetime; negative values produce an expired token.
        algorithm: Only HS256 supported.
    """
    if algorithm != "HS256":
        raise ValueError(f"Unsupported algorithm: {algorithm}")
    if token_type not in (ACCESS, REFRESH):
        raise ValueError(f"Unsupported token type: {token_type}")

    now = time.time()
    payload = {
        "sub": subject,
        "typ": token_type,
        "iat": int(now),
        "exp": int(now + expires_seconds),
        "iss": ISSUER,
    }

    header = {"alg": "HS256", "typ": "JWT"}
    segments = [
        _b64encode(json.dumps(header).encode()),
        _b64encode(json.dumps(payload).encode()),
    ]
    signing_input = b".".join(segments)
    signature = hmac.new(secret.encode(), signing_input, hashlib.sha256).digest()
    segments.append(_b64encode(signature))
    return b".".join(segments).decode()


def decode_token(
    token: str,
    secret: str,
    expected_type: str = ACCESS,
    algorithm: str = "HS256",
) -> Optional[TokenPayload]:
    """Decode and validate a JWT.

    Returns ``None`` on any failure (bad signature, expired, malformed, wrong
    token type) rather than raising; callers decide what absence means.
    """
    try:
        parts = token.encode().split(b".")
        if len(parts) != 3:
            return None

        signing_input = parts[0] + b"." + parts[1]
        expected_sig = hmac.new(secret.encode(), signing_input, hashlib.sha256).digest()
        actual_sig = _b64decode(parts[2])

        if not hmac.compare_digest(expected_sig, actual_sig):
            return None

        payload = json.loads(_b64decode(parts[1]))

        if payload.get("typ") != expected_type:
            return None

        exp = payload.get("exp", 0)
        if time.time() > exp:
            return None

        sub = payload.get("sub", "")
        if not sub:
            return None

        return TokenPayload(
            sub=sub,
            typ=payload["typ"],
            exp=datetime.fromtimestamp(exp, tz=timezone.utc),
        )
    except (json.JSONDecodeError, KeyError, ValueError, IndexError, TypeError):
        return None


# --- base64url helpers (no padding, URL-safe) ---

def _b64encode(data: bytes) -> bytes:
    return base64.urlsafe_b64encode(data).rstrip(b"=")


def _b64decode(data: bytes) -> bytes:
    padding = 4 - len(data) % 4
    if padding != 4:
        data += b"=" * padding
    return base64.urlsafe_b64decode(data)
