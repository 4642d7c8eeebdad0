"""
Security utilities: signed request tokens and Fernet encryption.

Two concerns are handled here:

1. REQUEST SIGNING (JWT)
   - Every request carries "Authorization: Bearer <token>"
   - The token is a short-lived JWT signed with SIGNING_SECRET (HS256)
   - Claims: "sub" (consumer key), "exp" (expiry) and "bdh", the base64
     SHA-256 of the exact request body bytes, so a token cannot be replayed
     with a different payload

2. FERNET ENCRYPTION (AES-128-CBC + HMAC-SHA256)
   - Used by the sandbox to keep enrolled FPANs encrypted at rest
   - A SHA-256 fingerprint of the FPAN is stored alongside for duplicate
     detection, since Fernet ciphertexts of the same value differ
"""

import base64
import hashlib
from datetime import datetime, timedelta, timezone

from cryptography.fernet import Fernet
from jose import JWTError, jwt

from carbon_calculator.config import settings


# ---------------------------------------------------------------------------
# 1. Request signing
# ---------------------------------------------------------------------------


class RequestSignatureError(Exception):
    """Raised when a bearer token is invalid or does not match the request body."""


def body_hash(body: bytes) -> str:
    """Base64-encoded SHA-256 digest of a request body."""
    return base64.b64encode(hashlib.sha256(body).digest()).decode()


def create_request_token(
    body: bytes,
    consumer_key: str | None = None,
    signing_secret: str | None = None,
    expires_delta: timedelta | None = None,
) -> str:
    """
    Create a signed JWT for one request.

    Args:
        body: The exact bytes that will be sent as the request body (b"" for none).
        consumer_key: Defaults to settings.CONSUMER_KEY.
        signing_secret: Defaults to settings.SIGNING_SECRET.
        expires_delta: Defaults to REQUEST_TOKEN_EXPIRE_SECONDS.
    """
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta or timedelta(seconds=settings.REQUEST_TOKEN_EXPIRE_SECONDS))
    claims = {
        "sub": consumer_key or settings.CONSUMER_KEY,
        "iat": now,
        "exp": expire,
        "bdh": body_hash(body),
    }
    return jwt.encode(
        claims,
        signing_secret or settings.SIGNING_SECRET,
        algorithm=settings.ALGORITHM,
    )


def verify_request_token(token: str, body: bytes) -> dict:
    """
    Verify a request token against the received body.

    Returns:
        The decoded claims.

    Raises:
        RequestSignatureError: If the token is expired, tampered with, issued
            for another consumer, or signed over a different body.
    """
    try:
        claims = jwt.decode(token, settings.SIGNING_SECRET, algorithms=[settings.ALGORITHM])
    except JWTError as exc:
        raise RequestSignatureError(f"Invalid request token: {exc}") from exc

    if claims.get("sub") != settings.CONSUMER_KEY:
        raise RequestSignatureError("Unknown consumer key")
    if claims.get("bdh") != body_hash(body):
        raise RequestSignatureError("Request body does not match the signed body hash")
    return claims


# ---------------------------------------------------------------------------
# 2. Fernet encryption (sandbox card storage)
# ---------------------------------------------------------------------------

_fernet = Fernet(settings.SANDBOX_CARD_ENCRYPTION_KEY or Fernet.generate_key())


def encrypt_value(plaintext: str) -> bytes:
    """Encrypt a string value; the result is stored in a LargeBinary column."""
    return _fernet.encrypt(plaintext.encode())


def decrypt_value(ciphertext: bytes) -> str:
    """
    Decrypt a Fernet-encrypted value back to plaintext.

    Raises:
        cryptography.fernet.InvalidToken: If the data is corrupted or
            the encryption key doesn't match.
    """
    return _fernet.decrypt(ciphertext).decode()


def fingerprint(value: str) -> str:
    """Stable hex SHA-256 of a value, for lookups without decrypting."""
    return hashlib.sha256(value.encode()).hexdigest()
