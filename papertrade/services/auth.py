"""Authentication utilities: API tokens and webhook secrets."""

import uuid
from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt

from papertrade.config import settings


def create_access_token(subject: str) -> str:
    expire = datetime.now(timezone.utc) + timedelta(minutes=settings.jwt_expire_minutes)
    payload = {"sub": subject, "exp": expire}
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> str | None:
    """Decode JWT and return the subject (account id). Returns None on failure."""
    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
        return payload.get("sub")
    except JWTError:
        return None


def generate_webhook_secret() -> str:
    return str(uuid.uuid4())


def webhook_url(secret: str) -> str:
    return f"{settings.public_base_url.rstrip('/')}/api/webhook/tradingview?secret={secret}"
