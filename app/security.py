"""
Shared PIN gate.
- One process-wide PIN, no user identity
- Hashed PIN verified via passlib when PIN_CODE_HASH is set
- Plain PIN compared in constant time otherwise
"""
from fastapi import Header
from passlib.context import CryptContext
from typing import Optional
import hmac
import logging

from app.config import settings
from app.exceptions import UnauthorizedError

logger = logging.getLogger(__name__)

pin_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def hash_pin(pin: str) -> str:
    """Produce a value suitable for PIN_CODE_HASH"""
    return pin_context.hash(pin)


def verify_pin(pin: str) -> bool:
    if settings.PIN_CODE_HASH:
        return pin_context.verify(pin, settings.PIN_CODE_HASH)
    return hmac.compare_digest(pin.encode("utf-8"), settings.PIN_CODE.encode("utf-8"))


def check_pin(pin: str) -> None:
    if not verify_pin(pin):
        logger.warning("PIN verification failed")
        raise UnauthorizedError()


async def require_pin(x_pin: Optional[str] = Header(None)) -> None:
    """
    Router dependency. Enforced only when REQUIRE_PIN_HEADER is on;
    clients then send the PIN in an X-PIN header.
    """
    if not settings.REQUIRE_PIN_HEADER:
        return
    if not x_pin:
        raise UnauthorizedError()
    check_pin(x_pin)
