"""
Admin session store

Holds the hashed admin password and the live bearer tokens issued after a
successful login. Tokens expire after a fixed TTL; expired tokens are swept
on every access instead of by background timers.
"""

import secrets
import time
from typing import Callable, Dict, Optional

from passlib.context import CryptContext

from pokernight.utils.logger import setup_logger

logger = setup_logger(__name__)

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


class AdminSessionStore:
    """Password check plus bearer token lifecycle for admin endpoints."""

    def __init__(self, password_hash: str, ttl_seconds: float, clock: Callable[[], float] = time.monotonic):
        self.password_hash = password_hash
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._tokens: Dict[str, float] = {}  # token -> expiry

    @classmethod
    def from_password(cls, password: str, ttl_seconds: float, **kwargs) -> 'AdminSessionStore':
        return cls(pwd_context.hash(password), ttl_seconds, **kwargs)

    def _sweep(self) -> None:
        now = self._clock()
        expired = [token for token, expires_at in self._tokens.items() if expires_at <= now]
        for token in expired:
            del self._tokens[token]
        if expired:
            logger.debug(f"Swept {len(expired)} expired admin tokens")

    def login(self, password: str) -> Optional[str]:
        """Issue a token if the password matches, else None"""
        if not password or not pwd_context.verify(password, self.password_hash):
            logger.warning("Rejected admin login attempt")
            return None
        return self.issue()

    def issue(self) -> str:
        self._sweep()
        token = secrets.token_hex(32)
        self._tokens[token] = self._clock() + self.ttl_seconds
        logger.info("Issued admin token")
        return token

    def validate(self, token: Optional[str]) -> bool:
        self._sweep()
        return bool(token) and token in self._tokens

    def revoke(self, token: str) -> None:
        self._sweep()
        if self._tokens.pop(token, None) is not None:
            logger.info("Revoked admin token")

    @property
    def active_token_count(self) -> int:
        self._sweep()
        return len(self._tokens)
