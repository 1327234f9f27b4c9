"""
Cookie sessions.

A session token is the encrypted text ``"<user id>;<nonce>;<expiry epoch>"``.
Verifying one needs no table of sessions: decrypt, check the expiry, load
the user. Verified tokens are kept in a small in-process cache, bounded
in size and evicted at expiry, so repeat requests skip both steps.

Logging out only drops the token from the cache. A copy of the cookie
taken before logout still decrypts and authenticates until it expires.
"""
import logging
import threading
import time
from collections import OrderedDict
from typing import Callable, Optional, Tuple

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from app.config import settings
from app.crypto import DecryptionError, decrypt, encrypt, random_token
from app.database import get_db
from app.repositories import users
from app.schemas import User

logger = logging.getLogger(__name__)

Clock = Callable[[], float]


class TokenCache:
    """
    Thread-safe LRU map of token -> (user, expiry) with a fixed capacity.

    Each entry expires at its own token's expiry rather than after one
    cache-wide TTL.

    Usage:
        cache = TokenCache(capacity=1024)
        cache.set(token, user, expires_at)
        user = cache.get(token)
    """

    def __init__(self, capacity: int, clock: Clock = time.time):
        self.capacity = capacity
        self.clock = clock
        self._entries: "OrderedDict[str, Tuple[User, float]]" = OrderedDict()
        self._lock = threading.RLock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, token: str) -> bool:
        with self._lock:
            return token in self._entries

    def get(self, token: str, default: Optional[User] = None) -> Optional[User]:
        """Return the cached user, or *default* if missing or expired."""
        with self._lock:
            entry = self._entries.get(token)
            if entry is None:
                return default
            user, expires_at = entry
            if self.clock() > expires_at:
                del self._entries[token]
                return default
            self._entries.move_to_end(token)
            return user

    def set(self, token: str, user: User, expires_at: float) -> None:
        if self.capacity <= 0:
            return
        with self._lock:
            self._entries[token] = (user, expires_at)
            self._entries.move_to_end(token)
            self._evict()

    def delete(self, token: str) -> bool:
        """Drop *token*. Returns True if it was cached."""
        with self._lock:
            return self._entries.pop(token, None) is not None

    def _evict(self) -> None:
        now = self.clock()
        for token in [t for t, (_, exp) in self._entries.items() if now > exp]:
            del self._entries[token]
        while len(self._entries) > self.capacity:
            self._entries.popitem(last=False)


class SessionManager:
    def __init__(
        self,
        ttl_seconds: int = settings.SESSION_TTL_SECONDS,
        cache_size: int = settings.SESSION_CACHE_SIZE,
        key: Optional[bytes] = None,
        clock: Clock = time.time,
    ):
        self.ttl_seconds = ttl_seconds
        self.key = key
        self.clock = clock
        self.cache = TokenCache(cache_size, clock)

    def issue(self, user: User) -> Tuple[str, float]:
        """Create a token for *user*; returns ``(token, expiry epoch seconds)``."""
        expires_at = self.clock() + self.ttl_seconds
        token = encrypt(f"{user.id};{random_token(32)};{expires_at}", self.key)
        self.cache.set(token, user, expires_at)
        return token, expires_at

    def decode(self, token: str) -> Optional[Tuple[int, float]]:
        """Return ``(user id, expiry)`` for a live token, else None. Never raises."""
        try:
            user_id, _nonce, expiry = decrypt(token, self.key).split(";")
            user_id, expires_at = int(user_id), float(expiry)
        except (DecryptionError, ValueError):
            return None
        if self.clock() > expires_at:
            return None
        return user_id, expires_at

    def verify(self, db: Session, token: str) -> Optional[User]:
        user = self.cache.get(token)
        if user is not None:
            return user

        decoded = self.decode(token)
        if decoded is None:
            return None
        user_id, expires_at = decoded

        user = users.get_user_by_id(db, user_id)
        if user is None:
            return None
        self.cache.set(token, user, expires_at)
        return user

    def revoke(self, token: str) -> None:
        self.cache.delete(token)


session_manager = SessionManager()


def get_session_manager() -> SessionManager:
    return session_manager


def get_session_token(request: Request) -> str:
    token = request.cookies.get(settings.SESSION_COOKIE_NAME)
    if not token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
    return token


def get_current_user(
    token: str = Depends(get_session_token),
    db: Session = Depends(get_db),
    sessions: SessionManager = Depends(get_session_manager),
) -> User:
    user = sessions.verify(db, token)
    if user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
    return user
