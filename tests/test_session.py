"""
Session token lifecycle: issue, verify, expiry, tampering, cache bounds.
"""
import base64
import os
import threading

from app.crypto import decrypt
from app.models import UserModel
from app.session import SessionManager, TokenCache


class FakeClock:
    def __init__(self, now=1_700_000_000.0):
        self.now = now

    def __call__(self):
        return self.now


def _tamper(token: str) -> str:
    raw = bytearray(base64.urlsafe_b64decode(token + "=" * (-len(token) % 4)))
    raw[len(raw) // 2] ^= 0x80
    return base64.urlsafe_b64encode(bytes(raw)).rstrip(b"=").decode("ascii")


class TestSessionManager:
    def test_issue_then_verify(self, db, user):
        clock = FakeClock()
        sessions = SessionManager(ttl_seconds=60, cache_size=8, clock=clock)
        token, expires_at = sessions.issue(user)

        assert expires_at == clock.now + 60
        assert sessions.verify(db, token).id == user.id

    def test_token_payload(self, user):
        sessions = SessionManager(ttl_seconds=60, cache_size=8, clock=FakeClock())
        token, expires_at = sessions.issue(user)

        user_id, nonce, expiry = decrypt(token).split(";")
        assert int(user_id) == user.id
        assert nonce
        assert float(expiry) == expires_at

    def test_verify_without_cache(self, db, user):
        clock = FakeClock()
        issuer = SessionManager(ttl_seconds=60, cache_size=8, clock=clock)
        token, _ = issuer.issue(user)

        # A second process with the same key, empty cache
        verifier = SessionManager(ttl_seconds=60, cache_size=8, clock=clock)
        assert verifier.verify(db, token).id == user.id
        assert token in verifier.cache

    def test_expired_token_rejected(self, db, user):
        clock = FakeClock()
        sessions = SessionManager(ttl_seconds=60, cache_size=8, clock=clock)
        token, _ = sessions.issue(user)

        clock.now += 61
        assert sessions.verify(db, token) is None
        assert sessions.decode(token) is None

    def test_expired_token_rejected_by_fresh_process(self, db, user):
        clock = FakeClock()
        token, _ = SessionManager(ttl_seconds=60, cache_size=8, clock=clock).issue(user)

        clock.now += 61
        assert SessionManager(ttl_seconds=60, cache_size=8, clock=clock).verify(db, token) is None

    def test_tampered_token_rejected(self, db, user):
        sessions = SessionManager(ttl_seconds=60, cache_size=8, clock=FakeClock())
        token, _ = sessions.issue(user)

        assert sessions.verify(db, _tamper(token)) is None

    def test_other_key_rejected(self, db, user):
        clock = FakeClock()
        token, _ = SessionManager(ttl_seconds=60, cache_size=8, clock=clock).issue(user)
        stranger = SessionManager(ttl_seconds=60, cache_size=8, key=os.urandom(32), clock=clock)

        assert stranger.verify(db, token) is None

    def test_garbage_token_rejected(self, db):
        sessions = SessionManager(ttl_seconds=60, cache_size=8)
        assert sessions.verify(db, "not-a-token") is None

    def test_deleted_user_rejected(self, db, user):
        clock = FakeClock()
        token, _ = SessionManager(ttl_seconds=60, cache_size=8, clock=clock).issue(user)
        db.query(UserModel).filter(UserModel.id == user.id).delete()
        db.commit()

        assert SessionManager(ttl_seconds=60, cache_size=8, clock=clock).verify(db, token) is None

    def test_revoke_only_drops_cache_entry(self, db, user):
        sessions = SessionManager(ttl_seconds=60, cache_size=8, clock=FakeClock())
        token, _ = sessions.issue(user)

        sessions.revoke(token)
        assert token not in sessions.cache
        # Still decrypts, so a copied cookie keeps working until expiry
        assert sessions.verify(db, token).id == user.id


class TestTokenCache:
    def test_capacity_evicts_least_recent(self, user):
        cache = TokenCache(capacity=2, clock=FakeClock())
        cache.set("a", user, 2e9)
        cache.set("b", user, 2e9)
        cache.get("a")
        cache.set("c", user, 2e9)

        assert "a" in cache and "c" in cache
        assert "b" not in cache
        assert len(cache) == 2

    def test_expired_entries_dropped(self, user):
        clock = FakeClock()
        cache = TokenCache(capacity=10, clock=clock)
        cache.set("a", user, clock.now + 5)

        clock.now += 10
        assert cache.get("a") is None
        assert "a" not in cache

    def test_set_evicts_expired(self, user):
        clock = FakeClock()
        cache = TokenCache(capacity=10, clock=clock)
        cache.set("old", user, clock.now + 5)
        clock.now += 10
        cache.set("new", user, clock.now + 5)

        assert len(cache) == 1

    def test_zero_capacity_caches_nothing(self, user):
        cache = TokenCache(capacity=0)
        cache.set("a", user, 2e9)
        assert len(cache) == 0

    def test_delete_reports_presence(self, user):
        cache = TokenCache(capacity=10, clock=FakeClock())
        cache.set("a", user, 2e9)

        assert cache.delete("a") is True
        assert cache.delete("a") is False
        assert cache.get("a", default="missing") == "missing"

    def test_concurrent_sets_respect_capacity(self, user):
        cache = TokenCache(capacity=50, clock=FakeClock())

        def fill(prefix):
            for i in range(200):
                cache.set(f"{prefix}-{i}", user, 2e9)
                cache.get(f"{prefix}-{i // 2}")

        threads = [threading.Thread(target=fill, args=(n,)) for n in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(cache) == 50
