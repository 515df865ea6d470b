from tracker.models import Session
from tracker.services.auth import SessionResolver, find_user_by_username


class SecondsClock:
    def __init__(self, now=1_000.0):
        self.now = now

    def __call__(self):
        return self.now


def test_create_and_resolve(alice):
    resolver = SessionResolver()
    token = resolver.create_session(alice.id)
    assert isinstance(token, str) and len(token) >= 20
    assert resolver.resolve_by_token(token).id == alice.id


def test_unknown_or_missing_token_is_absent(app_ctx):
    resolver = SessionResolver()
    assert resolver.resolve_by_token(None) is None
    assert resolver.resolve_by_token('') is None
    assert resolver.resolve_by_token('no-such-token') is None


def test_tokens_are_unique_and_many_per_user(alice):
    resolver = SessionResolver()
    tokens = {resolver.create_session(alice.id) for _ in range(5)}
    assert len(tokens) == 5
    assert Session.query.filter_by(user_id=alice.id).count() == 5


def test_delete_is_idempotent(alice):
    resolver = SessionResolver()
    token = resolver.create_session(alice.id)
    other = resolver.create_session(alice.id)
    resolver.delete_session(token)
    resolver.delete_session(token)
    resolver.delete_session(None)
    assert resolver.resolve_by_token(token) is None
    assert resolver.resolve_by_token(other).id == alice.id


def test_no_expiry_by_default(alice):
    clock = SecondsClock()
    resolver = SessionResolver(clock=clock)
    token = resolver.create_session(alice.id)
    clock.now += 10 * 365 * 24 * 3600
    assert resolver.resolve_by_token(token).id == alice.id
    assert resolver.purge_expired() == 0


def test_ttl_expires_and_purges(alice):
    clock = SecondsClock()
    resolver = SessionResolver(ttl_sec=60, clock=clock)
    old = resolver.create_session(alice.id)
    clock.now += 30
    fresh = resolver.create_session(alice.id)
    clock.now += 45
    assert resolver.resolve_by_token(old) is None
    assert resolver.resolve_by_token(fresh).id == alice.id
    assert resolver.purge_expired() == 1
    assert Session.query.count() == 1


def test_find_user_by_username(alice):
    assert find_user_by_username('alice').id == alice.id
    assert find_user_by_username('nobody') is None
    assert find_user_by_username('') is None
