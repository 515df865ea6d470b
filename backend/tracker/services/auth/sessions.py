import secrets
import time
from typing import Optional

from tracker import db
from tracker.models import Session, User


def find_user_by_username(username: str) -> Optional[User]:
    if not username:
        return None
    return User.query.filter_by(username=username).first()


def create_user(username: str, password: str) -> User:
    user = User(username=username)
    user.set_password(password)
    db.session.add(user)
    db.session.commit()
    return user


class SessionResolver:
    """Token -> user lookup backed by the ``sessions`` table.

    ``ttl_sec`` of 0 means sessions never expire. Unknown, missing and
    expired tokens all resolve to None; being unauthenticated is a normal
    outcome, not an error.
    """

    def __init__(self, ttl_sec: int = 0, clock=time.time):
        self.ttl_sec = ttl_sec
        self._clock = clock

    def resolve_by_token(self, token: Optional[str]) -> Optional[User]:
        if not token:
            return None
        session = db.session.get(Session, token)
        if session is None or self._expired(session):
            return None
        return db.session.get(User, session.user_id)

    def create_session(self, user_id: int) -> str:
        token = secrets.token_urlsafe(24)
        db.session.add(Session(token=token, user_id=user_id, created_at=self._clock()))
        db.session.commit()
        return token

    def delete_session(self, token: Optional[str]) -> None:
        if not token:
            return
        Session.query.filter_by(token=token).delete()
        db.session.commit()

    def purge_expired(self) -> int:
        """Delete sessions older than the TTL; returns how many were removed."""
        if not self.ttl_sec:
            return 0
        cutoff = self._clock() - self.ttl_sec
        removed = Session.query.filter(Session.created_at < cutoff).delete()
        db.session.commit()
        return removed

    def _expired(self, session: Session) -> bool:
        return bool(self.ttl_sec) and session.created_at < self._clock() - self.ttl_sec
