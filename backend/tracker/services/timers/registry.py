import threading
from typing import Dict, Optional

DEFAULT_NAMESPACE = '/ws'
MESSAGE_EVENT = 'message'


class Channel:
    """One live Socket.IO connection of an authenticated user.

    ``lock`` is held while a group of frames is sent (an acknowledgment
    and its snapshot, or one heartbeat push) so groups never interleave.
    """

    def __init__(self, socketio, sid: str, user_id: int, namespace: str = DEFAULT_NAMESPACE):
        self.socketio = socketio
        self.sid = sid
        self.user_id = user_id
        self.namespace = namespace
        self.lock = threading.RLock()
        self.heartbeat = None

    def send(self, payload: dict) -> None:
        self.socketio.emit(MESSAGE_EVENT, payload, to=self.sid, namespace=self.namespace)

    def close(self) -> None:
        self.socketio.server.disconnect(self.sid, namespace=self.namespace)

    def __repr__(self):
        return f"<Channel sid={self.sid} user={self.user_id}>"


class ConnectionRegistry:
    """In-memory map of user id -> live channel, at most one per user.

    A new registration replaces the previous entry without closing it;
    superseded channels stay reachable by sid until they disconnect.
    Mutated only from the server's event handlers, never persisted.
    """

    def __init__(self):
        self._by_user: Dict[int, Channel] = {}
        self._by_sid: Dict[str, Channel] = {}

    def register(self, user_id: int, channel: Channel) -> Optional[Channel]:
        previous = self._by_user.get(user_id)
        self._by_user[user_id] = channel
        self._by_sid[channel.sid] = channel
        if previous is channel:
            return None
        return previous

    def unregister(self, user_id: int, channel: Channel) -> None:
        if self._by_sid.get(channel.sid) is channel:
            del self._by_sid[channel.sid]
        # A stale unregister must not clobber a newer registration
        if self._by_user.get(user_id) is channel:
            del self._by_user[user_id]

    def lookup(self, user_id: int) -> Optional[Channel]:
        return self._by_user.get(user_id)

    def channel_for_sid(self, sid: str) -> Optional[Channel]:
        return self._by_sid.get(sid)

    def __len__(self):
        return len(self._by_user)
