"""Timer domain services: storage, live connections and synchronization.

Socket handlers only translate transport events into ``SyncEngine``
calls; everything that decides what a client sees lives here.
"""

from .heartbeat import HeartbeatScheduler
from .registry import Channel, ConnectionRegistry
from .store import TimerStore
from .sync import SyncEngine

__all__ = ['Channel', 'ConnectionRegistry', 'HeartbeatScheduler', 'SyncEngine', 'TimerStore']
