import threading
from typing import Callable, Optional

from sqlalchemy.exc import SQLAlchemyError

from tracker import db


class Heartbeat:
    """Periodic tick bound to the lifetime of one channel."""

    def __init__(self, app, channel, tick: Callable, interval: float, sleep: Callable):
        self.app = app
        self.channel = channel
        self.tick = tick
        self.interval = interval
        self._sleep = sleep
        self._stopped = threading.Event()

    @property
    def cancelled(self) -> bool:
        return self._stopped.is_set()

    def cancel(self) -> None:
        self._stopped.set()

    def run(self) -> None:
        while not self._stopped.is_set():
            self._sleep(self.interval)
            # Checked after waking so a cancelled heartbeat never ticks again
            if self._stopped.is_set():
                return
            with self.app.app_context():
                try:
                    self.tick(self.channel)
                except SQLAlchemyError as exc:
                    db.session.rollback()
                    self.app.logger.warning(f"[timer-heartbeat] sid={self.channel.sid} user={self.channel.user_id} tick failed: {exc}")


class HeartbeatScheduler:
    """Starts and cancels the per-connection heartbeats.

    ``spawn`` and ``sleep`` default to Flask-SocketIO's background task
    helpers so ticks cooperate with whatever async mode the server runs.
    """

    def __init__(self, app, interval: float = 1.0, spawn: Optional[Callable] = None,
                 sleep: Optional[Callable] = None, enabled: bool = True):
        from tracker import socketio
        self.app = app
        self.interval = interval
        self.enabled = enabled
        self._spawn = spawn or socketio.start_background_task
        self._sleep = sleep or socketio.sleep

    def start(self, channel, tick: Callable) -> Optional[Heartbeat]:
        if not self.enabled:
            return None
        self.cancel(channel)
        heartbeat = Heartbeat(self.app, channel, tick, self.interval, self._sleep)
        channel.heartbeat = heartbeat
        self._spawn(heartbeat.run)
        self.app.logger.info(f"[timer-heartbeat] start sid={channel.sid} user={channel.user_id} every={self.interval}s")
        return heartbeat

    def cancel(self, channel) -> None:
        heartbeat = channel.heartbeat
        if heartbeat is None:
            return
        heartbeat.cancel()
        channel.heartbeat = None
        self.app.logger.info(f"[timer-heartbeat] cancel sid={channel.sid} user={channel.user_id}")
