from flask import current_app

from tracker.errors import MalformedMessage, TimerNotFound
from . import protocol
from .protocol import CreateTimer, StopTimer


class SyncEngine:
    """Keeps each connection's view of a user's timers in step with storage.

    The engine holds no timer state of its own: every push is computed
    from the store at the moment it is sent, after any mutation that
    preceded it in the same step.
    """

    def __init__(self, store, registry, heartbeat, close_superseded: bool = False):
        self.store = store
        self.registry = registry
        self.heartbeat = heartbeat
        self.close_superseded = close_superseded

    # ---- connection lifecycle ----

    def connect(self, user, channel) -> None:
        previous = self.registry.register(user.id, channel)
        current_app.logger.info(f"[ws-connect] user={user.id} sid={channel.sid} superseded={previous.sid if previous else None}")
        if previous is not None and self.close_superseded:
            self.heartbeat.cancel(previous)
            previous.close()
        self.push_snapshot(channel)
        self.heartbeat.start(channel, self.push_active)

    def disconnect(self, sid: str) -> None:
        channel = self.registry.channel_for_sid(sid)
        if channel is None:
            return
        self.heartbeat.cancel(channel)
        self.registry.unregister(channel.user_id, channel)
        current_app.logger.info(f"[ws-disconnect] user={channel.user_id} sid={sid}")

    # ---- inbound commands ----

    def handle_message(self, channel, raw) -> None:
        try:
            message = protocol.parse_message(raw)
        except MalformedMessage as exc:
            current_app.logger.debug(f"[ws-drop] sid={channel.sid} malformed: {exc}")
            return
        if isinstance(message, CreateTimer):
            self.create_timer(channel, message.description)
        elif isinstance(message, StopTimer):
            self.stop_timer(channel, message.timer_id)
        else:
            current_app.logger.debug(f"[ws-drop] sid={channel.sid} unknown message type")

    def create_timer(self, channel, description: str = '') -> None:
        with channel.lock:
            timer = self.store.start_timer(channel.user_id, description)
            current_app.logger.info(f"[timer-create] user={channel.user_id} timer={timer.id}")
            channel.send(protocol.timer_created(timer.id, timer.description))
            self.push_snapshot(channel)

    def stop_timer(self, channel, timer_id: int) -> None:
        with channel.lock:
            # Scoped by owner: another user's timer id behaves like a missing one
            timer = self.store.get_timer('active_timers', timer_id, user_id=channel.user_id)
            if timer is None:
                current_app.logger.info(f"[timer-stop-skip] user={channel.user_id} timer={timer_id} not active")
                return
            try:
                completed = self.store.stop_timer(timer_id, user_id=channel.user_id, timer=timer)
            except TimerNotFound:
                current_app.logger.info(f"[timer-stop-skip] user={channel.user_id} timer={timer_id} lost race")
                return
            current_app.logger.info(f"[timer-stop] user={channel.user_id} timer={timer_id} duration={completed.duration}ms")
            channel.send(protocol.timer_stopped(timer_id))
            self.push_snapshot(channel)

    # ---- outbound pushes ----

    def push_snapshot(self, channel) -> None:
        with channel.lock:
            active = self.store.refresh_active(channel.user_id)
            old = [t.to_dict() for t in self.store.list_completed(channel.user_id)]
            channel.send(protocol.all_timers(active, old))

    def push_active(self, channel) -> None:
        with channel.lock:
            channel.send(protocol.active_timers(self.store.refresh_active(channel.user_id)))
