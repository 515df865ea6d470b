"""Error taxonomy for the realtime timer core."""
from flask_socketio import ConnectionRefusedError


class TrackerError(Exception):
    """Base class for domain errors raised by the tracker services."""


class Unauthenticated(TrackerError, ConnectionRefusedError):
    """No valid session token at a realtime connection attempt.

    Flask-SocketIO refuses the handshake when a connect handler raises
    ``ConnectionRefusedError``; the client has to log in again.
    """


class TimerNotFound(TrackerError):
    def __init__(self, timer_id):
        super().__init__(f"no active timer with id {timer_id}")
        self.timer_id = timer_id


class MalformedMessage(TrackerError):
    """Inbound payload could not be parsed into a protocol message."""
