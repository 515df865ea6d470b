from flask import current_app, request
from flask_login import current_user
from sqlalchemy.exc import SQLAlchemyError

from tracker import socketio, db
from tracker.errors import Unauthenticated
from tracker.services.timers import Channel

NAMESPACE = '/ws'


def _engine():
    return current_app.extensions['timer_sync']


def handle_connect(auth=None):
    # Flask-Login resolves the session cookie sent with the handshake
    if not current_user.is_authenticated:
        current_app.logger.info(f"[ws-refuse] sid={request.sid} unauthenticated")
        raise Unauthenticated('unauthorized')
    channel = Channel(socketio, request.sid, current_user.id, namespace=NAMESPACE)
    _engine().connect(current_user, channel)


def handle_disconnect(reason=None):
    _engine().disconnect(request.sid)


def handle_message(data):
    channel = _engine().registry.channel_for_sid(request.sid)
    if channel is None:
        return
    _engine().handle_message(channel, data)


def handle_error(exc):
    """A failed command aborts without an acknowledgment; the socket stays open."""
    if isinstance(exc, SQLAlchemyError):
        db.session.rollback()
        current_app.logger.error(f"[ws-storage-failure] sid={request.sid} {exc}")
        return
    raise exc


def register_socketio_handlers() -> None:
    """Register Socket.IO event handlers on namespace '/ws'."""
    socketio.on_event('connect', handle_connect, namespace=NAMESPACE)
    socketio.on_event('disconnect', handle_disconnect, namespace=NAMESPACE)
    socketio.on_event('message', handle_message, namespace=NAMESPACE)
    socketio.on_error(NAMESPACE)(handle_error)
