"""Wire protocol of the realtime timer channel.

Every frame is a JSON object tagged by ``type``. Inbound frames:

    {"type": "createTimer", "description": "write spec"}
    {"type": "addOldTimer", "id": 7}

Outbound frames are ``all_timers``, ``active_timers``, ``add_new_timers``
and ``add_old_timers``; see the builders at the bottom of this module.
"""
import json
from dataclasses import dataclass
from typing import Any, List, Optional, Union

from tracker.errors import MalformedMessage

CREATE_TIMER = 'createTimer'
STOP_TIMER = 'addOldTimer'

ALL_TIMERS = 'all_timers'
ACTIVE_TIMERS = 'active_timers'
TIMER_CREATED = 'add_new_timers'
TIMER_STOPPED = 'add_old_timers'


@dataclass(frozen=True)
class CreateTimer:
    description: str = ''


@dataclass(frozen=True)
class StopTimer:
    timer_id: int


InboundMessage = Union[CreateTimer, StopTimer]


def _decode(raw: Any) -> dict:
    if isinstance(raw, (bytes, bytearray)):
        try:
            raw = raw.decode('utf-8')
        except UnicodeDecodeError as exc:
            raise MalformedMessage(str(exc)) from exc
    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except ValueError as exc:
            raise MalformedMessage(str(exc)) from exc
    if not isinstance(raw, dict):
        raise MalformedMessage(f"expected a JSON object, got {type(raw).__name__}")
    return raw


def _timer_id(value: Any) -> int:
    # bool is an int subclass but never a valid id
    if isinstance(value, bool):
        raise MalformedMessage('timer id must be an integer')
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    raise MalformedMessage('timer id must be an integer')


def parse_message(raw: Any) -> Optional[InboundMessage]:
    """Parse one inbound frame.

    Raises ``MalformedMessage`` when the payload is not a well-formed
    message; returns None for a well-formed object with an unknown tag.
    """
    data = _decode(raw)
    kind = data.get('type')

    if kind == CREATE_TIMER:
        description = data.get('description')
        if description is None:
            description = ''
        if not isinstance(description, str):
            raise MalformedMessage('description must be a string')
        return CreateTimer(description=description)

    if kind == STOP_TIMER:
        if 'id' not in data:
            raise MalformedMessage('id is required')
        return StopTimer(timer_id=_timer_id(data['id']))

    return None


def all_timers(active: List[dict], old: List[dict]) -> dict:
    return {'type': ALL_TIMERS, 'activeTimers': active, 'oldTimers': old}


def active_timers(active: List[dict]) -> dict:
    return {'type': ACTIVE_TIMERS, 'activeTimers': active}


def timer_created(timer_id: int, description: str) -> dict:
    return {'type': TIMER_CREATED, 'timerId': timer_id, 'description': description}


def timer_stopped(timer_id: int) -> dict:
    return {'type': TIMER_STOPPED, 'timerId': timer_id}
