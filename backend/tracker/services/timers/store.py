import time
from typing import List, Optional, Union

from flask import current_app
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from tracker import db
from tracker.errors import TimerNotFound
from tracker.models import ActiveTimer, OldTimer

TABLES = {
    'active_timers': ActiveTimer,
    'old_timers': OldTimer,
}


def now_ms() -> int:
    return int(time.time() * 1000)


class TimerStore:
    """CRUD over the active and completed timer tables.

    All timestamps are epoch milliseconds taken from ``clock``.
    """

    def __init__(self, clock=now_ms):
        self._clock = clock

    def start_timer(self, user_id: int, description: str = '') -> ActiveTimer:
        timer = ActiveTimer(
            user_id=user_id,
            start=self._clock(),
            progress=0,
            description=description or '',
        )
        db.session.add(timer)
        db.session.commit()
        return timer

    def get_timer(self, table: str, timer_id: int, user_id: Optional[int] = None) -> Optional[Union[ActiveTimer, OldTimer]]:
        model = TABLES[table]
        query = model.query.filter_by(id=timer_id)
        if user_id is not None:
            query = query.filter_by(user_id=user_id)
        return query.first()

    def list_active(self, user_id: int) -> List[ActiveTimer]:
        return ActiveTimer.query.filter_by(user_id=user_id).order_by(ActiveTimer.id.desc()).all()

    def list_completed(self, user_id: int) -> List[OldTimer]:
        return OldTimer.query.filter_by(user_id=user_id).order_by(OldTimer.id.desc()).all()

    def touch_progress(self, timer_id: int, progress: int, commit: bool = True) -> None:
        ActiveTimer.query.filter_by(id=timer_id).update({'progress': progress}, synchronize_session=False)
        if commit:
            db.session.commit()

    def refresh_active(self, user_id: int) -> List[dict]:
        """Recompute progress for every active timer of ``user_id``.

        The refreshed values are persisted best-effort: a failed write is
        rolled back and logged, and the computed list is returned anyway.
        """
        now = self._clock()
        refreshed = []
        for timer in self.list_active(user_id):
            item = timer.to_dict()
            item['progress'] = now - timer.start
            refreshed.append(item)
        try:
            for item in refreshed:
                self.touch_progress(item['id'], item['progress'], commit=False)
            db.session.commit()
        except SQLAlchemyError as exc:
            db.session.rollback()
            current_app.logger.warning(f"[timer-progress] user={user_id} write failed: {exc}")
        return refreshed

    def stop_timer(self, timer_id: int, user_id: Optional[int] = None, timer: Optional[ActiveTimer] = None) -> OldTimer:
        """Promote an active timer to a completed one.

        The delete is conditional and its row count decides the winner, so
        of two concurrent stops for one id exactly one inserts a completed
        record and the other raises ``TimerNotFound``.
        """
        if timer is None:
            timer = self.get_timer('active_timers', timer_id, user_id)
            if timer is None:
                raise TimerNotFound(timer_id)
        elif timer.id != timer_id:
            raise ValueError(f"looked-up timer {timer.id} does not match id {timer_id}")
        owner_id = timer.user_id if user_id is None else user_id
        start = timer.start
        description = timer.description

        # Scoped by owner: a foreign timer matches no row and is not found
        query = ActiveTimer.query.filter_by(id=timer_id, user_id=owner_id)
        deleted = query.delete(synchronize_session=False)
        if not deleted:
            db.session.rollback()
            raise TimerNotFound(timer_id)

        end = self._clock()
        completed = OldTimer(
            id=timer_id,
            user_id=owner_id,
            start=start,
            end=end,
            duration=end - start,
            description=description,
        )
        db.session.add(completed)
        try:
            db.session.commit()
        except IntegrityError:
            db.session.rollback()
            raise TimerNotFound(timer_id)
        return completed
