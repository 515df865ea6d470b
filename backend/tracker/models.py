from tracker import db
from flask_login import UserMixin
from werkzeug.security import generate_password_hash, check_password_hash
import time


class User(UserMixin, db.Model):
    __tablename__ = 'users'
    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(64), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(256), nullable=False)
    sessions = db.relationship('Session', backref='user', lazy='dynamic', cascade='all, delete-orphan')

    def set_password(self, password):
        self.password_hash = generate_password_hash(password)

    def check_password(self, password):
        return check_password_hash(self.password_hash, password)

    def to_dict(self):
        return {
            'id': self.id,
            'username': self.username,
        }


class Session(db.Model):
    __tablename__ = 'sessions'
    token = db.Column(db.String(64), primary_key=True)
    # No uniqueness on user_id: a user may hold several sessions
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    created_at = db.Column(db.Float, nullable=False, default=time.time)


class ActiveTimer(db.Model):
    __tablename__ = 'active_timers'
    # Never reuse ids on SQLite: completed timers keep the id of their active row
    __table_args__ = {'sqlite_autoincrement': True}
    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    # Epoch milliseconds; the source of truth for elapsed time
    start = db.Column(db.BigInteger, nullable=False)
    # Cached now - start in milliseconds, refreshed by snapshots and heartbeats
    progress = db.Column(db.BigInteger, nullable=False, default=0)
    description = db.Column(db.String(255), nullable=False, default='')

    def to_dict(self):
        return {
            'id': self.id,
            'user_id': self.user_id,
            'start': self.start,
            'progress': self.progress,
            'description': self.description,
        }


class OldTimer(db.Model):
    __tablename__ = 'old_timers'
    # Carries over the id of the active timer it was promoted from
    id = db.Column(db.Integer, primary_key=True, autoincrement=False)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    start = db.Column(db.BigInteger, nullable=False)
    end = db.Column(db.BigInteger, nullable=False)
    duration = db.Column(db.BigInteger, nullable=False)
    description = db.Column(db.String(255), nullable=False, default='')

    def to_dict(self):
        return {
            'id': self.id,
            'user_id': self.user_id,
            'start': self.start,
            'end': self.end,
            'duration': self.duration,
            'description': self.description,
        }
