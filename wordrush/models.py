from wordrush import db, bcrypt
from flask_login import UserMixin
from datetime import datetime
import json


class User(UserMixin, db.Model):
    __tablename__ = 'user'
    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(40), unique=True, nullable=False, index=True)
    name = db.Column(db.String(80), nullable=True)
    password_hash = db.Column(db.String(256), nullable=False)
    gems = db.Column(db.Integer, default=0, nullable=False)
    free_swaps_left = db.Column(db.Integer, default=3, nullable=False)
    last_free_reset_at = db.Column(db.Date, nullable=True)
    best_score = db.Column(db.Integer, default=0, nullable=False)
    total_gems = db.Column(db.Integer, default=0, nullable=False)
    total_games = db.Column(db.Integer, default=0, nullable=False)
    sessions = db.relationship('GameSession', back_populates='user', lazy='dynamic')

    def set_password(self, password):
        self.password_hash = bcrypt.generate_password_hash(password).decode('utf-8')

    def check_password(self, password):
        return bcrypt.check_password_hash(self.password_hash, password)

    def to_dict(self):
        return {
            'id': self.id,
            'username': self.username,
            'name': self.name,
            'gems': self.gems,
            'free_swaps_left': self.free_swaps_left,
            'last_free_reset_at': self.last_free_reset_at.isoformat() if self.last_free_reset_at else None,
            'best_score': self.best_score,
            'total_gems': self.total_gems,
            'total_games': self.total_games,
        }

    def to_leader_dict(self):
        return {
            'id': self.id,
            'username': self.username,
            'best_score': self.best_score,
            'total_gems': self.total_gems,
            'total_games': self.total_games,
        }


class GameSession(db.Model):
    __tablename__ = 'game_session'
    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('user.id', ondelete='CASCADE'), nullable=False, index=True)
    letters = db.Column(db.String(32), nullable=False)
    words = db.Column(db.Text, nullable=True)  # JSON-encoded list of accepted words
    score = db.Column(db.Integer, default=0, nullable=False)
    gems_earned = db.Column(db.Integer, default=0, nullable=False)
    swaps_used = db.Column(db.Integer, default=0, nullable=False)
    hints_revealed = db.Column(db.Boolean, default=False, nullable=False)
    duration_seconds = db.Column(db.Integer, default=0, nullable=False)
    completed_at = db.Column(db.DateTime, nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    user = db.relationship('User', back_populates='sessions')

    @property
    def is_completed(self):
        return self.completed_at is not None

    @property
    def status(self):
        return 'completed' if self.is_completed else 'active'

    @property
    def letter_list(self):
        return list(self.letters)

    @property
    def word_list(self):
        try:
            return json.loads(self.words) if self.words else []
        except ValueError:
            return []

    def to_dict(self):
        return {
            'session_id': self.id,
            'status': self.status,
            'letters': self.letter_list,
            'words': self.word_list,
            'score': self.score,
            'gems_earned': self.gems_earned,
            'swaps_used': self.swaps_used,
            'hints_revealed': self.hints_revealed,
            'duration_seconds': self.duration_seconds,
            'completed_at': self.completed_at.isoformat() if self.completed_at else None,
        }


class DictionaryCacheEntry(db.Model):
    __tablename__ = 'dictionary_cache'
    word = db.Column(db.String(64), primary_key=True)
    is_valid = db.Column(db.Boolean, nullable=False)
    expires_at = db.Column(db.DateTime, nullable=False, index=True)
