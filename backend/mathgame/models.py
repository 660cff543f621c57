from datetime import datetime, timezone
from mathgame import db
from flask_login import UserMixin
import json

# Operation kinds in canonical order
OPERATIONS = ('add', 'sub', 'mul', 'div')


def utcnow():
    """Naive UTC timestamp, the form stored in DateTime columns."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _isoformat(value):
    return value.isoformat() if value else None


class User(UserMixin, db.Model):
    __tablename__ = 'user'
    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(64), unique=True, nullable=False, index=True)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)
    games = db.relationship('GameSession', back_populates='user', lazy='dynamic')

    def to_dict(self):
        return {
            'id': self.id,
            'username': self.username,
        }


class GameSession(db.Model):
    __tablename__ = 'game_session'
    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=False, index=True)
    score = db.Column(db.Integer, nullable=False)
    correct = db.Column(db.Integer, nullable=False)
    wrong = db.Column(db.Integer, nullable=False)
    total_problems = db.Column(db.Integer, nullable=False)
    operations = db.Column(db.Text, nullable=False)  # JSON-encoded list of operation kinds
    played_at = db.Column(db.DateTime, default=utcnow, nullable=False, index=True)
    user = db.relationship('User', back_populates='games')
    attempts = db.relationship('ProblemAttempt', back_populates='game', order_by='ProblemAttempt.id')

    @property
    def operation_list(self):
        try:
            return json.loads(self.operations) if self.operations else []
        except ValueError:
            return []

    def to_dict(self, include_attempts=False):
        data = {
            'id': self.id,
            'user_id': self.user_id,
            'score': self.score,
            'correct': self.correct,
            'wrong': self.wrong,
            'total_problems': self.total_problems,
            'operations': self.operation_list,
            'played_at': _isoformat(self.played_at),
        }
        if include_attempts:
            data['attempts'] = [a.to_dict() for a in self.attempts]
        return data


class ProblemAttempt(db.Model):
    __tablename__ = 'problem_attempt'
    id = db.Column(db.Integer, primary_key=True)
    game_id = db.Column(db.Integer, db.ForeignKey('game_session.id'), nullable=False, index=True)
    operation = db.Column(db.String(8), nullable=False)
    num1 = db.Column(db.Integer, nullable=False)
    num2 = db.Column(db.Integer, nullable=False)
    correct_answer = db.Column(db.Integer, nullable=False)
    user_answer = db.Column(db.Integer, nullable=True)
    is_correct = db.Column(db.Boolean, nullable=False)
    game = db.relationship('GameSession', back_populates='attempts')

    def to_dict(self):
        return {
            'id': self.id,
            'operation': self.operation,
            'num1': self.num1,
            'num2': self.num2,
            'correct_answer': self.correct_answer,
            'user_answer': self.user_answer,
            'is_correct': self.is_correct,
        }
