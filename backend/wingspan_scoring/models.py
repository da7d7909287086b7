from datetime import datetime
import json
import random
import string

from wingspan_scoring import db


class GameResult(db.Model):
    __tablename__ = 'game_result'
    id = db.Column(db.Integer, primary_key=True)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow, index=True)
    num_players = db.Column(db.Integer, nullable=False)
    include_oceania = db.Column(db.Boolean, nullable=False, default=False)
    winner_name = db.Column(db.String(64), nullable=False, index=True)
    winner_score = db.Column(db.Integer, nullable=False)
    players_json = db.Column(db.Text, nullable=False)  # JSON-encoded list of scored players
    nectar_json = db.Column(db.Text, nullable=True)  # JSON-encoded nectar points per habitat

    @property
    def players(self):
        return json.loads(self.players_json) if self.players_json else []

    @property
    def nectar_scoring(self):
        return json.loads(self.nectar_json) if self.nectar_json else None

    @property
    def round_breakdown(self):
        breakdown = {}
        for p in self.players:
            rounds = p.get('round_goals_breakdown')
            if rounds:
                breakdown[p['player_name']] = {f'round{i + 1}': v for i, v in enumerate(rounds)}
        return breakdown or None

    def to_dict(self):
        return {
            'id': self.id,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'num_players': self.num_players,
            'include_oceania': self.include_oceania,
            'winner_name': self.winner_name,
            'winner_score': self.winner_score,
            'players': self.players,
            'nectar_scoring': self.nectar_scoring,
            'round_breakdown': self.round_breakdown,
        }


def generate_session_code(length=4):
    """Generate a unique, short session code."""
    while True:
        code = ''.join(random.choices(string.ascii_uppercase + string.digits, k=length))
        if not ScoringSession.query.filter_by(session_code=code).first():
            return code


class ScoringSession(db.Model):
    __tablename__ = 'scoring_session'
    id = db.Column(db.Integer, primary_key=True)
    session_code = db.Column(db.String(4), unique=True, index=True)
    state_json = db.Column(db.Text, nullable=False)  # JSON-encoded GameState
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __init__(self, **kwargs):
        super(ScoringSession, self).__init__(**kwargs)
        if not self.session_code:
            self.session_code = generate_session_code()

    def load_state(self):
        from wingspan_scoring.errors import DataIntegrity
        from wingspan_scoring.services.session import GameState
        try:
            data = json.loads(self.state_json)
        except ValueError:
            raise DataIntegrity(f'Stored state for session {self.session_code} is not valid JSON')
        return GameState.from_dict(data)

    def store_state(self, state) -> None:
        self.state_json = json.dumps(state.to_dict())
