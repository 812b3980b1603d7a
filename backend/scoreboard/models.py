from scoreboard import db
from datetime import datetime, timezone


def utcnow():
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Player(db.Model):
    __tablename__ = 'player'
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(64), unique=True, nullable=False, index=True)
    score = db.Column(db.Integer, default=0, nullable=False)
    entries = db.relationship(
        'ScoreEntry',
        back_populates='player',
        cascade='all, delete-orphan',
        order_by='ScoreEntry.timestamp',
    )

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'score': self.score,
        }


class ScoreEntry(db.Model):
    __tablename__ = 'score_entry'
    id = db.Column(db.Integer, primary_key=True)
    player_id = db.Column(db.Integer, db.ForeignKey('player.id'), nullable=False, index=True)
    points = db.Column(db.Integer, nullable=False)
    timestamp = db.Column(db.DateTime, nullable=False, default=utcnow, index=True)
    action_label = db.Column(db.String(64), nullable=True)
    input_type = db.Column(db.String(16), nullable=False, default='shortcut')  # shortcut, manual
    player = db.relationship('Player', back_populates='entries')

    def to_dict(self):
        return {
            'id': self.id,
            'player_id': self.player_id,
            'points': self.points,
            'timestamp': self.timestamp.isoformat() if self.timestamp else None,
            'action_label': self.action_label,
            'input_type': self.input_type,
        }
