"""Data stores backing the scoreboard.

``SqlStore`` persists through the SQLAlchemy models. ``MemoryStore`` keeps
local-only state for offline/demo use and resets when the process exits.
Both expose the same methods so services never care which one is active.
"""

import itertools
from dataclasses import dataclass, field
from threading import Lock
from typing import Dict, List, Optional

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from scoreboard import db
from scoreboard.models import Player, ScoreEntry, utcnow

DEMO_PLAYERS = ['Alice', 'Bob', 'Charlie', 'Diana']


class SqlStore:
    """Store backed by the application database."""

    def list_players(self) -> List[Player]:
        return Player.query.order_by(Player.id).all()

    def get_player(self, player_id) -> Optional[Player]:
        return db.session.get(Player, player_id)

    def find_player_by_name(self, name: str) -> Optional[Player]:
        return Player.query.filter_by(name=name).first()

    def list_events(self, player_id=None) -> List[ScoreEntry]:
        q = ScoreEntry.query
        if player_id is not None:
            q = q.filter_by(player_id=player_id)
        return q.order_by(ScoreEntry.timestamp, ScoreEntry.id).all()

    def add_player(self, name: str) -> Player:
        player = Player(name=name, score=0)
        db.session.add(player)
        self._commit()
        return player

    def append_event(self, player_id, points: int, action_label=None, input_type='shortcut') -> ScoreEntry:
        entry = ScoreEntry(
            player_id=player_id,
            points=points,
            action_label=action_label,
            input_type=input_type,
        )
        db.session.add(entry)
        # increment in SQL so concurrent writers never overwrite each other
        Player.query.filter_by(id=player_id).update(
            {Player.score: Player.score + points}, synchronize_session=False
        )
        self._commit()
        return entry

    def delete_player(self, player_id) -> None:
        player = db.session.get(Player, player_id)
        if player:
            db.session.delete(player)
            self._commit()

    def reset_scores(self) -> None:
        ScoreEntry.query.delete()
        Player.query.update({Player.score: 0})
        self._commit()

    def set_score(self, player_id, score: int) -> None:
        player = db.session.get(Player, player_id)
        if player:
            player.score = score
            db.session.add(player)
            self._commit()

    def _commit(self) -> None:
        try:
            db.session.commit()
        except SQLAlchemyError as exc:
            db.session.rollback()
            current_app.logger.error(f"[store] commit failed: {exc}")
            raise


@dataclass
class MemoryPlayer:
    id: int
    name: str
    score: int = 0

    def to_dict(self):
        return {'id': self.id, 'name': self.name, 'score': self.score}


@dataclass
class MemoryEntry:
    id: int
    player_id: int
    points: int
    action_label: Optional[str] = None
    input_type: str = 'shortcut'
    timestamp: object = field(default_factory=utcnow)

    def to_dict(self):
        return {
            'id': self.id,
            'player_id': self.player_id,
            'points': self.points,
            'timestamp': self.timestamp.isoformat(),
            'action_label': self.action_label,
            'input_type': self.input_type,
        }


class MemoryStore:
    """Process-local store used when no database is available."""

    def __init__(self, seed: bool = False):
        self._lock = Lock()
        self._players: Dict[int, MemoryPlayer] = {}
        self._events: List[MemoryEntry] = []
        self._player_ids = itertools.count(1)
        self._event_ids = itertools.count(1)
        if seed:
            for name in DEMO_PLAYERS:
                self.add_player(name)

    def list_players(self) -> List[MemoryPlayer]:
        with self._lock:
            return list(self._players.values())

    def get_player(self, player_id) -> Optional[MemoryPlayer]:
        with self._lock:
            return self._players.get(player_id)

    def find_player_by_name(self, name: str) -> Optional[MemoryPlayer]:
        with self._lock:
            return next((p for p in self._players.values() if p.name == name), None)

    def list_events(self, player_id=None) -> List[MemoryEntry]:
        with self._lock:
            if player_id is None:
                return list(self._events)
            return [e for e in self._events if e.player_id == player_id]

    def add_player(self, name: str) -> MemoryPlayer:
        with self._lock:
            player = MemoryPlayer(id=next(self._player_ids), name=name)
            self._players[player.id] = player
            return player

    def append_event(self, player_id, points: int, action_label=None, input_type='shortcut') -> MemoryEntry:
        with self._lock:
            entry = MemoryEntry(
                id=next(self._event_ids),
                player_id=player_id,
                points=points,
                action_label=action_label,
                input_type=input_type,
            )
            self._events.append(entry)
            self._players[player_id].score += points
            return entry

    def delete_player(self, player_id) -> None:
        with self._lock:
            self._players.pop(player_id, None)
            self._events = [e for e in self._events if e.player_id != player_id]

    def reset_scores(self) -> None:
        with self._lock:
            self._events = []
            for p in self._players.values():
                p.score = 0

    def set_score(self, player_id, score: int) -> None:
        with self._lock:
            if player_id in self._players:
                self._players[player_id].score = score


def get_store():
    """Return the store configured for the current app."""
    return current_app.extensions['scoreboard_store']


def init_store(flask_app) -> None:
    kind = flask_app.config.get('SCOREBOARD_STORE', 'sql')
    if kind == 'memory':
        store = MemoryStore(seed=flask_app.config.get('SEED_DEMO_PLAYERS', True))
    elif kind == 'sql':
        store = SqlStore()
    else:
        raise ValueError(f"Unknown SCOREBOARD_STORE: {kind!r}")
    flask_app.extensions['scoreboard_store'] = store
    flask_app.logger.info(f"[store] using {kind} store")
