from typing import List, Optional

from flask import current_app
from sqlalchemy.exc import IntegrityError

INPUT_TYPES = ('shortcut', 'manual')


class LedgerError(Exception):
    """Rejected write, carrying the message and HTTP status for the client."""

    def __init__(self, message: str, status: int = 400):
        super().__init__(message)
        self.message = message
        self.status = status


def add_player(store, name: Optional[str]):
    trimmed = (name or '').strip()
    if not trimmed:
        raise LedgerError('Player name cannot be empty.')
    if store.find_player_by_name(trimmed):
        raise LedgerError('A player with this name already exists.', 409)
    limit = int(current_app.config.get('MAX_PLAYERS', 8))
    if len(store.list_players()) >= limit:
        raise LedgerError('Player limit reached.', 409)
    try:
        player = store.add_player(trimmed)
    except IntegrityError:
        # lost a race with another insert of the same name
        raise LedgerError('A player with this name already exists.', 409)
    current_app.logger.info(f"[player-add] id={player.id} name={trimmed}")
    return player


def _coerce_points(points) -> int:
    # bools are ints in Python but never valid points
    if isinstance(points, bool):
        raise LedgerError('Points must be an integer.')
    if isinstance(points, int):
        return points
    if isinstance(points, str):
        try:
            return int(points.strip())
        except ValueError:
            pass
    raise LedgerError('Points must be an integer.')


def record_score(store, player_id, points, action_label: Optional[str] = None, input_type: str = 'shortcut'):
    """Append a score entry for a player and apply it to their total.

    Manually typed values must be nonzero and within ``MAX_MANUAL_POINTS``.
    """
    if input_type not in INPUT_TYPES:
        raise LedgerError(f"Unknown input type: {input_type}")
    value = _coerce_points(points)

    if input_type == 'manual':
        limit = int(current_app.config.get('MAX_MANUAL_POINTS', 500))
        if value == 0:
            raise LedgerError('Points cannot be zero.')
        if abs(value) > limit:
            raise LedgerError(f'Points out of range (-{limit} to {limit}).')

    player = store.get_player(player_id)
    if not player:
        raise LedgerError('Player not found.', 404)

    label = action_label or (f"+{value}" if value > 0 else str(value))
    entry = store.append_event(player.id, value, action_label=label, input_type=input_type)
    current_app.logger.info(
        f"[score] player={player.id} points={value} input={input_type} total={player.score}"
    )
    return entry, player


def delete_player(store, player_id) -> None:
    player = store.get_player(player_id)
    if not player:
        raise LedgerError('Player not found.', 404)
    name = player.name
    store.delete_player(player.id)
    current_app.logger.info(f"[player-delete] id={player_id} name={name}")


def reset_scores(store) -> None:
    store.reset_scores()
    current_app.logger.info("[reset] all score entries cleared")


def recompute_scores(store) -> List:
    """Rewrite every player's total from their entries.

    Returns the ids of players whose stored total had drifted.
    """
    totals = {}
    for e in store.list_events():
        totals[e.player_id] = totals.get(e.player_id, 0) + e.points

    drifted = []
    for p in store.list_players():
        expected = totals.get(p.id, 0)
        if p.score != expected:
            current_app.logger.warning(f"[recompute] player={p.id} stored={p.score} expected={expected}")
            store.set_score(p.id, expected)
            drifted.append(p.id)
    return drifted
