"""Read-side views built on round derivation.

These return plain dicts/lists ready to be serialized by the API layer.
"""

from typing import Any, Dict, Iterable, List, Optional

from .derivation import (
    Direction,
    Mode,
    completed_rounds,
    events_by_player,
    last_round_extremal_scorers,
    rotation_direction,
)


def _order_by_direction(players: List[Any], direction: Direction) -> List[Any]:
    # RIGHT seats A-Z, LEFT seats Z-A
    return sorted(players, key=lambda p: (p.name.casefold(), p.name), reverse=(direction is Direction.LEFT))


def _named(players: List[Any], ids) -> List[Dict[str, Any]]:
    picked = [p for p in players if p.id in ids]
    return [{'id': p.id, 'name': p.name} for p in sorted(picked, key=lambda p: p.name)]


def leaderboard(players: Optional[Iterable[Any]], events: Optional[Iterable[Any]]) -> Optional[List[Dict[str, Any]]]:
    """Players ranked by score, with the gap to the row above.

    Equal scores fall back to seating order for the upcoming round.
    """
    if players is None or events is None:
        return None
    players = list(players)
    direction = rotation_direction(completed_rounds(players, events) + 1)
    ordered = _order_by_direction(players, direction)
    ordered.sort(key=lambda p: p.score, reverse=True)

    rows = []
    for idx, p in enumerate(ordered):
        rows.append({
            'rank': idx + 1,
            'id': p.id,
            'name': p.name,
            'score': p.score,
            'gap': ordered[idx - 1].score - p.score if idx > 0 else None,
        })
    return rows


def game_info(players: Optional[Iterable[Any]], events: Optional[Iterable[Any]]) -> Optional[Dict[str, Any]]:
    if players is None or events is None:
        return None
    players = list(players)
    events = list(events)
    done = completed_rounds(players, events)
    next_round = done + 1
    return {
        'completed_rounds': done,
        'next_round': next_round,
        'direction': rotation_direction(next_round).value,
        'mvp': _named(players, last_round_extremal_scorers(players, events, Mode.MAX)),
        'lowest': _named(players, last_round_extremal_scorers(players, events, Mode.MIN)),
    }


def round_history(players: Optional[Iterable[Any]], events: Optional[Iterable[Any]]) -> Optional[Dict[str, Any]]:
    """Round-by-round pivot: one row per round, one column per player.

    Always shows at least the round currently being played.
    """
    if players is None or events is None:
        return None
    players = list(players)
    if not players:
        return {'players': [], 'rounds': []}

    grouped = events_by_player(players, events)
    counts = [len(b) for b in grouped.values()]
    done = min(counts)
    most = max(counts)
    total = most if most > done else done + 1

    columns = _order_by_direction(players, rotation_direction(done + 1))
    rounds = []
    for i in range(total):
        scores = {}
        for p in columns:
            bucket = grouped[p.id]
            scores[p.name] = bucket[i].points if i < len(bucket) else None
        rounds.append({'round': i + 1, 'scores': scores})
    return {'players': [p.name for p in columns], 'rounds': rounds}


def player_history(player: Any, events: Optional[Iterable[Any]]) -> Optional[List[Dict[str, Any]]]:
    """A single player's entries, newest first, tagged with their round."""
    if player is None or events is None:
        return None
    own = events_by_player([player], events)[player.id]
    entries = []
    for idx, e in enumerate(own):
        entries.append({
            'id': e.id,
            'round': idx + 1,
            'points': e.points,
            'timestamp': e.timestamp.isoformat() if e.timestamp else None,
            'action_label': getattr(e, 'action_label', None),
            'input_type': getattr(e, 'input_type', None),
        })
    entries.reverse()
    return entries
