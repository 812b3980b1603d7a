"""Round derivation: completed rounds, rotation direction and round extremes.

Every function here is pure. ``players`` are objects exposing ``id``; events
expose ``player_id``, ``points`` and ``timestamp``. Passing ``None`` for a
collection means the data has not loaded yet, and the result is ``None`` so
callers can render a loading state instead of a zero.
"""

from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Set


class Direction(str, Enum):
    RIGHT = 'right'
    LEFT = 'left'


class Mode(str, Enum):
    MAX = 'max'
    MIN = 'min'


def events_by_player(players: Iterable[Any], events: Iterable[Any]) -> Dict[Any, List[Any]]:
    """Group events under each known player id, oldest first.

    Events pointing at an unknown player are dropped.
    """
    grouped: Dict[Any, List[Any]] = {p.id: [] for p in players}
    for e in events:
        bucket = grouped.get(e.player_id)
        if bucket is not None:
            bucket.append(e)
    for bucket in grouped.values():
        # sort is stable, so equal timestamps keep insertion order
        bucket.sort(key=lambda e: e.timestamp)
    return grouped


def completed_rounds(players: Optional[Iterable[Any]], events: Optional[Iterable[Any]]) -> Optional[int]:
    """Number of rounds in which every player has recorded a score."""
    if players is None or events is None:
        return None
    grouped = events_by_player(players, events)
    if not grouped:
        return 0
    return min(len(bucket) for bucket in grouped.values())


def next_round_number(players: Optional[Iterable[Any]], events: Optional[Iterable[Any]]) -> Optional[int]:
    done = completed_rounds(players, events)
    if done is None:
        return None
    return done + 1


def rotation_direction(round_number: int) -> Direction:
    # 1-based: odd rounds rotate right, even rounds left
    return Direction.RIGHT if round_number % 2 != 0 else Direction.LEFT


def extremal_scorers_of_round(
    players: Optional[Iterable[Any]],
    events: Optional[Iterable[Any]],
    round_index: int,
    mode: Mode = Mode.MAX,
) -> Optional[Set[Any]]:
    """Ids of every player tied for the highest (or lowest) points in a round.

    ``round_index`` is 0-based. Only rounds that all players have completed
    are considered; anything past that yields an empty set. Players without
    an entry at ``round_index`` are left out rather than counted as zero.
    """
    if players is None or events is None:
        return None
    players = list(players)
    grouped = events_by_player(players, events)
    done = min((len(b) for b in grouped.values()), default=0)
    if round_index < 0 or round_index >= done:
        return set()

    points_by_player = {
        pid: bucket[round_index].points
        for pid, bucket in grouped.items()
        if len(bucket) > round_index
    }
    if not points_by_player:
        return set()

    pick = max if Mode(mode) is Mode.MAX else min
    target = pick(points_by_player.values())
    return {pid for pid, pts in points_by_player.items() if pts == target}


def last_round_extremal_scorers(
    players: Optional[Iterable[Any]],
    events: Optional[Iterable[Any]],
    mode: Mode = Mode.MAX,
) -> Optional[Set[Any]]:
    """Extremal scorers of the most recently completed round.

    Returns an empty set until the first round has been completed.
    """
    if players is None or events is None:
        return None
    players = list(players)
    events = list(events)
    done = completed_rounds(players, events)
    if not done:
        return set()
    return extremal_scorers_of_round(players, events, done - 1, mode)
