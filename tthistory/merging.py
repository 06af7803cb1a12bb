"""Fusion of two matched tournament records into one."""

import logging
from collections import defaultdict
from dataclasses import replace
from typing import Optional

from tthistory import SOURCES, TTW, Game, Tournament
from tthistory.names import normalize_name

log = logging.getLogger(__name__)

# Tournament fields that belong to a single source
SOURCE_FIELDS = ('id', 'name', 'delta')


def _order_key(game: Game) -> tuple[bool, int]:
    """Sort key for game order with missing orders last."""
    return (game.order is None, game.order or 0)


def sort_and_renumber(games: Optional[list[Game]]) -> list[Game]:
    """Sort games by normalized opponent name, then order, and renumber 1..N.

    Args:
        games: Games of one tournament (may be None).

    Returns:
        New list of renumbered copies; the input games are not modified.
    """
    if not games:
        return []
    ordered = sorted(
        games,
        key=lambda g: (normalize_name(g.opponent_name), _order_key(g)),
    )
    return [replace(g, order=i) for i, g in enumerate(ordered, start=1)]


def _group_by_opponent(games: Optional[list[Game]]) -> dict[str, dict[int, Game]]:
    """Group games by normalized opponent name with local orders 1..K.

    Each group is sorted by the original order before renumbering, so two
    sources listing the same opponent's games in a different overall
    position still line up.
    """
    groups: dict[str, list[Game]] = defaultdict(list)
    for game in games or []:
        groups[normalize_name(game.opponent_name)].append(game)

    return {
        key: {i: g for i, g in enumerate(sorted(group, key=_order_key), start=1)}
        for key, group in groups.items()
    }


def _fuse_games(existing: Game, incoming: Game, source: str, local_order: int) -> Game:
    """Fuse two reports of the same game.

    The incoming source's rating and delta come from ``incoming``;
    everything else is taken from ``existing``.
    """
    fused = replace(
        existing,
        order=local_order,
        natural_order=(existing.natural_order if existing.natural_order is not None
                       else incoming.natural_order),
    )
    rating_field = f'opponent_{source}_rating'
    delta_field = f'{source}_delta'
    setattr(fused, rating_field, getattr(incoming, rating_field))
    setattr(fused, delta_field, getattr(incoming, delta_field))
    return fused


def merge_games(
    existing_games: Optional[list[Game]],
    incoming_games: Optional[list[Game]],
    source: str = TTW,
) -> list[Game]:
    """Fuse the game lists of two matched tournaments.

    1. Group both sides by normalized opponent name, renumber per opponent
    2. Align by local order: present on both sides -> fused, else copied
    3. Sort the pool by (opponent, local order) and renumber 1..N

    Args:
        existing_games: Games of the tournament already in the history.
        incoming_games: Games of the freshly fetched tournament.
        source: Source the incoming games come from.

    Returns:
        Merged games with unique, contiguous orders.
    """
    existing_groups = _group_by_opponent(existing_games)
    incoming_groups = _group_by_opponent(incoming_games)

    pool: list[Game] = []
    for key in existing_groups.keys() | incoming_groups.keys():
        old_by_order = existing_groups.get(key, {})
        new_by_order = incoming_groups.get(key, {})
        for local_order in old_by_order.keys() | new_by_order.keys():
            old = old_by_order.get(local_order)
            new = new_by_order.get(local_order)
            if old is not None and new is not None:
                pool.append(_fuse_games(old, new, source, local_order))
            elif old is not None:
                pool.append(replace(old, order=local_order))
            else:
                pool.append(replace(new, order=local_order))

    return sort_and_renumber(pool)


def merge_tournament(existing: Tournament, incoming: Tournament, source: str = TTW) -> Tournament:
    """Merge an incoming tournament into a matched existing one.

    The incoming source's own scalar fields overwrite the existing ones
    when present; the other source's fields are left untouched. The
    place is only filled in when the existing record has none.

    Args:
        existing: Tournament already in the history.
        incoming: Matching tournament fetched from ``source``.
        source: Source of the incoming tournament.

    Returns:
        A new merged Tournament; the inputs are not modified.

    Raises:
        ValueError: If ``source`` is unknown.
    """
    if source not in SOURCES:
        raise ValueError(f"Unbekannte Quelle: {source}")

    merged = replace(existing, games=merge_games(existing.games, incoming.games, source))
    for name in SOURCE_FIELDS:
        attr = f'{source}_{name}'
        value = getattr(incoming, attr)
        if value is not None:
            setattr(merged, attr, value)
    if merged.place is None:
        merged.place = incoming.place
    if merged.player_id is None:
        merged.player_id = incoming.player_id

    log.debug(
        "Turnier %s zusammengefuehrt: %d + %d -> %d Spiele",
        existing.date, len(existing.games or []), len(incoming.games or []),
        len(merged.games),
    )
    return merged
