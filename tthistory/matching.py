"""Tournament matching across sources by date and shared game fingerprints."""

import logging
from dataclasses import dataclass
from typing import Optional

from tthistory import TTW, Game, Tournament
from tthistory.merging import merge_tournament
from tthistory.names import normalize_name

log = logging.getLogger(__name__)

# Minimum number of identical (opponent, score, opponent score) triples
# for two same-day tournaments to count as one event
DEFAULT_MIN_OVERLAP = 5

APPEND = 'APPEND'
MERGE = 'MERGE'


@dataclass(frozen=True)
class MergeStep:
    """What to do with one incoming tournament."""

    incoming: Tournament
    action: str                         # APPEND or MERGE
    target_index: Optional[int] = None  # index into the existing list for MERGE
    overlap: int = 0


def game_fingerprint(game: Game) -> str:
    """Build the fingerprint of a game: "Surname I.O.|score|opponent_score"."""
    return f'{normalize_name(game.opponent_name)}|{game.score}|{game.opponent_score}'


def _fingerprints(tournament: Tournament) -> set[str]:
    return {game_fingerprint(g) for g in tournament.games or []}


def count_overlap(existing: Tournament, incoming: Tournament) -> int:
    """Count incoming games whose fingerprint also occurs in the existing tournament.

    Args:
        existing: Tournament already in the merged history.
        incoming: Freshly fetched tournament.

    Returns:
        Number of matching games; 0 if either side has no games.
    """
    if not existing.games or not incoming.games:
        return 0
    known = _fingerprints(existing)
    return sum(1 for g in incoming.games if game_fingerprint(g) in known)


def tournaments_match(
    existing: Tournament,
    incoming: Tournament,
    min_overlap: int = DEFAULT_MIN_OVERLAP,
) -> bool:
    """Check whether two tournament records describe the same event.

    Both must carry the same date and share at least ``min_overlap``
    game fingerprints. Records without a date never match.
    """
    if existing.date is None or incoming.date is None:
        return False
    if existing.date != incoming.date:
        return False
    return count_overlap(existing, incoming) >= min_overlap


def plan_merge(
    existing: list[Tournament],
    incoming: list[Tournament],
    min_overlap: int = DEFAULT_MIN_OVERLAP,
) -> list[MergeStep]:
    """Decide for every incoming tournament whether to merge or append it.

    The first same-date candidate in ``existing`` order that reaches the
    threshold wins. Incoming records are only compared against
    ``existing``, never against each other.

    Args:
        existing: Current merged history.
        incoming: Tournaments fetched from one source.
        min_overlap: Minimum fingerprint overlap for a match.

    Returns:
        One MergeStep per incoming tournament, in incoming order.
    """
    steps: list[MergeStep] = []
    for new in incoming:
        step = MergeStep(incoming=new, action=APPEND)
        if new.date is not None:
            for index, old in enumerate(existing):
                if old.date != new.date:
                    continue
                overlap = count_overlap(old, new)
                if overlap >= min_overlap:
                    step = MergeStep(incoming=new, action=MERGE,
                                     target_index=index, overlap=overlap)
                    break
        steps.append(step)
    return steps


def merge_tournaments(
    existing: list[Tournament],
    incoming: list[Tournament],
    source: str = TTW,
    min_overlap: int = DEFAULT_MIN_OVERLAP,
) -> list[Tournament]:
    """Merge tournaments of one source into an existing tournament list.

    Matched tournaments are fused in place of their existing entry,
    unmatched ones are appended in incoming order. Neither input list
    is modified.

    Args:
        existing: Current merged history (or the other source's list).
        incoming: Tournaments fetched from ``source``.
        source: Source the incoming tournaments come from.
        min_overlap: Minimum fingerprint overlap for a match.

    Returns:
        The new canonical tournament list.
    """
    existing = existing or []
    incoming = incoming or []
    result = list(existing)
    appended: list[Tournament] = []
    merged = 0

    for step in plan_merge(existing, incoming, min_overlap):
        if step.action == MERGE:
            result[step.target_index] = merge_tournament(
                result[step.target_index], step.incoming, source,
            )
            merged += 1
        else:
            appended.append(step.incoming)

    log.info(
        "Turnier-Abgleich (%s): %d zusammengefuehrt, %d neu",
        source, merged, len(appended),
    )
    return result + appended
