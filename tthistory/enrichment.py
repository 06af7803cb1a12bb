"""Parallel place lookup for tournaments without a podium place."""

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from typing import Callable, Optional

from tthistory import Tournament

log = logging.getLogger(__name__)

DEFAULT_MAX_WORKERS = 8

# (tournament, player fio) -> place, or None if the player is not listed
PlaceLookup = Callable[[Tournament, str], Optional[int]]


@dataclass
class PlaceLookupFailure:
    """A lookup task that raised instead of returning a place."""

    tournament: Tournament
    error: Exception


def fill_places(
    tournaments: list[Tournament],
    fio: str,
    lookup: PlaceLookup,
    max_workers: int = DEFAULT_MAX_WORKERS,
) -> list[PlaceLookupFailure]:
    """Look up missing places concurrently and apply them after all tasks finished.

    One task per tournament with ``place is None``. A failing task is
    recorded and does not affect the others.

    Args:
        tournaments: Tournaments to enrich in place.
        fio: Player name as listed in the tournament standings.
        lookup: Place lookup collaborator.
        max_workers: Upper bound for concurrent lookups.

    Returns:
        Failures of individual lookups (empty if all succeeded).
    """
    pending = [t for t in tournaments if t.place is None]
    if not pending:
        return []

    places: dict[int, Optional[int]] = {}
    failures: list[PlaceLookupFailure] = []

    with ThreadPoolExecutor(max_workers=max(1, min(max_workers, len(pending)))) as executor:
        futures = {executor.submit(lookup, t, fio): i for i, t in enumerate(pending)}
        for fut in as_completed(futures):
            index = futures[fut]
            try:
                places[index] = fut.result()
            except Exception as exc:
                tournament = pending[index]
                log.error(
                    "Fehler beim Ermitteln der Platzierung fuer Turnier %s (%s): %s",
                    tournament.ttw_id or tournament.rttf_id, tournament.date, exc,
                )
                failures.append(PlaceLookupFailure(tournament=tournament, error=exc))

    for index, place in places.items():
        pending[index].place = place

    log.info(
        "Platzierungen ermittelt: %d von %d (%d Fehler)",
        len(places), len(pending), len(failures),
    )
    return failures
