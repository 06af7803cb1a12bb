"""One update cycle of a player's history: fetch both sources, merge, enrich."""

import datetime
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Optional

from tthistory import RTTF, SOURCES, TTW, Player, Tournament
from tthistory.enrichment import DEFAULT_MAX_WORKERS, PlaceLookup, PlaceLookupFailure, fill_places
from tthistory.matching import DEFAULT_MIN_OVERLAP, merge_tournaments
from tthistory.sources import SourceParser, SourceResult

log = logging.getLogger(__name__)


class CollaboratorError(Exception):
    """A source could not be fetched; the cause is kept as ``__cause__``."""

    def __init__(self, source: str, message: str = ''):
        super().__init__(f"Quelle {source} nicht verfuegbar: {message}")
        self.source = source


@dataclass
class UpdateResult:
    """Outcome of an update cycle."""

    player: Player
    fetched: dict[str, int] = field(default_factory=dict)  # source -> tournaments fetched
    place_failures: list[PlaceLookupFailure] = field(default_factory=list)


def fetch_sources(
    player: Player,
    parsers: dict[str, SourceParser],
    date_from: Optional[datetime.date] = None,
) -> dict[str, Optional[SourceResult]]:
    """Fetch all sources concurrently and wait for every one of them.

    Raises:
        CollaboratorError: If any source failed (after all have finished).
    """
    results: dict[str, Optional[SourceResult]] = {}
    errors: dict[str, Exception] = {}

    with ThreadPoolExecutor(max_workers=max(1, len(parsers))) as executor:
        futures = {s: executor.submit(p.fetch, player, date_from) for s, p in parsers.items()}
        for source, fut in futures.items():
            try:
                results[source] = fut.result()
            except Exception as exc:
                errors[source] = exc

    for source, exc in errors.items():
        log.error("Laden von %s fehlgeschlagen: %s", source, exc)
    if errors:
        source, exc = next(iter(errors.items()))
        raise CollaboratorError(source, str(exc)) from exc
    return results


def _keep_existing(tournaments: list[Tournament], date_from: Optional[datetime.date]) -> list[Tournament]:
    """Existing tournaments that the new fetch does not replace."""
    if date_from is None:
        return [t for t in tournaments if t.date is None]
    return [t for t in tournaments if t.date is None or t.date <= date_from]


def update_player(
    player: Player,
    parsers: dict[str, SourceParser],
    date_from: Optional[datetime.date] = None,
    min_overlap: int = DEFAULT_MIN_OVERLAP,
    place_lookup: Optional[PlaceLookup] = None,
    max_workers: int = DEFAULT_MAX_WORKERS,
) -> UpdateResult:
    """Refresh a player's merged history from both sources.

    Tournaments newer than ``date_from`` are replaced by the fetched ones
    (all dated ones for ``date_from=None``). RTTF results are merged
    first, TTW results are then matched against them.

    Args:
        player: Player to update; modified in place.
        parsers: Source parser per source name.
        date_from: Only tournaments strictly newer than this are fetched.
        min_overlap: Minimum fingerprint overlap for a tournament match.
        place_lookup: Optional collaborator filling in missing places.
        max_workers: Upper bound for concurrent place lookups.

    Returns:
        UpdateResult with per-source counts and place lookup failures.

    Raises:
        CollaboratorError: If a source could not be fetched.
    """
    unknown = set(parsers) - set(SOURCES)
    if unknown:
        raise ValueError(f"Unbekannte Quelle: {', '.join(sorted(unknown))}")

    results = fetch_sources(player, parsers, date_from)
    result = UpdateResult(player=player)

    history = _keep_existing(player.tournaments, date_from)
    for source in (RTTF, TTW):
        fetched = results.get(source)
        if fetched is None:
            continue
        if fetched.rating is not None:
            setattr(player, f'{source}_rating', fetched.rating)
        if fetched.fio and (source == RTTF or not player.fio):
            player.fio = fetched.fio
        history = merge_tournaments(history, fetched.tournaments, source, min_overlap)
        result.fetched[source] = len(fetched.tournaments)

    player.tournaments = history

    if place_lookup is not None:
        result.place_failures = fill_places(history, player.fio, place_lookup, max_workers)

    log.info(
        "Spieler %s aktualisiert: %d Turniere (%s)",
        player.fio, len(history),
        ', '.join(f'{s}={n}' for s, n in result.fetched.items()),
    )
    return result
