"""Per-source parser strategy and the bundled CSV export source."""

import datetime
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from decimal import Decimal
from pathlib import Path
from typing import Any, Optional

from tthistory import SOURCES, Game, Player, Tournament
from tthistory.merging import sort_and_renumber
from tthistory.names import normalize_name
from tthistory.reader import parse_date, parse_decimal, parse_int, read_rows

log = logging.getLogger(__name__)


def _has_source_name(tournament: Tournament) -> bool:
    return any((getattr(tournament, f'{s}_name') or '').strip() for s in SOURCES)


@dataclass
class SourceResult:
    """Everything one source reported for a player."""

    source: str
    rating: Optional[int] = None
    fio: Optional[str] = None
    tournaments: list[Tournament] = field(default_factory=list)


class SourceParser(ABC):
    """Strategy for reading a player's results from one source.

    Subclasses provide the site-specific capabilities; ``fetch`` runs
    them in order and applies the common post-processing.
    """

    source: str = ''

    def fetch(self, player: Player, date_from: Optional[datetime.date] = None) -> Optional[SourceResult]:
        """Load rating and tournaments strictly newer than ``date_from``.

        Returns:
            SourceResult, or None if the player is unknown at this source.
        """
        profile = self.connect_to_profile(player)
        if profile is None:
            return None

        result = SourceResult(
            source=self.source,
            rating=self.parse_rating(profile),
            fio=self.parse_fio(profile),
        )
        section = self.extract_results_section(profile)
        if section is None:
            return result

        for tournament in self.parse_tournament_rows(section, player.identifier(self.source), date_from):
            if tournament.date is None:
                log.warning("Turnier ohne Datum uebersprungen (%s): %s", self.source, tournament)
                continue
            if not _has_source_name(tournament):
                log.warning("Turnier ohne Namen uebersprungen (%s): %s", self.source, tournament)
                continue
            if date_from is not None and tournament.date <= date_from:
                continue
            tournament.games = self.post_process_games(tournament.games)
            result.tournaments.append(tournament)
        return result

    def post_process_games(self, games: list[Game]) -> list[Game]:
        return sort_and_renumber(games)

    def parse_fio(self, profile: Any) -> Optional[str]:
        return None

    @abstractmethod
    def connect_to_profile(self, player: Player) -> Any:
        """Open the player's profile; None if the player has no id here."""

    @abstractmethod
    def extract_results_section(self, profile: Any) -> Any:
        """Return the part of the profile listing the results."""

    @abstractmethod
    def parse_rating(self, profile: Any) -> Optional[int]:
        """Return the player's current rating."""

    @abstractmethod
    def parse_tournament_rows(
        self,
        section: Any,
        player_id: Optional[str],
        date_from: Optional[datetime.date],
    ) -> list[Tournament]:
        """Turn the results section into tournaments with their games."""


class CsvSourceParser(SourceParser):
    """Source reading an exported, already parsed result file.

    One row per game; rows sharing date, tournament id and name form
    one tournament. A row without an opponent only describes the
    tournament itself.
    """

    def __init__(self, source: str, path: str | Path, rating: Optional[int] = None):
        if source not in SOURCES:
            raise ValueError(f"Unbekannte Quelle: {source}")
        self.source = source
        self.path = Path(path)
        self.rating = rating

    def connect_to_profile(self, player: Player) -> Optional[list[dict[str, str]]]:
        return read_rows(self.path)

    def extract_results_section(self, profile: list[dict[str, str]]) -> list[dict[str, str]]:
        return [row for row in profile if any(row.values())]

    def parse_rating(self, profile: list[dict[str, str]]) -> Optional[int]:
        if self.rating is not None:
            return self.rating
        for row in profile:
            if row.get('Player Rating'):
                return parse_int(row['Player Rating'])
        return None

    def parse_fio(self, profile: list[dict[str, str]]) -> Optional[str]:
        for row in profile:
            if row.get('Player'):
                return row['Player']
        return None

    def _tournament_from_row(self, row: dict[str, str], player_id: Optional[str]) -> Tournament:
        tournament = Tournament(
            date=parse_date(row['Date']),
            place=parse_int(row.get('Place', '')),
            player_id=player_id,
        )
        setattr(tournament, f'{self.source}_id', row.get('Tournament ID') or None)
        setattr(tournament, f'{self.source}_name', row.get('Tournament Name') or None)
        setattr(tournament, f'{self.source}_delta',
                parse_decimal(row.get('Tournament Delta', ''), Decimal(0)))
        return tournament

    def _game_from_row(self, row: dict[str, str], order: int) -> Game:
        score = parse_int(row['Score'])
        opponent_score = parse_int(row['Opponent Score'])
        if score is None or opponent_score is None:
            raise ValueError("Ergebnis fehlt")
        game = Game(
            opponent_name=normalize_name(row['Opponent']),
            score=score,
            opponent_score=opponent_score,
            order=order,
            natural_order=order,
        )
        setattr(game, f'opponent_{self.source}_rating', parse_int(row.get('Opponent Rating', '')))
        setattr(game, f'{self.source}_delta', parse_decimal(row.get('Delta', ''), Decimal(0)))
        return game

    def parse_tournament_rows(
        self,
        section: list[dict[str, str]],
        player_id: Optional[str],
        date_from: Optional[datetime.date],
    ) -> list[Tournament]:
        """Group the rows into tournaments owned by ``player_id``.

        ``date_from`` is not applied here; the cutoff is enforced by ``fetch``.
        """
        tournaments: dict[tuple[str, str, str], Tournament] = {}
        counters: dict[tuple[str, str, str], int] = {}

        for row_num, row in enumerate(section, start=2):
            key = (row['Date'], row.get('Tournament ID', ''), row.get('Tournament Name', ''))
            try:
                if key not in tournaments:
                    tournaments[key] = self._tournament_from_row(row, player_id)
                    counters[key] = 0
                if not row.get('Opponent'):
                    continue
                game = self._game_from_row(row, counters[key] + 1)
            except (ValueError, KeyError) as exc:
                log.warning("Zeile %d in %s uebersprungen: %s", row_num, self.path, exc)
                continue
            counters[key] += 1
            tournaments[key].add_game(game)

        log.info("%d Turniere gelesen aus %s (%s)", len(tournaments), self.path, self.source)
        return list(tournaments.values())
