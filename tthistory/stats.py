"""Aggregate statistics over a merged tournament list."""

import datetime
from dataclasses import dataclass
from typing import Optional

from tthistory import SOURCES, Game, Tournament


@dataclass
class PlayerStats:
    """Summary counters of a player's tournament history."""

    total_tours: int = 0
    rttf_tours: int = 0
    ttw_tours: int = 0
    rttf_wins: int = 0
    rttf_losses: int = 0
    ttw_wins: int = 0
    ttw_losses: int = 0
    total_wins: int = 0
    total_losses: int = 0
    first_places: int = 0
    second_places: int = 0
    third_places: int = 0
    last_game_date: datetime.date = datetime.date.min

    @property
    def total_games(self) -> int:
        return self.total_wins + self.total_losses

    def games(self, source: Optional[str] = None) -> int:
        """Decided games of a source, or of all sources for None."""
        if source is None:
            return self.total_games
        return getattr(self, f'{source}_wins') + getattr(self, f'{source}_losses')

    def win_rate(self, source: Optional[str] = None) -> float:
        """Win rate in percent (0.0 without games)."""
        wins = self.total_wins if source is None else getattr(self, f'{source}_wins')
        total = self.games(source)
        return wins / total * 100 if total > 0 else 0.0

    def win_rate_formatted(self, source: Optional[str] = None) -> str:
        return f'{self.win_rate(source):.1f}%'

    def __str__(self) -> str:
        return (
            f"Turniere: {self.total_tours} | Spiele: {self.total_games} "
            f"(+{self.total_wins} -{self.total_losses}) | "
            f"RTTF: +{self.rttf_wins} -{self.rttf_losses} | "
            f"TTW: +{self.ttw_wins} -{self.ttw_losses}"
        )


def _has_name(tournament: Tournament, source: str) -> bool:
    name = getattr(tournament, f'{source}_name')
    return bool(name and name.strip())


def _count_game(stats: PlayerStats, game: Game) -> None:
    if game.score is None or game.opponent_score is None:
        return

    if game.score > game.opponent_score:
        outcome = 'wins'
    elif game.score < game.opponent_score:
        outcome = 'losses'
    else:
        return

    setattr(stats, f'total_{outcome}', getattr(stats, f'total_{outcome}') + 1)
    for source in SOURCES:
        if getattr(game, f'{source}_delta') is not None:
            attr = f'{source}_{outcome}'
            setattr(stats, attr, getattr(stats, attr) + 1)


def calculate_stats(tournaments: Optional[list[Tournament]]) -> PlayerStats:
    """Compute summary statistics in a single pass.

    A game counts for a source only if it carries that source's delta.
    Games without a score are skipped, draws count as neither win nor
    loss.

    Args:
        tournaments: Merged tournament list (may be None).

    Returns:
        PlayerStats; all zero and ``date.min`` for an empty history.
    """
    stats = PlayerStats()
    last_date: Optional[datetime.date] = None

    for tournament in tournaments or []:
        stats.total_tours += 1
        for source in SOURCES:
            if _has_name(tournament, source):
                attr = f'{source}_tours'
                setattr(stats, attr, getattr(stats, attr) + 1)

        if tournament.date is not None and (last_date is None or tournament.date > last_date):
            last_date = tournament.date

        if tournament.place == 1:
            stats.first_places += 1
        elif tournament.place == 2:
            stats.second_places += 1
        elif tournament.place == 3:
            stats.third_places += 1

        for game in tournament.games or []:
            _count_game(stats, game)

    stats.last_game_date = last_date or datetime.date.min
    return stats
