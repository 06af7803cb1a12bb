"""Core module for tt-history-merger."""

from dataclasses import dataclass, field
import datetime
from decimal import Decimal
from typing import Optional

from tthistory.names import normalize_name

RTTF = 'rttf'
TTW = 'ttw'
SOURCES = (RTTF, TTW)


@dataclass
class Game:
    """A single game of the player inside a tournament."""

    opponent_name: str = ''
    score: Optional[int] = None
    opponent_score: Optional[int] = None
    order: Optional[int] = None           # 1..N after merge
    natural_order: Optional[int] = None   # chronological order as reported
    opponent_rttf_rating: Optional[int] = None
    opponent_ttw_rating: Optional[int] = None
    rttf_delta: Optional[Decimal] = None
    ttw_delta: Optional[Decimal] = None

    def __str__(self) -> str:
        return f"Game{{{self.score}:{self.opponent_score} rttf: {self.rttf_delta} ttw: {self.ttw_delta}}}"


@dataclass(frozen=True)
class GameKey:
    """Dedup key for adding games to a tournament."""

    order: Optional[int]
    opponent_name: str

    @classmethod
    def of(cls, game: Game) -> 'GameKey':
        return cls(game.order, normalize_name(game.opponent_name))


@dataclass
class Tournament:
    """A tournament result as reported by one or both sources."""

    date: Optional[datetime.date] = None
    place: Optional[int] = None
    rttf_id: Optional[str] = None
    rttf_name: Optional[str] = None
    rttf_delta: Optional[Decimal] = None
    ttw_id: Optional[str] = None
    ttw_name: Optional[str] = None
    ttw_delta: Optional[Decimal] = None
    games: list[Game] = field(default_factory=list)
    player_id: Optional[str] = None

    def add_game(self, game: Game) -> bool:
        """Append a game unless one with the same GameKey is present.

        Returns:
            True if the game was added.
        """
        key = GameKey.of(game)
        if any(GameKey.of(g) == key for g in self.games):
            return False
        self.games.append(game)
        return True

    def has_medal(self) -> bool:
        return self.place is not None and 0 < self.place <= 3

    def __str__(self) -> str:
        return (
            f"Tournament{{date='{self.date}', rttf_name='{self.rttf_name}', "
            f"ttw_name='{self.ttw_name}', games={len(self.games)}}}"
        )


@dataclass
class Player:
    """A player known to one or both sources."""

    fio: str = ''
    rttf_id: Optional[str] = None
    ttw_id: Optional[str] = None
    rttf_rating: Optional[int] = None
    ttw_rating: Optional[int] = None
    tournaments: list[Tournament] = field(default_factory=list)

    def identifier(self, source: str) -> Optional[str]:
        """Return the player's id at the given source (None if unknown)."""
        if source not in SOURCES:
            return None
        return getattr(self, f'{source}_id')

    def rating(self, source: str) -> Optional[int]:
        if source not in SOURCES:
            return None
        return getattr(self, f'{source}_rating')

    def __str__(self) -> str:
        return f"{self.fio.upper()}, RTTF={self.rttf_rating}, TTW={self.ttw_rating}"
