"""Flat game storage with per-tournament index ranges."""

from dataclasses import dataclass, field

from tthistory import Game, Tournament


@dataclass
class GameArena:
    """All games of a tournament list in one indexed collection.

    Tournaments reference their games by a ``range`` into ``games``
    instead of games pointing back to their tournament.
    """

    tournaments: list[Tournament] = field(default_factory=list)
    games: list[Game] = field(default_factory=list)
    spans: list[range] = field(default_factory=list)

    @classmethod
    def from_tournaments(cls, tournaments: list[Tournament]) -> 'GameArena':
        arena = cls()
        for tournament in tournaments:
            arena.add(tournament)
        return arena

    def add(self, tournament: Tournament) -> int:
        """Append a tournament and its games. Returns the tournament index."""
        start = len(self.games)
        self.games.extend(tournament.games or [])
        self.tournaments.append(tournament)
        self.spans.append(range(start, len(self.games)))
        return len(self.tournaments) - 1

    def games_of(self, index: int) -> list[Game]:
        span = self.spans[index]
        return self.games[span.start:span.stop]

    def rows(self):
        """Yield (index, tournament, game) in storage order.

        A tournament without games yields once with ``game=None``.
        """
        for index, tournament in enumerate(self.tournaments):
            for game in self.games_of(index) or [None]:
                yield index, tournament, game
