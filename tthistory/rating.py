"""Rating history reconstruction from current ratings and per-date deltas."""

import datetime
import logging
from collections import defaultdict
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Optional

from tthistory import RTTF, SOURCES, TTW, Player, Tournament

log = logging.getLogger(__name__)

# Baseline before any recorded tournament
ANCHOR_DATE = datetime.date(2000, 1, 1)


@dataclass
class RatingSeries:
    """Reconstructed rating curve of one source."""

    values: list[Decimal] = field(default_factory=list)
    max_rating: Decimal = Decimal(0)
    max_date: Optional[datetime.date] = None

    @property
    def is_empty(self) -> bool:
        return not self.values


@dataclass
class RatingChartData:
    """Rating curves of both sources on a shared date axis."""

    dates: list[datetime.date]
    series: dict[str, RatingSeries]

    @property
    def rttf(self) -> RatingSeries:
        return self.series[RTTF]

    @property
    def ttw(self) -> RatingSeries:
        return self.series[TTW]

    def points(self, source: str) -> list[tuple[datetime.date, Decimal]]:
        """(date, rating) pairs of a source; empty if it has no history."""
        return list(zip(self.dates, self.series[source].values))


def delta_map(tournaments: list[Tournament], source: str) -> dict[datetime.date, Decimal]:
    """Sum the source's tournament deltas per date.

    Tournaments without a date or without a delta for ``source`` are
    ignored.
    """
    deltas: dict[datetime.date, Decimal] = defaultdict(Decimal)
    for t in tournaments:
        delta = getattr(t, f'{source}_delta')
        if t.date is None or delta is None:
            continue
        deltas[t.date] += Decimal(delta)
    return dict(deltas)


def rating_dates(*deltas: dict[datetime.date, Decimal]) -> list[datetime.date]:
    """Sorted union of all delta dates plus the anchor date."""
    dates = {ANCHOR_DATE}
    for d in deltas:
        dates.update(d)
    return sorted(dates)


def reconstruct(
    dates: list[datetime.date],
    current_rating: Optional[int],
    deltas: dict[datetime.date, Decimal],
) -> list[Decimal]:
    """Walk the deltas backwards from the current rating.

    The latest date carries the current rating; the value before date D
    is the value at D minus the delta at D (zero if none recorded).

    Args:
        dates: Ascending date axis, anchor first.
        current_rating: Rating today. None or 0 means no history.
        deltas: Delta per date for one source.

    Returns:
        Ratings aligned index for index with ``dates``, or an empty list.
    """
    if not current_rating or not dates:
        return []

    rating = Decimal(current_rating)
    values = [rating]
    for day in reversed(dates[1:]):
        rating -= deltas.get(day, Decimal(0))
        values.append(rating)
    values.reverse()
    return values


def find_max(
    values: list[Decimal],
    dates: list[datetime.date],
) -> tuple[Decimal, Optional[datetime.date]]:
    """Find the highest rating and the first date it was reached."""
    if not values:
        return Decimal(0), None
    best, best_date = values[0], dates[0]
    for value, day in zip(values, dates):
        if value > best:
            best, best_date = value, day
    return best, best_date


def build_series(
    tournaments: list[Tournament],
    current_rating: Optional[int],
    source: str,
    dates: Optional[list[datetime.date]] = None,
) -> RatingSeries:
    """Reconstruct the rating curve of a single source.

    Args:
        tournaments: Merged tournament list.
        current_rating: Current rating at ``source``.
        source: RTTF or TTW.
        dates: Shared date axis; defaults to this source's dates plus anchor.
    """
    deltas = delta_map(tournaments, source)
    if dates is None:
        dates = rating_dates(deltas)
    values = reconstruct(dates, current_rating, deltas)
    max_rating, max_date = find_max(values, dates)
    return RatingSeries(values=values, max_rating=max_rating, max_date=max_date)


def build_rating_history(tournaments: list[Tournament], player: Player) -> RatingChartData:
    """Reconstruct both sources' rating curves on a shared date axis.

    Raises:
        ValueError: If ``tournaments`` or ``player`` is None.
    """
    if tournaments is None or player is None:
        raise ValueError("Turniere und Spieler duerfen nicht None sein.")

    dates = rating_dates(*(delta_map(tournaments, s) for s in SOURCES))
    series = {
        s: build_series(tournaments, player.rating(s), s, dates)
        for s in SOURCES
    }
    for s, rs in series.items():
        if rs.is_empty:
            log.info("Keine Ratinghistorie fuer %s (%s)", player.fio, s)
    return RatingChartData(dates=dates, series=series)
