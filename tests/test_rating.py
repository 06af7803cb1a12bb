"""Tests for tthistory.rating module."""

import datetime
from decimal import Decimal

import pytest

from tthistory import RTTF, TTW, Player, Tournament
from tthistory.rating import (
    ANCHOR_DATE,
    build_rating_history,
    build_series,
    delta_map,
    find_max,
    rating_dates,
    reconstruct,
)

D1 = datetime.date(2024, 1, 10)
D2 = datetime.date(2024, 2, 20)
D3 = datetime.date(2024, 3, 30)


def _tournament(day, rttf=None, ttw=None) -> Tournament:
    return Tournament(
        date=day,
        rttf_name='RTTF' if rttf is not None else None,
        rttf_delta=Decimal(rttf) if rttf is not None else None,
        ttw_name='TTW' if ttw is not None else None,
        ttw_delta=Decimal(ttw) if ttw is not None else None,
    )


class TestReconstruct:
    """Tests for walking deltas backwards."""

    def test_example_series(self):
        dates = [ANCHOR_DATE, D1, D2]
        deltas = {D1: Decimal(20), D2: Decimal(-5)}
        assert reconstruct(dates, 1500, deltas) == [Decimal(1485), Decimal(1505), Decimal(1500)]

    def test_aligned_with_dates(self):
        dates = [ANCHOR_DATE, D1, D2, D3]
        values = reconstruct(dates, 1000, {D3: Decimal(10)})
        assert len(values) == len(dates)
        assert values == [Decimal(990), Decimal(990), Decimal(990), Decimal(1000)]

    def test_no_rating_means_no_history(self):
        dates = [ANCHOR_DATE, D1]
        assert reconstruct(dates, None, {D1: Decimal(3)}) == []
        assert reconstruct(dates, 0, {D1: Decimal(3)}) == []

    def test_exact_decimal_arithmetic(self):
        dates = [ANCHOR_DATE, D1, D2, D3]
        deltas = {D1: Decimal('0.1'), D2: Decimal('0.1'), D3: Decimal('0.1')}
        values = reconstruct(dates, 100, deltas)
        assert values[0] == Decimal('99.7')
        assert str(values[0]) == '99.7'

    def test_only_anchor(self):
        assert reconstruct([ANCHOR_DATE], 1200, {}) == [Decimal(1200)]


class TestFindMax:
    """Tests for the maximum search."""

    def test_max_and_date(self):
        dates = [ANCHOR_DATE, D1, D2]
        values = [Decimal(1485), Decimal(1505), Decimal(1500)]
        assert find_max(values, dates) == (Decimal(1505), D1)

    def test_tie_keeps_earliest(self):
        dates = [ANCHOR_DATE, D1, D2]
        values = [Decimal(10), Decimal(12), Decimal(12)]
        assert find_max(values, dates) == (Decimal(12), D1)

    def test_first_value_can_be_max(self):
        dates = [ANCHOR_DATE, D1]
        assert find_max([Decimal(9), Decimal(8)], dates) == (Decimal(9), ANCHOR_DATE)

    def test_empty(self):
        assert find_max([], []) == (Decimal(0), None)


class TestDeltaMapAndDates:
    """Tests for collecting deltas and building the date axis."""

    def test_sums_same_date(self):
        tournaments = [_tournament(D1, rttf='2.5'), _tournament(D1, rttf='-1'), _tournament(D2, rttf='4')]
        assert delta_map(tournaments, RTTF) == {D1: Decimal('1.5'), D2: Decimal('4')}

    def test_ignores_missing_delta_and_date(self):
        tournaments = [_tournament(D1, ttw='3'), _tournament(None, rttf='5'), _tournament(D2, rttf='1')]
        assert delta_map(tournaments, RTTF) == {D2: Decimal('1')}

    def test_zero_delta_is_recorded(self):
        assert delta_map([_tournament(D1, rttf='0')], RTTF) == {D1: Decimal(0)}

    def test_dates_sorted_with_anchor(self):
        dates = rating_dates({D2: Decimal(1)}, {D1: Decimal(1), D2: Decimal(2)})
        assert dates == [ANCHOR_DATE, D1, D2]

    def test_dates_without_deltas(self):
        assert rating_dates({}) == [ANCHOR_DATE]


class TestBuildSeries:
    """Tests for single-source reconstruction."""

    def test_own_axis(self):
        tournaments = [_tournament(D1, rttf='20'), _tournament(D2, rttf='-5'), _tournament(D3, ttw='7')]
        series = build_series(tournaments, 1500, RTTF)
        assert series.values == [Decimal(1485), Decimal(1505), Decimal(1500)]
        assert series.max_rating == Decimal(1505)
        assert series.max_date == D1

    def test_empty_when_no_rating(self):
        series = build_series([_tournament(D1, rttf='20')], None, RTTF)
        assert series.is_empty
        assert series.max_date is None


class TestBuildRatingHistory:
    """Tests for the two-source chart data."""

    def test_shared_axis(self):
        tournaments = [_tournament(D1, rttf='20'), _tournament(D2, ttw='-10')]
        player = Player(fio='Сидоров А.', rttf_rating=1500, ttw_rating=600)
        chart = build_rating_history(tournaments, player)
        assert chart.dates == [ANCHOR_DATE, D1, D2]
        assert chart.rttf.values == [Decimal(1480), Decimal(1500), Decimal(1500)]
        assert chart.ttw.values == [Decimal(610), Decimal(610), Decimal(600)]
        assert chart.ttw.max_rating == Decimal(610)
        assert chart.ttw.max_date == ANCHOR_DATE

    def test_source_without_rating_has_empty_series(self):
        tournaments = [_tournament(D1, rttf='20', ttw='5')]
        player = Player(rttf_rating=1500, ttw_rating=None)
        chart = build_rating_history(tournaments, player)
        assert not chart.rttf.is_empty
        assert chart.ttw.is_empty
        assert chart.points(TTW) == []
        assert chart.points(RTTF) == [(ANCHOR_DATE, Decimal(1480)), (D1, Decimal(1500))]

    def test_empty_history(self):
        chart = build_rating_history([], Player(rttf_rating=1500))
        assert chart.dates == [ANCHOR_DATE]
        assert chart.rttf.values == [Decimal(1500)]

    def test_none_arguments(self):
        with pytest.raises(ValueError):
            build_rating_history(None, Player())
        with pytest.raises(ValueError):
            build_rating_history([], None)
