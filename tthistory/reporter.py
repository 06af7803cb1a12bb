"""Report generation for merged histories (CSV, HTML, summary)."""

import csv
import logging
from decimal import Decimal
from pathlib import Path
from typing import Optional

from jinja2 import Environment, FileSystemLoader

from tthistory import SOURCES, Game, Player, Tournament
from tthistory.arena import GameArena
from tthistory.rating import RatingChartData, build_rating_history
from tthistory.stats import PlayerStats, calculate_stats

log = logging.getLogger(__name__)

TEMPLATE_DIR = Path(__file__).resolve().parent.parent / 'templates'

CSV_COLUMNS = [
    'Tournament_Index',
    'Player_ID',
    'Date',
    'Place',
    'RTTF_ID',
    'RTTF_Name',
    'RTTF_Tournament_Delta',
    'TTW_ID',
    'TTW_Name',
    'TTW_Tournament_Delta',
    'Order',
    'Natural_Order',
    'Opponent',
    'Score',
    'Opponent_Score',
    'Opponent_RTTF_Rating',
    'Opponent_TTW_Rating',
    'RTTF_Delta',
    'TTW_Delta',
]


def _fmt(value) -> str:
    return '' if value is None else str(value)


def _game_to_row(index: int, tournament: Tournament, game: Optional[Game]) -> dict:
    """Convert a tournament/game pair to a flat dict for CSV output."""
    row = {
        'Tournament_Index': str(index),
        'Player_ID': _fmt(tournament.player_id),
        'Date': tournament.date.isoformat() if tournament.date else '',
        'Place': _fmt(tournament.place),
        'RTTF_ID': _fmt(tournament.rttf_id),
        'RTTF_Name': _fmt(tournament.rttf_name),
        'RTTF_Tournament_Delta': _fmt(tournament.rttf_delta),
        'TTW_ID': _fmt(tournament.ttw_id),
        'TTW_Name': _fmt(tournament.ttw_name),
        'TTW_Tournament_Delta': _fmt(tournament.ttw_delta),
    }
    if game is not None:
        row.update({
            'Order': _fmt(game.order),
            'Natural_Order': _fmt(game.natural_order),
            'Opponent': game.opponent_name,
            'Score': _fmt(game.score),
            'Opponent_Score': _fmt(game.opponent_score),
            'Opponent_RTTF_Rating': _fmt(game.opponent_rttf_rating),
            'Opponent_TTW_Rating': _fmt(game.opponent_ttw_rating),
            'RTTF_Delta': _fmt(game.rttf_delta),
            'TTW_Delta': _fmt(game.ttw_delta),
        })
    return row


def write_csv_report(tournaments: list[Tournament], output_path: Path) -> None:
    """Write the merged history as a CSV report, one row per game.

    Tournaments without games get a single row without game columns.
    Uses UTF-8 with BOM (utf-8-sig) and semicolon delimiter for
    compatibility with German Excel.

    Args:
        tournaments: Merged tournament list.
        output_path: Path for the output CSV file.
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    arena = GameArena.from_tournaments(tournaments)

    rows = 0
    with open(output_path, 'w', newline='', encoding='utf-8-sig') as f:
        writer = csv.DictWriter(
            f, fieldnames=CSV_COLUMNS, delimiter=';', extrasaction='ignore',
        )
        writer.writeheader()
        for index, tournament, game in arena.rows():
            writer.writerow(_game_to_row(index, tournament, game))
            rows += 1

    log.info("CSV-Report geschrieben: %s (%d Zeilen)", output_path, rows)


def _chart_rows(chart: RatingChartData) -> list[dict]:
    """One row per axis date with the rating of every source that has a curve."""
    rows = []
    for i, day in enumerate(chart.dates):
        row: dict = {'date': day.isoformat()}
        for source in SOURCES:
            values = chart.series[source].values
            row[source] = values[i] if values else None
        rows.append(row)
    return rows


def write_html_report(
    player: Player,
    output_path: Path,
    stats: Optional[PlayerStats] = None,
    chart: Optional[RatingChartData] = None,
) -> None:
    """Write the merged history as an HTML report using Jinja2.

    Args:
        player: Player with the merged tournament list.
        output_path: Path for the output HTML file.
        stats: Precomputed statistics (computed if omitted).
        chart: Precomputed rating history (computed if omitted).
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    stats = stats or calculate_stats(player.tournaments)
    chart = chart or build_rating_history(player.tournaments, player)

    env = Environment(
        loader=FileSystemLoader(str(TEMPLATE_DIR)),
        autoescape=True,
    )
    template = env.get_template('report.html')

    tournaments = sorted(
        player.tournaments,
        key=lambda t: (t.date is None, t.date),
        reverse=True,
    )
    html = template.render(
        player=player,
        stats=stats,
        sources=SOURCES,
        tournaments=tournaments,
        chart_rows=_chart_rows(chart),
        maxima={s: chart.series[s] for s in SOURCES if not chart.series[s].is_empty},
    )

    output_path.write_text(html, encoding='utf-8')
    log.info("HTML-Report geschrieben: %s", output_path)


def _fmt_max(rating: Decimal, day) -> str:
    return f'{rating} ({day.isoformat()})' if day else '-'


def print_summary(player: Player, stats: Optional[PlayerStats] = None,
                  chart: Optional[RatingChartData] = None) -> None:
    """Print a summary of the merged history to stdout.

    Args:
        player: Player with the merged tournament list.
        stats: Precomputed statistics (computed if omitted).
        chart: Precomputed rating history (computed if omitted).
    """
    stats = stats or calculate_stats(player.tournaments)
    chart = chart or build_rating_history(player.tournaments, player)
    last = stats.last_game_date.isoformat() if stats.total_tours else '-'

    print(f"\n=== Spielerhistorie: {player.fio} ===")
    print(f"Turniere gesamt:           {stats.total_tours:>5}")
    print(f"  - RTTF:                  {stats.rttf_tours:>5}")
    print(f"  - TTW:                   {stats.ttw_tours:>5}")
    print(f"Spiele gesamt:             {stats.total_games:>5}  ({stats.win_rate_formatted()})")
    print(f"  - Siege / Niederlagen:   {stats.total_wins:>5} / {stats.total_losses}")
    print(f"  - RTTF:                  {stats.rttf_wins:>5} / {stats.rttf_losses}"
          f"  ({stats.win_rate_formatted('rttf')})")
    print(f"  - TTW:                   {stats.ttw_wins:>5} / {stats.ttw_losses}"
          f"  ({stats.win_rate_formatted('ttw')})")
    print("---")
    print(f"Platz 1 / 2 / 3:           {stats.first_places:>5} / {stats.second_places}"
          f" / {stats.third_places}")
    print(f"Letztes Turnier:           {last:>10}")
    print(f"Hoechstwert RTTF:          {_fmt_max(chart.rttf.max_rating, chart.rttf.max_date)}")
    print(f"Hoechstwert TTW:           {_fmt_max(chart.ttw.max_rating, chart.ttw.max_date)}")
    print()
