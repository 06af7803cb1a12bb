"""tt-history-merger – CLI-Tool zum Zusammenfuehren von RTTF- und TTW-Turnierhistorien."""

import argparse
import logging
import sys
from pathlib import Path

from tthistory import RTTF, TTW, Player
from tthistory.matching import DEFAULT_MIN_OVERLAP
from tthistory.rating import build_rating_history
from tthistory.reader import parse_date
from tthistory.reconcile import CollaboratorError, update_player
from tthistory.reporter import print_summary, write_csv_report, write_html_report
from tthistory.sources import CsvSourceParser
from tthistory.stats import calculate_stats


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        description='Zusammenfuehren von RTTF- und TTW-Ergebnisexporten zu einer Spielerhistorie.',
        prog='merger.py',
    )
    parser.add_argument(
        '--rttf', type=Path,
        help='Pfad zum RTTF-Export (TSV)',
    )
    parser.add_argument(
        '--ttw', type=Path,
        help='Pfad zum TTW-Export (TSV)',
    )
    parser.add_argument(
        '--rttf-rating', type=int,
        help='Aktuelles RTTF-Rating (ueberschreibt den Wert aus dem Export)',
    )
    parser.add_argument(
        '--ttw-rating', type=int,
        help='Aktuelles TTW-Rating (ueberschreibt den Wert aus dem Export)',
    )
    parser.add_argument(
        '--fio', default='',
        help='Anzeigename des Spielers (Standard: aus dem Export)',
    )
    parser.add_argument(
        '--since', type=parse_date,
        help='Nur Turniere nach diesem Datum uebernehmen (TT.MM.JJJJ)',
    )
    parser.add_argument(
        '--min-overlap', type=int, default=DEFAULT_MIN_OVERLAP,
        help=f'Mindestanzahl gleicher Spiele fuer einen Turnier-Match (Standard: {DEFAULT_MIN_OVERLAP})',
    )
    parser.add_argument(
        '--output', required=True, type=Path,
        help='Pfad fuer die Report-Ausgabe (CSV)',
    )
    parser.add_argument(
        '--html', action='store_true',
        help='Zusaetzlich einen HTML-Report erzeugen',
    )
    parser.add_argument(
        '--summary', action='store_true',
        help='Zusammenfassung auf stdout ausgeben',
    )
    return parser


def main() -> None:
    """Main entry point."""
    logging.basicConfig(
        level=logging.INFO,
        format='%(levelname)s: %(message)s',
    )

    parser = build_parser()
    args = parser.parse_args()

    if not args.rttf and not args.ttw:
        parser.error('Mindestens --rttf oder --ttw muss angegeben werden.')
    if args.min_overlap < 1:
        parser.error('--min-overlap muss mindestens 1 sein.')

    parsers = {}
    if args.rttf:
        parsers[RTTF] = CsvSourceParser(RTTF, args.rttf, args.rttf_rating)
    if args.ttw:
        parsers[TTW] = CsvSourceParser(TTW, args.ttw, args.ttw_rating)

    player = Player()
    try:
        update_player(
            player, parsers, args.since,
            min_overlap=args.min_overlap,
        )
    except CollaboratorError as exc:
        logging.error("%s", exc)
        sys.exit(1)
    if args.fio:
        player.fio = args.fio

    stats = calculate_stats(player.tournaments)
    chart = build_rating_history(player.tournaments, player)

    write_csv_report(player.tournaments, args.output)

    if args.html:
        write_html_report(player, args.output.with_suffix('.html'), stats, chart)

    if args.summary:
        print_summary(player, stats, chart)


if __name__ == '__main__':
    main()
