"""CSV reader for exported source results with encoding detection and field parsing."""

import csv
import datetime
import io
import logging
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Optional

from tthistory.names import normalize_whitespace

log = logging.getLogger(__name__)

REQUIRED_COLUMNS = {'Date', 'Tournament ID', 'Tournament Name', 'Opponent',
                    'Score', 'Opponent Score'}

DATE_FORMATS = ('%d.%m.%Y', '%Y-%m-%d')


def detect_encoding(path: Path) -> str:
    """Detect file encoding by checking for BOM bytes.

    Args:
        path: Path to the CSV file.

    Returns:
        Encoding string suitable for open().
    """
    with open(path, 'rb') as f:
        bom = f.read(2)
    if bom == b'\xff\xfe':
        return 'utf-16-le'
    return 'utf-8-sig'


def parse_date(value: str) -> datetime.date:
    """Parse a date in DD.MM.YYYY or ISO format.

    Raises:
        ValueError: If the value matches none of the formats.
    """
    for fmt in DATE_FORMATS:
        try:
            return datetime.datetime.strptime(value, fmt).date()
        except ValueError:
            continue
    raise ValueError(f"Ungueltiges Datum: {value!r}")


def parse_decimal(value: str, default: Optional[Decimal] = None) -> Optional[Decimal]:
    """Parse a signed decimal; typographic minus and decimal comma are accepted.

    Raises:
        ValueError: If the value is not a number.
    """
    if not value:
        return default
    text = value.replace('\u2212', '-').replace(',', '.').replace(' ', '')
    try:
        return Decimal(text)
    except InvalidOperation as exc:
        raise ValueError(f"Ungueltige Zahl: {value!r}") from exc


def parse_int(value: str) -> Optional[int]:
    """Parse an integer, rounding decimal ratings like "512.6". Empty -> None."""
    if not value:
        return None
    number = parse_decimal(value)
    return int(number.to_integral_value())


def read_rows(path: str | Path, required_cols: set[str] = REQUIRED_COLUMNS) -> list[dict[str, str]]:
    """Read a tab-separated export into whitespace-normalized row dicts.

    Handles UTF-16LE (with BOM) and UTF-8 encoded files automatically.

    Args:
        path: Path to the CSV file.
        required_cols: Columns that must be present in the header.

    Returns:
        List of rows keyed by column name.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If required columns are missing.
    """
    path = Path(path)
    encoding = detect_encoding(path)

    with open(path, 'r', encoding=encoding) as f:
        content = f.read()

    # Strip BOM if present
    content = content.lstrip('\ufeff')

    reader = csv.DictReader(io.StringIO(content), delimiter='\t')

    if reader.fieldnames is None:
        raise ValueError(f"Datei {path} ist leer oder hat keine Header-Zeile.")
    actual_cols = {normalize_whitespace(c) for c in reader.fieldnames}
    missing = required_cols - actual_cols
    if missing:
        raise ValueError(
            f"Fehlende Spalten in {path}: {', '.join(sorted(missing))}"
        )

    rows = [
        {normalize_whitespace(k): normalize_whitespace(v or '')
         for k, v in row.items() if k is not None}
        for row in reader
    ]
    log.info("%d Zeilen gelesen aus %s", len(rows), path)
    return rows
