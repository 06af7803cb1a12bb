"""Shared test fixtures."""

from pathlib import Path

import pytest


EXPORT_COLUMNS = [
    'Date', 'Tournament ID', 'Tournament Name', 'Tournament Delta', 'Place',
    'Opponent', 'Opponent Rating', 'Score', 'Opponent Score', 'Delta',
    'Player', 'Player Rating',
]


def _export_text(rows: list[dict]) -> str:
    lines = ['\t'.join(EXPORT_COLUMNS)]
    for row in rows:
        lines.append('\t'.join(str(row.get(c, '')) for c in EXPORT_COLUMNS))
    return '\n'.join(lines) + '\n'


@pytest.fixture
def write_export(tmp_path):
    """Factory writing a tab-separated source export into tmp_path."""

    def _write(name: str, rows: list[dict], utf16: bool = False) -> Path:
        path = tmp_path / name
        text = _export_text(rows)
        if utf16:
            path.write_bytes(b'\xff\xfe' + text.encode('utf-16-le'))
        else:
            path.write_text(text, encoding='utf-8')
        return path

    return _write


@pytest.fixture
def rttf_rows() -> list[dict]:
    """One RTTF tournament with six games and one tournament without games."""
    common = {
        'Date': '15.03.2024', 'Tournament ID': '901', 'Tournament Name': 'Лига-Весна',
        'Tournament Delta': '12.5', 'Place': '2', 'Player': 'Сидоров Алексей',
        'Player Rating': '520',
    }
    games = [
        ('Иванов Иван', '480', 3, 1, '4.1'),
        ('Петров Пётр', '530', 1, 3, '−3.2'),
        ('Смирнов Олег', '470', 3, 0, '2.0'),
        ('Кузнецов Илья', '510', 3, 2, '3.3'),
        ('Попов Антон', '500', 3, 1, '3.0'),
        ('Васильев Павел', '490', 3, 2, '3.3'),
    ]
    rows = [
        dict(common, **{'Opponent': name, 'Opponent Rating': rating, 'Score': score,
                        'Opponent Score': opp, 'Delta': delta})
        for name, rating, score, opp, delta in games
    ]
    rows.append({'Date': '01.02.2024', 'Tournament ID': '850',
                 'Tournament Name': 'Кубок-Зима', 'Tournament Delta': '−4',
                 'Place': '1'})
    return rows


@pytest.fixture
def ttw_rows() -> list[dict]:
    """The same March tournament as reported by TTW, plus one TTW-only event."""
    common = {'Date': '15.03.2024', 'Tournament ID': 't77', 'Tournament Name': 'Весенний турнир',
              'Tournament Delta': '8', 'Player': 'Сидоров Алексей Викторович',
              'Player Rating': '610'}
    games = [
        ('Васильев Павел', '601', 3, 2, '1.5'),
        ('Иванов Иван', '580', 3, 1, '2.5'),
        ('Петров Петр', '640', 1, 3, '-2'),
        ('Смирнов Олег', '560', 3, 0, '1'),
        ('Кузнецов Илья', '600', 3, 2, '2'),
        ('Попов Антон', '590', 3, 1, '3'),
    ]
    rows = [
        dict(common, **{'Opponent': name, 'Opponent Rating': rating, 'Score': score,
                        'Opponent Score': opp, 'Delta': delta})
        for name, rating, score, opp, delta in games
    ]
    rows.append({'Date': '20.04.2024', 'Tournament ID': 't80',
                 'Tournament Name': 'Апрельский', 'Tournament Delta': '5',
                 'Opponent': 'Орлов Денис', 'Opponent Rating': '605',
                 'Score': 3, 'Opponent Score': 0, 'Delta': '5'})
    return rows
