"""Name normalization for cross-source identity comparison."""

import re
from typing import Optional

# Matches any sequence of whitespace (including Unicode whitespace like U+2006)
_WHITESPACE_RE = re.compile(r'\s+')

# Letters one source spells with diacritics and the other without
_FOLD_TABLE = str.maketrans({'ё': 'е', 'Ё': 'Е'})


def normalize_whitespace(value: str) -> str:
    """Normalize whitespace in a string value.

    Collapses any sequence of whitespace (including Unicode whitespace)
    into a single space and strips leading/trailing whitespace.

    Args:
        value: Raw string value.

    Returns:
        Normalized string.
    """
    return _WHITESPACE_RE.sub(' ', value).strip()


def normalize_name(full_name: Optional[str]) -> str:
    """Shorten a full name to the canonical "Surname I.O." form.

    The first token is kept verbatim as the surname, every further token
    is reduced to its first character followed by a dot. A single token
    is returned as is. None and blank input give an empty string.

    Args:
        full_name: Raw name, e.g. "Иванов Иван Иванович".

    Returns:
        Canonical short name, e.g. "Иванов И.И.".
    """
    if full_name is None:
        return ''
    parts = normalize_whitespace(full_name.translate(_FOLD_TABLE)).split(' ')
    if parts == ['']:
        return ''

    surname, rest = parts[0], parts[1:]
    initials = ''.join(f'{part[0]}.' for part in rest)
    if not initials:
        return surname
    return f'{surname} {initials}'
