from __future__ import annotations

import re
from datetime import date, datetime

_BIRTH_DATE_RE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$")
_UNSET_DATE = "0000-00-00"
MIN_BIRTH_YEAR = 1900
NEUTRAL_HOUR = 12

LOWERCASE_CONNECTORS = frozenset({"da", "de", "do", "das", "dos", "e"})


# ---------------------------------------------------------------------- nomes -----
def _is_all_caps(name: str) -> bool:
    return name == name.upper() and name != name.lower()


def _capitalize_segment(segment: str) -> str:
    if not segment or segment in LOWERCASE_CONNECTORS:
        return segment
    return segment[0].upper() + segment[1:]


def normalize_name(raw: str | None) -> str:
    """
    'JOÃO DA SILVA' → 'João da Silva'.

    Só altera nomes inteiramente em maiúsculas; nomes já digitados com
    caixa mista voltam como vieram (apenas sem espaços nas pontas).
    """
    name = (raw or "").strip()
    if not name or not _is_all_caps(name):
        return name

    parts = [p for p in name.lower().split(" ") if p]
    return " ".join(
        "-".join(_capitalize_segment(seg) for seg in part.split("-"))
        for part in parts
    )


def looks_machine_generated(name: str | None) -> bool:
    """Nome salvo automaticamente a partir do número (só dígitos)."""
    return bool(name) and name.isascii() and name.isdigit()


# ---------------------------------------------------------------------- datas -----
def parse_birth_date(raw: str | None, *, now: datetime | None = None) -> datetime | None:
    """
    Aceita apenas 'YYYY-MM-DD'. Rejeita o sentinela '0000-00-00', anos < 1900,
    dias inexistentes (ex.: 2024-02-30) e datas futuras.

    A data volta às 12:00 para não "escorregar" de dia ao trocar de fuso.
    """
    if not raw or raw == _UNSET_DATE:
        return None
    match = _BIRTH_DATE_RE.match(raw)
    if not match:
        return None

    year, month, day = (int(g) for g in match.groups())
    if year < MIN_BIRTH_YEAR:
        return None
    try:
        parsed = datetime(year, month, day, NEUTRAL_HOUR, 0, 0)
    except ValueError:
        return None

    if parsed > (now or datetime.now()):
        return None
    return parsed


def _as_date(value: date) -> date:
    return value.date() if isinstance(value, datetime) else value


def same_calendar_day(a: date | None, b: date | None) -> bool:
    """Compara só ano/mês/dia, ignorando a hora."""
    if a is None or b is None:
        return False
    return _as_date(a) == _as_date(b)


def matches_day(birth_date: date, today: date) -> bool:
    return birth_date.month == today.month and birth_date.day == today.day
