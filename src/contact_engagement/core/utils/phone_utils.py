from __future__ import annotations

import re

BR_COUNTRY_CODE = "55"


def only_digits(s: str | None) -> str:
    return re.sub(r"\D+", "", s or "")


def _strip_trunk_prefix(d: str) -> str:
    """
    Remove o prefixo de discagem nacional:
      - 11 dígitos ('0' + DDD + fixo)         → remove um '0'
      - 12-13 dígitos ('0' + operadora + ...) → remove '0XX' se sobrar
        um número nacional válido, senão remove só o '0'
    """
    if len(d) == 11:  # noqa: PLR2004
        return d[1:]
    if len(d) in (12, 13):
        without_carrier = d[3:]
        if len(without_carrier) in (10, 11):
            return without_carrier
        return d[1:]
    return d


def normalize_phone(raw: str | None) -> str | None:
    """
    Converte um telefone livre no formato canônico (só dígitos, com DDI 55).

    Retorna None quando não há como chegar a 12 ou 13 dígitos.
    O resultado é idempotente: normalize_phone(normalize_phone(x)) == normalize_phone(x).
    """
    d = only_digits(raw)
    if not d.strip("0"):
        return None

    if d.startswith("0"):
        d = _strip_trunk_prefix(d)
        if not d.strip("0"):
            return None

    # DDD + número (10=fixo, 11=móvel)
    if len(d) in (10, 11):
        d = BR_COUNTRY_CODE + d

    if len(d) not in (12, 13):
        return None
    return d


def first_valid_phone(candidates) -> str | None:
    """Primeiro candidato normalizável, respeitando a ordem de prioridade."""
    for raw in candidates:
        phone = normalize_phone(raw)
        if phone:
            return phone
    return None


def local_subscriber_digits(phone: str) -> str:
    """Remove o DDI 55 de um telefone canônico (DDD + número)."""
    digits = only_digits(phone)
    if digits.startswith(BR_COUNTRY_CODE) and len(digits) in (12, 13):
        return digits[len(BR_COUNTRY_CODE):]
    return digits
