from __future__ import annotations

from collections.abc import Iterable

from contact_engagement.core.utils.phone_utils import only_digits

PLACEHOLDER_MARKERS = ("@lid",)
FALLBACK_CONTACT_LABEL = "Contato"
_MIN_ID_LIKE_DIGITS = 16


def is_invalid_contact_name(name: str | None) -> bool:
    """
    Detecta nomes que são artefatos e não nomes de gente:
    vazio, marcador de placeholder, só dígitos, ou 16+ dígitos sem espaço.
    """
    if not name:
        return True
    trimmed = str(name).strip()
    if not trimmed:
        return True

    lower = trimmed.lower()
    if any(marker in lower for marker in PLACEHOLDER_MARKERS):
        return True

    digits = only_digits(trimmed)
    if digits and len(digits) == len(trimmed):
        return True
    return len(digits) >= _MIN_ID_LIKE_DIGITS and " " not in trimmed


def resolve_best_contact_name(candidates: Iterable[str | None], fallback_number: str | None = None) -> str:
    """Primeiro candidato válido; senão 'Contato <dígitos>' ou só 'Contato'."""
    for candidate in candidates:
        value = str(candidate).strip() if candidate else ""
        if value and not is_invalid_contact_name(value):
            return value

    digits = only_digits(fallback_number)
    return f"{FALLBACK_CONTACT_LABEL} {digits}" if digits else FALLBACK_CONTACT_LABEL
