from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date

from contact_engagement.core.domain.entities._base import EntityMixin


@dataclass(slots=True)
class ContactEntity(EntityMixin):
    """Contato local. `number` é sempre um telefone canônico (só dígitos, com DDI)."""

    id: int
    company_id: int
    number: str
    name: str
    birth_date: date | None = None
    active: bool = True


@dataclass(frozen=True, slots=True)
class ExternalRecord:
    """
    Registro de cliente vindo do CRM externo.

    Vive apenas durante o processamento de uma página; os telefones
    candidatos já vêm ordenados por prioridade (celular antes do fixo).
    """

    external_id: str
    raw_name: str
    raw_phone_candidates: tuple[str, ...] = field(default_factory=tuple)
    raw_birth_date: str = ""
    active: bool = True


@dataclass(frozen=True, slots=True)
class ExternalPage:
    records: list[ExternalRecord]
    total_pages: int | None = None
