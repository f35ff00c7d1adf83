from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import StrEnum

from contact_engagement.core.domain.entities._base import EntityMixin

DEFAULT_CONTACT_BIRTHDAY_MESSAGE = (
    "🎉 Parabéns, {nome}! Hoje é o seu dia! Desejamos muitas felicidades, "
    "saúde e sucesso. Feliz aniversário! 🎂"
)


class RecipientKind(StrEnum):
    USER = "user"
    CONTACT = "contact"


@dataclass(slots=True)
class BirthdaySettings(EntityMixin):
    """Flags de aniversário por empresa (tenant)."""

    company_id: int
    user_birthday_enabled: bool = True
    contact_birthday_enabled: bool = True
    create_announcement_for_users: bool = True
    channel_id: int | None = None
    contact_birthday_message: str = DEFAULT_CONTACT_BIRTHDAY_MESSAGE


@dataclass(slots=True)
class BirthdayCandidate(EntityMixin):
    recipient_id: int
    kind: RecipientKind
    company_id: int
    name: str
    age: int
    birth_date: date
    number: str | None = None
    already_notified_today: bool = False


@dataclass(slots=True)
class BirthdayBatch:
    """Aniversariantes de um tenant em um dia, na ordem devolvida pelos repositórios."""

    company_id: int
    day: date
    settings: BirthdaySettings
    users: list[BirthdayCandidate] = field(default_factory=list)
    contacts: list[BirthdayCandidate] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.users and not self.contacts
