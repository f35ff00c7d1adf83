from __future__ import annotations

from dataclasses import dataclass
from datetime import date

from contact_engagement.core.domain.entities._base import EntityMixin


@dataclass(slots=True)
class UserEntity(EntityMixin):
    id: int
    company_id: int
    name: str
    birth_date: date | None = None
