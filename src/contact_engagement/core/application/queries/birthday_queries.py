from __future__ import annotations

from dataclasses import dataclass

from contact_engagement.core.application.cqrs import QueryDTO


@dataclass(frozen=True)
class ListTodayBirthdaysQuery(QueryDTO):
    company_id: int
