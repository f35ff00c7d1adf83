from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime


# ───────────────────────────────────────────────
# Event Base e Domain Events
# ───────────────────────────────────────────────
@dataclass(frozen=True, kw_only=True)
class DomainEvent:
    event_id: uuid.UUID = field(default_factory=uuid.uuid4)
    occurred_at: datetime = field(default_factory=datetime.utcnow)

# ╭──────────────────────────────────────────────╮
# │ 1. Reconciliação                             │
# ╰──────────────────────────────────────────────╯
@dataclass(frozen=True)
class IntegrationSyncedEvent(DomainEvent):
    integration_id: int
    company_id: int
    processed: int
    updated: int
    created: int
    last_error: str | None

# ╭──────────────────────────────────────────────╮
# │ 2. Aniversários                              │
# ╰──────────────────────────────────────────────╯
@dataclass(frozen=True)
class BirthdayMessageSentEvent(DomainEvent):
    company_id: int
    contact_id: int
    channel_id: int
    delivery_id: str | None

@dataclass(frozen=True)
class BirthdayDispatchSkippedEvent(DomainEvent):
    company_id: int
    contact_id: int
    outcome: str

@dataclass(frozen=True)
class BirthdayAnnouncementCreatedEvent(DomainEvent):
    company_id: int
    user_id: int
    announcement_id: int
