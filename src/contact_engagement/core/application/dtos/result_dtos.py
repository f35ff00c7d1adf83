from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum

from contact_engagement.core.domain.entities.birthday_entity import BirthdayCandidate

# ───────────────────────────────────────────────
# Reconciliação
# ───────────────────────────────────────────────

class RecordDecision(StrEnum):
    CREATED = "created"
    UPDATED = "updated"
    UNCHANGED = "unchanged"
    SKIPPED_INVALID_PHONE = "skipped_invalid_phone"
    SKIPPED_NO_BIRTH_DATE = "skipped_no_birth_date"


@dataclass(frozen=True)
class RecordOutcome:
    decision: RecordDecision
    phone: str | None = None
    contact_id: int | None = None
    changed_fields: tuple[str, ...] = ()


@dataclass
class ReconciliationResult:
    integration_id: int
    company_id: int
    processed: int = 0
    updated: int = 0
    created: int = 0
    last_error: str | None = None
    last_sync_at: datetime | None = None

    @property
    def ok(self) -> bool:
        return self.last_error is None

    @property
    def touched(self) -> int:
        return self.updated + self.created


@dataclass(frozen=True)
class SyncIntegrationResult:
    ok: bool
    message: str
    updated_count: int = 0
    last_error: str | None = None
    last_sync_at: datetime | None = None


@dataclass(frozen=True)
class ContactTestResult:
    updated: bool
    created: bool
    message: str
    contact_id: int | None = None
    external_id: str | None = None


@dataclass(frozen=True)
class PingResult:
    ok: bool
    message: str


@dataclass(frozen=True)
class FixNamesResult:
    processed: int
    updated: int
    last_cursor: int

# ───────────────────────────────────────────────
# Aniversários
# ───────────────────────────────────────────────

class DispatchOutcome(StrEnum):
    SENT = "sent"
    DUPLICATE = "duplicate"
    FAILED = "failed"
    NOT_FOUND = "not_found"


@dataclass(frozen=True)
class ContactDispatchResult:
    contact_id: int
    outcome: DispatchOutcome
    delivery_id: str | None = None
    error: str | None = None


@dataclass
class BirthdayRunResult:
    company_id: int
    users_announced: int = 0
    contacts_notified: int = 0
    contacts_skipped_dedup: int = 0
    contacts_failed: int = 0
    dispatches: list[ContactDispatchResult] = field(default_factory=list)
    cancelled: bool = False
    error: str | None = None

    def record(self, result: ContactDispatchResult) -> None:
        self.dispatches.append(result)
        if result.outcome is DispatchOutcome.SENT:
            self.contacts_notified += 1
        elif result.outcome is DispatchOutcome.DUPLICATE:
            self.contacts_skipped_dedup += 1
        else:
            self.contacts_failed += 1


@dataclass(frozen=True)
class TodayBirthdaysView:
    company_id: int
    users: list[BirthdayCandidate]
    contacts: list[BirthdayCandidate]

# ───────────────────────────────────────────────
# Ciclo diário
# ───────────────────────────────────────────────

@dataclass
class DailyCycleResult:
    day: str
    birthdays: list[BirthdayRunResult] = field(default_factory=list)
    reconciliations: list[ReconciliationResult] = field(default_factory=list)
    announcements_removed: int = 0
    cancelled: bool = False

    @property
    def users_announced(self) -> int:
        return sum(r.users_announced for r in self.birthdays)

    @property
    def contacts_notified(self) -> int:
        return sum(r.contacts_notified for r in self.birthdays)

    @property
    def contacts_skipped_dedup(self) -> int:
        return sum(r.contacts_skipped_dedup for r in self.birthdays)
