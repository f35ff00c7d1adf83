from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    generate_latest,
)

from contact_engagement.core.domain.events.events import (
    BirthdayAnnouncementCreatedEvent,
    BirthdayDispatchSkippedEvent,
    BirthdayMessageSentEvent,
    IntegrationSyncedEvent,
)
from contact_engagement.core.domain.services.event_dispatcher import EventDispatcher

registry = CollectorRegistry()

RECONCILE_RUNS = Counter(
    "reconcile_runs_total",
    "Execucoes de reconciliacao por integracao",
    ["success"],
    registry=registry,
)

RECONCILE_CONTACTS = Counter(
    "reconcile_contacts_total",
    "Contatos tocados pela reconciliacao",
    ["decision"],
    registry=registry,
)

BIRTHDAY_DISPATCH = Counter(
    "birthday_dispatch_total",
    "Desfechos de envio de aniversario para contatos",
    ["outcome"],
    registry=registry,
)

BIRTHDAY_ANNOUNCEMENTS = Counter(
    "birthday_announcements_total",
    "Informativos de aniversario criados para usuarios",
    registry=registry,
)


def _on_integration_synced(event: IntegrationSyncedEvent) -> None:
    RECONCILE_RUNS.labels(success=str(event.last_error is None).lower()).inc()
    RECONCILE_CONTACTS.labels(decision="created").inc(event.created)
    RECONCILE_CONTACTS.labels(decision="updated").inc(event.updated)


def _on_birthday_sent(event: BirthdayMessageSentEvent) -> None:
    BIRTHDAY_DISPATCH.labels(outcome="sent").inc()


def _on_birthday_skipped(event: BirthdayDispatchSkippedEvent) -> None:
    BIRTHDAY_DISPATCH.labels(outcome=event.outcome).inc()


def _on_announcement_created(event: BirthdayAnnouncementCreatedEvent) -> None:
    BIRTHDAY_ANNOUNCEMENTS.inc()


def register_metrics_listeners(dispatcher: EventDispatcher) -> EventDispatcher:
    dispatcher.subscribe(IntegrationSyncedEvent, _on_integration_synced)
    dispatcher.subscribe(BirthdayMessageSentEvent, _on_birthday_sent)
    dispatcher.subscribe(BirthdayDispatchSkippedEvent, _on_birthday_skipped)
    dispatcher.subscribe(BirthdayAnnouncementCreatedEvent, _on_announcement_created)
    return dispatcher


def render_metrics() -> tuple[bytes, str]:
    """Corpo e content-type para o endpoint /metrics do host."""
    return generate_latest(registry), CONTENT_TYPE_LATEST
