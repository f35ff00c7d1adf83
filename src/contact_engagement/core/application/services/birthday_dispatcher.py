from __future__ import annotations

import random
from datetime import date

import structlog

from contact_engagement.core.application.cancellation import CancellationToken
from contact_engagement.core.application.dtos.result_dtos import (
    BirthdayRunResult,
    ContactDispatchResult,
    DispatchOutcome,
)
from contact_engagement.core.application.services.birthday_finder import birthday_dedup_key
from contact_engagement.core.domain.entities.birthday_entity import (
    BirthdayBatch,
    BirthdayCandidate,
    BirthdaySettings,
)
from contact_engagement.core.domain.entities.messaging_entity import ChannelEntity
from contact_engagement.core.domain.events.events import (
    BirthdayAnnouncementCreatedEvent,
    BirthdayDispatchSkippedEvent,
    BirthdayMessageSentEvent,
)
from contact_engagement.core.domain.events.exceptions import (
    ChannelUnavailableError,
    DuplicateSendError,
    NotFoundError,
)
from contact_engagement.core.domain.ports import (
    AnnouncementSink,
    DedupStore,
    NotificationSender,
    RealtimeNotifier,
    Ticketing,
)
from contact_engagement.core.domain.repositories import (
    ChannelRepository,
    ContactRepository,
    UserRepository,
)
from contact_engagement.core.domain.services.event_dispatcher import EventDispatcher
from contact_engagement.core.utils.template_utils import render_message

logger = structlog.get_logger(__name__)

SEND_MIN_DELAY_SECONDS = 60
SEND_MAX_DELAY_SECONDS = 6 * 60
DEDUP_TTL_SECONDS = 48 * 60 * 60
SYSTEM_COMPANY_ID = 1

BIRTHDAY_EVENT = "birthday"
ANNOUNCEMENT_EVENT = "company-announcement"


class BirthdayDispatchScheduler:
    """
    Dispara os parabéns de um tenant.

    Usuários viram informativos; contatos recebem mensagem, um por vez, com
    um intervalo aleatório antes de cada envio. Cada contato é reivindicado
    no DedupStore antes do envio e a reivindicação nunca é desfeita:
    no máximo uma tentativa por contato por dia.
    """

    def __init__(  # noqa: PLR0913
        self,
        *,
        dedup_store: DedupStore,
        contact_repo: ContactRepository,
        user_repo: UserRepository,
        channel_repo: ChannelRepository,
        ticketing: Ticketing,
        sender: NotificationSender,
        announcements: AnnouncementSink,
        realtime: RealtimeNotifier,
        dispatcher: EventDispatcher,
        min_delay_seconds: float = SEND_MIN_DELAY_SECONDS,
        max_delay_seconds: float = SEND_MAX_DELAY_SECONDS,
        dedup_ttl_seconds: int = DEDUP_TTL_SECONDS,
        system_company_id: int = SYSTEM_COMPANY_ID,
        rng: random.Random | None = None,
    ) -> None:
        self.dedup_store = dedup_store
        self.contact_repo = contact_repo
        self.user_repo = user_repo
        self.channel_repo = channel_repo
        self.ticketing = ticketing
        self.sender = sender
        self.announcements = announcements
        self.realtime = realtime
        self.dispatcher = dispatcher
        self.min_delay_seconds = min_delay_seconds
        self.max_delay_seconds = max(min_delay_seconds, max_delay_seconds)
        self.dedup_ttl_seconds = dedup_ttl_seconds
        self.system_company_id = system_company_id
        self._rng = rng or random.Random()

    # ------------------------------------------------------------------ público
    def dispatch(
        self,
        batch: BirthdayBatch,
        cancel_token: CancellationToken | None = None,
    ) -> BirthdayRunResult:
        token = cancel_token or CancellationToken()
        result = BirthdayRunResult(company_id=batch.company_id)
        log = logger.bind(company_id=batch.company_id, day=batch.day.isoformat())
        log.info("birthday.dispatch_start", users=len(batch.users), contacts=len(batch.contacts))

        for candidate in batch.users:
            if token.cancelled:
                result.cancelled = True
                break
            if self._announce_user(candidate, batch.settings):
                result.users_announced += 1

        for candidate in batch.contacts:
            if result.cancelled or token.cancelled:
                result.cancelled = True
                break
            # quem já foi reivindicado hoje não precisa esperar o intervalo
            if not candidate.already_notified_today and token.sleep(self.next_delay()):
                result.cancelled = True
                break
            result.record(self.send_to_contact(candidate, batch.settings, batch.day))

        self._emit_realtime(
            batch.company_id,
            BIRTHDAY_EVENT,
            {
                "day": batch.day.isoformat(),
                "users": [c.recipient_id for c in batch.users],
                "contacts": [c.recipient_id for c in batch.contacts],
            },
        )
        log.info(
            "birthday.dispatch_end",
            users_announced=result.users_announced,
            contacts_notified=result.contacts_notified,
            contacts_skipped_dedup=result.contacts_skipped_dedup,
            contacts_failed=result.contacts_failed,
            cancelled=result.cancelled,
        )
        return result

    def next_delay(self) -> float:
        return self._rng.uniform(self.min_delay_seconds, self.max_delay_seconds)

    def send_to_contact(
        self,
        candidate: BirthdayCandidate,
        settings: BirthdaySettings,
        day: date,
    ) -> ContactDispatchResult:
        """Uma tentativa de envio. Nunca lança: o desfecho vai no resultado."""
        company_id = candidate.company_id
        contact_id = candidate.recipient_id
        log = logger.bind(company_id=company_id, contact_id=contact_id)
        try:
            self._claim(company_id, contact_id, day)
            return self._deliver(candidate, settings, log)
        except DuplicateSendError:
            log.info("birthday.duplicate", day=day.isoformat())
            return self._skipped(company_id, contact_id, DispatchOutcome.DUPLICATE)
        except NotFoundError as exc:
            log.warning("birthday.contact_not_found", error=str(exc))
            return self._skipped(company_id, contact_id, DispatchOutcome.NOT_FOUND, str(exc))
        except Exception as exc:  # noqa: BLE001
            # a chave continua reivindicada: falha também conta como tentativa do dia
            log.error(
                "birthday.send_failed",
                error=str(exc),
                error_type=exc.__class__.__name__,
                exc_info=True,
            )
            return self._skipped(company_id, contact_id, DispatchOutcome.FAILED, str(exc))

    # ------------------------------------------------------------------ contatos
    def _claim(self, company_id: int, contact_id: int, day: date) -> None:
        key = birthday_dedup_key(company_id, contact_id, day)
        if not self.dedup_store.claim(key, self.dedup_ttl_seconds):
            raise DuplicateSendError(key)

    def _deliver(self, candidate: BirthdayCandidate, settings: BirthdaySettings, log) -> ContactDispatchResult:
        contact = self.contact_repo.find_by_id(candidate.company_id, candidate.recipient_id)
        if contact is None:
            raise NotFoundError(f"Contato {candidate.recipient_id} não encontrado")

        channel = self.resolve_channel(candidate.company_id, settings)
        body = render_message(
            settings.contact_birthday_message,
            {"name": contact.name, "age": candidate.age},
        )
        ticket = self.ticketing.find_or_create_ticket(contact, channel)
        receipt = self.sender.send(channel, ticket, body)
        self._record_history(ticket.id, body, receipt.delivery_id, log)

        self.dispatcher.dispatch(
            BirthdayMessageSentEvent(
                company_id=contact.company_id,
                contact_id=contact.id,
                channel_id=channel.id,
                delivery_id=receipt.delivery_id,
            )
        )
        log.info("birthday.sent", channel_id=channel.id, delivery_id=receipt.delivery_id)
        return ContactDispatchResult(
            contact_id=contact.id,
            outcome=DispatchOutcome.SENT,
            delivery_id=receipt.delivery_id,
        )

    def resolve_channel(self, company_id: int, settings: BirthdaySettings) -> ChannelEntity:
        """Conexão configurada para aniversários ou, na falta dela, a padrão."""
        if settings.channel_id is not None:
            channel = self.channel_repo.find_connected(company_id, settings.channel_id)
            if channel is not None:
                return channel
            logger.warning(
                "birthday.channel_fallback",
                company_id=company_id,
                channel_id=settings.channel_id,
            )

        channel = self.channel_repo.get_default(company_id)
        if channel is None:
            raise ChannelUnavailableError(f"Nenhuma conexão WhatsApp para a empresa {company_id}")
        return channel

    def _record_history(self, ticket_id: int, body: str, delivery_id: str | None, log) -> None:
        if not delivery_id:
            log.warning("birthday.history_missing_delivery_id", ticket_id=ticket_id)
            return
        try:
            self.ticketing.record_message(ticket_id, body, delivery_id, direction="outbound")
        except Exception as exc:  # noqa: BLE001
            log.error("birthday.history_failed", ticket_id=ticket_id, error=str(exc), exc_info=True)

    def _skipped(
        self,
        company_id: int,
        contact_id: int,
        outcome: DispatchOutcome,
        error: str | None = None,
    ) -> ContactDispatchResult:
        self.dispatcher.dispatch(
            BirthdayDispatchSkippedEvent(company_id=company_id, contact_id=contact_id, outcome=outcome.value)
        )
        return ContactDispatchResult(contact_id=contact_id, outcome=outcome, error=error)

    # ------------------------------------------------------------------ usuários
    def _announce_user(self, candidate: BirthdayCandidate, settings: BirthdaySettings) -> bool:
        if not settings.create_announcement_for_users:
            return False

        try:
            user = self.user_repo.find_by_id(candidate.recipient_id)
            if user is None:
                logger.warning("birthday.user_not_found", user_id=candidate.recipient_id)
                return False

            announcement = self.announcements.create_for_tenant(
                self.system_company_id,
                user.company_id,
                user,
            )
        except Exception as exc:  # noqa: BLE001
            logger.error(
                "birthday.announcement_failed",
                user_id=candidate.recipient_id,
                error=str(exc),
                exc_info=True,
            )
            return False

        self._emit_realtime(
            user.company_id,
            ANNOUNCEMENT_EVENT,
            {"action": "create", "record": announcement.to_dict()},
        )
        self.dispatcher.dispatch(
            BirthdayAnnouncementCreatedEvent(
                company_id=user.company_id,
                user_id=user.id,
                announcement_id=announcement.id,
            )
        )
        logger.info("birthday.announcement_created", user_id=user.id, announcement_id=announcement.id)
        return True

    # ------------------------------------------------------------------ realtime
    def _emit_realtime(self, company_id: int, event_name: str, payload: dict) -> None:
        try:
            self.realtime.publish_tenant_event(company_id, event_name, payload)
        except Exception as exc:  # noqa: BLE001
            logger.warning(
                "birthday.realtime_failed",
                company_id=company_id,
                event_name=event_name,
                error=str(exc),
            )
