import redis
from dependency_injector import containers, providers

# ------- IMPORTS DE INFRA E ADAPTERS -------
from contact_engagement.adapters.api_clients.gestaoclick_api_client import GestaoClickAPIClient
from contact_engagement.adapters.cache.redis_dedup_store import RedisDedupStore
from contact_engagement.adapters.message_broker.rabbitmq import RabbitMQ, RabbitRealtimeNotifier
from contact_engagement.adapters.notifiers.whatsapp.whatsapp_sender import WhatsappGatewaySender
from contact_engagement.adapters.observability.metrics import register_metrics_listeners

# ------- IMPORTS DO CORE -------
from contact_engagement.core.application.commands.cycle_commands import RunDailyCycleCommand
from contact_engagement.core.application.commands.reconciliation_commands import (
    FixInvalidContactNamesCommand,
    PingIntegrationCommand,
    SyncIntegrationCommand,
    TestIntegrationContactCommand,
)
from contact_engagement.core.application.cqrs import CommandBus, QueryBus
from contact_engagement.core.application.handlers import (
    FixInvalidContactNamesHandler,
    ListTodayBirthdaysHandler,
    PingIntegrationHandler,
    RunDailyCycleHandler,
    SyncIntegrationHandler,
    TestIntegrationContactHandler,
)
from contact_engagement.core.application.queries.birthday_queries import ListTodayBirthdaysQuery
from contact_engagement.core.application.services.birthday_dispatcher import BirthdayDispatchScheduler
from contact_engagement.core.application.services.birthday_finder import BirthdayFinder
from contact_engagement.core.application.services.contact_reconciler import ContactReconciler
from contact_engagement.core.application.services.daily_cycle_service import DailyCycleService
from contact_engagement.core.application.services.engagement_service import EngagementFacadeService
from contact_engagement.core.application.services.reconciliation_service import ReconciliationService
from contact_engagement.core.domain.ports import AnnouncementSink, Ticketing
from contact_engagement.core.domain.repositories import (
    ChannelRepository,
    CompanyRepository,
    ContactRepository,
    IntegrationRepository,
    UserRepository,
)
from contact_engagement.core.domain.services.event_dispatcher import EventDispatcher

container = None


def _build_event_dispatcher() -> EventDispatcher:
    return register_metrics_listeners(EventDispatcher())


# ------- DECLARAÇÃO DO CONTAINER -------
class Container(containers.DeclarativeContainer):
    config = providers.Configuration()

    # Persistência e ticketing vêm da aplicação hospedeira
    contact_repo = providers.Dependency(instance_of=ContactRepository)
    user_repo = providers.Dependency(instance_of=UserRepository)
    integration_repo = providers.Dependency(instance_of=IntegrationRepository)
    company_repo = providers.Dependency(instance_of=CompanyRepository)
    channel_repo = providers.Dependency(instance_of=ChannelRepository)
    ticketing = providers.Dependency(instance_of=Ticketing)
    announcement_sink = providers.Dependency(instance_of=AnnouncementSink)

    # Infra & integração
    event_dispatcher = providers.Singleton(_build_event_dispatcher)
    command_bus = providers.Singleton(CommandBus)
    query_bus = providers.Singleton(QueryBus)

    redis_client = providers.Singleton(
        redis.Redis,
        host=config.redis.host,
        port=config.redis.port,
        db=config.redis.db,
        password=config.redis.password,
    )
    dedup_store = providers.Singleton(RedisDedupStore, client=redis_client, prefix=config.redis.key_prefix)
    rabbit = providers.Singleton(RabbitMQ, url=config.rabbitmq_url)
    realtime_notifier = providers.Singleton(RabbitRealtimeNotifier, rabbit=rabbit, exchange=config.realtime_exchange)
    whatsapp_sender = providers.Singleton(
        WhatsappGatewaySender,
        apikey=config.whatsapp.apikey,
        endpoint=config.whatsapp.url,
        timeout=config.whatsapp.timeout,
    )
    # um cliente por integração (credenciais próprias)
    gestaoclick_client = providers.Factory(GestaoClickAPIClient, timeout=config.gestaoclick.timeout)

    # Serviços de negócio
    contact_reconciler = providers.Singleton(ContactReconciler, contact_repo=contact_repo)
    reconciliation_service = providers.Singleton(
        ReconciliationService,
        integration_repo=integration_repo,
        reconciler=contact_reconciler,
        source_factory=gestaoclick_client.provider,
        dispatcher=event_dispatcher,
        page_delay_seconds=config.gestaoclick.page_delay_seconds,
        fetch_max_tries=config.gestaoclick.fetch_max_tries,
    )
    birthday_finder = providers.Singleton(
        BirthdayFinder,
        user_repo=user_repo,
        contact_repo=contact_repo,
        dedup_store=dedup_store,
        timezone=config.birthday.timezone,
    )
    birthday_scheduler = providers.Singleton(
        BirthdayDispatchScheduler,
        dedup_store=dedup_store,
        contact_repo=contact_repo,
        user_repo=user_repo,
        channel_repo=channel_repo,
        ticketing=ticketing,
        sender=whatsapp_sender,
        announcements=announcement_sink,
        realtime=realtime_notifier,
        dispatcher=event_dispatcher,
        min_delay_seconds=config.birthday.min_delay_seconds,
        max_delay_seconds=config.birthday.max_delay_seconds,
        dedup_ttl_seconds=config.birthday.dedup_ttl_seconds,
        system_company_id=config.birthday.system_company_id,
    )
    daily_cycle_service = providers.Singleton(
        DailyCycleService,
        company_repo=company_repo,
        integration_repo=integration_repo,
        finder=birthday_finder,
        scheduler=birthday_scheduler,
        reconciliation=reconciliation_service,
        announcements=announcement_sink,
        cleanup_limit=config.birthday.cleanup_limit,
    )

    # Facade exposto ao agendador/CLI
    engagement_facade_service = providers.Singleton(
        EngagementFacadeService,
        command_bus=command_bus,
        query_bus=query_bus,
    )

    # Handlers
    sync_integration_handler = providers.Factory(
        SyncIntegrationHandler,
        integration_repo=integration_repo,
        reconciliation=reconciliation_service,
    )
    test_integration_contact_handler = providers.Factory(
        TestIntegrationContactHandler,
        integration_repo=integration_repo,
        reconciler=contact_reconciler,
        source_factory=gestaoclick_client.provider,
        max_pages=config.gestaoclick.probe_max_pages,
    )
    ping_integration_handler = providers.Factory(
        PingIntegrationHandler,
        integration_repo=integration_repo,
        source_factory=gestaoclick_client.provider,
    )
    fix_invalid_contact_names_handler = providers.Factory(FixInvalidContactNamesHandler, contact_repo=contact_repo)
    run_daily_cycle_handler = providers.Factory(RunDailyCycleHandler, cycle=daily_cycle_service)
    list_today_birthdays_handler = providers.Factory(
        ListTodayBirthdaysHandler,
        company_repo=company_repo,
        finder=birthday_finder,
    )

    def init(self):
        bus = self.command_bus()
        bus.register(RunDailyCycleCommand, self.run_daily_cycle_handler())
        bus.register(SyncIntegrationCommand, self.sync_integration_handler())
        bus.register(TestIntegrationContactCommand, self.test_integration_contact_handler())
        bus.register(PingIntegrationCommand, self.ping_integration_handler())
        bus.register(FixInvalidContactNamesCommand, self.fix_invalid_contact_names_handler())

        qb = self.query_bus()
        qb.register(ListTodayBirthdaysQuery, self.list_today_birthdays_handler())


def configure_container(container_: Container, settings) -> Container:
    """Copia os valores de `config.settings` para o provider de configuração."""
    cfg = container_.config
    cfg.redis.host.from_value(settings.REDIS_HOST)
    cfg.redis.port.from_value(settings.REDIS_PORT)
    cfg.redis.db.from_value(settings.REDIS_DB)
    cfg.redis.password.from_value(settings.REDIS_PASSWORD)
    cfg.redis.key_prefix.from_value(settings.REDIS_KEY_PREFIX)
    cfg.rabbitmq_url.from_value(settings.RABBITMQ_URL)
    cfg.realtime_exchange.from_value(settings.REALTIME_EXCHANGE)
    cfg.whatsapp.url.from_value(settings.WHATSAPP_API_URL)
    cfg.whatsapp.apikey.from_value(settings.WHATSAPP_APIKEY)
    cfg.whatsapp.timeout.from_value(settings.WHATSAPP_TIMEOUT)
    cfg.gestaoclick.timeout.from_value(settings.GESTAOCLICK_TIMEOUT)
    cfg.gestaoclick.page_delay_seconds.from_value(settings.GESTAOCLICK_PAGE_DELAY_SECONDS)
    cfg.gestaoclick.fetch_max_tries.from_value(settings.GESTAOCLICK_FETCH_MAX_TRIES)
    cfg.gestaoclick.probe_max_pages.from_value(settings.GESTAOCLICK_PROBE_MAX_PAGES)
    cfg.birthday.timezone.from_value(settings.BIRTHDAY_TIMEZONE)
    cfg.birthday.min_delay_seconds.from_value(settings.BIRTHDAY_MIN_DELAY_SECONDS)
    cfg.birthday.max_delay_seconds.from_value(settings.BIRTHDAY_MAX_DELAY_SECONDS)
    cfg.birthday.dedup_ttl_seconds.from_value(settings.BIRTHDAY_DEDUP_TTL_SECONDS)
    cfg.birthday.system_company_id.from_value(settings.SYSTEM_COMPANY_ID)
    cfg.birthday.cleanup_limit.from_value(settings.ANNOUNCEMENT_CLEANUP_LIMIT)
    return container_


def setup_di_container_from_settings(settings, **dependencies) -> Container:
    """
    Inicializa o DI container uma única vez.

    `dependencies` recebe as implementações de persistência da aplicação
    hospedeira (`contact_repo`, `user_repo`, `integration_repo`,
    `company_repo`, `channel_repo`, `ticketing`, `announcement_sink`) e
    pode sobrescrever qualquer outro provider (ex.: `dedup_store` em testes).
    """
    global container  # noqa: PLW0603
    if container is not None:
        import structlog
        structlog.get_logger().debug("container.already_initialized")
        return container

    new_container = Container()
    configure_container(new_container, settings)
    for name, value in dependencies.items():
        getattr(new_container, name).override(providers.Object(value))

    Container.init(new_container)
    container = new_container
    return container


def reset_container() -> None:
    global container  # noqa: PLW0603
    if container is not None:
        container.reset_singletons()
    container = None
