from .birthday_handlers import ListTodayBirthdaysHandler, RunDailyCycleHandler
from .maintenance_handlers import FixInvalidContactNamesHandler
from .sync_handlers import (
    PingIntegrationHandler,
    SyncIntegrationHandler,
    TestIntegrationContactHandler,
)

__all__ = [
    "FixInvalidContactNamesHandler",
    "ListTodayBirthdaysHandler",
    "PingIntegrationHandler",
    "RunDailyCycleHandler",
    "SyncIntegrationHandler",
    "TestIntegrationContactHandler",
]
