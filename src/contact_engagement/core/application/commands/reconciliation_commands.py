from __future__ import annotations

from dataclasses import dataclass

from contact_engagement.core.application.cqrs import CommandDTO


@dataclass(frozen=True)
class SyncIntegrationCommand(CommandDTO):
    integration_id: int
    company_id: int

@dataclass(frozen=True)
class TestIntegrationContactCommand(CommandDTO):
    __test__ = False  # evita coleta pelo pytest

    integration_id: int
    company_id: int
    test_number: str

@dataclass(frozen=True)
class PingIntegrationCommand(CommandDTO):
    integration_id: int
    company_id: int

@dataclass(frozen=True)
class FixInvalidContactNamesCommand(CommandDTO):
    batch_size: int = 200
    start_after: int = 0
