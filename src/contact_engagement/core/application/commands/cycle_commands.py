from __future__ import annotations

from dataclasses import dataclass, field

from contact_engagement.core.application.cancellation import CancellationToken
from contact_engagement.core.application.cqrs import CommandDTO


@dataclass(frozen=True)
class RunDailyCycleCommand(CommandDTO):
    cancel_token: CancellationToken = field(default_factory=CancellationToken, compare=False)
