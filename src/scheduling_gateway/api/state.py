from __future__ import annotations

from dataclasses import dataclass, field

from ..services import (
    AuthService,
    AvailabilityEngine,
    BookingOrchestrator,
    IdentityResolver,
    ServiceContext,
)


@dataclass(slots=True)
class ApiState:
    context: ServiceContext = field(default_factory=ServiceContext)
    auth: AuthService = field(init=False)
    identity: IdentityResolver = field(init=False)
    availability: AvailabilityEngine = field(init=False)
    booking: BookingOrchestrator = field(init=False)

    def __post_init__(self) -> None:
        self.auth = AuthService(self.context)
        self.identity = IdentityResolver(self.context)
        self.availability = AvailabilityEngine(self.context, self.identity)
        self.booking = BookingOrchestrator(self.context, self.identity)

    def reset(self) -> None:
        self.context.reset()
