from __future__ import annotations

from typing import AsyncIterator, List, Protocol

from roster_sync.domain.models import (
    Account,
    EventSummary,
    ExistingParticipant,
    NotifiedPlayer,
    RegistrationResult,
)


class EventRegistrationPort(Protocol):
    """Registers players into an event and reports roster changes."""

    async def register_player_by_email(self, event_id: str, email: str) -> RegistrationResult:
        ...

    async def register_guest_player(self, event_id: str, first_name: str, last_name: str) -> RegistrationResult:
        ...

    async def set_registered_player_name(
        self,
        event_id: str,
        player_id: str,
        first_name: str,
        last_name: str,
    ) -> None:
        ...

    async def subscribe_to_player_registered(self, event_id: str) -> AsyncIterator[NotifiedPlayer]:
        """Open the subscription and return a long-lived stream yielding one player per roster addition.

        The subscription is established by the time this coroutine returns.
        """
        ...

    async def get_players_in_event(self, event_id: str) -> List[ExistingParticipant]:
        ...


class EventDiscoveryPort(Protocol):
    """Looks up the organizations and events the logged-in account can manage."""

    async def get_me(self) -> Account:
        ...

    async def get_upcoming_events(self, organization_id: str) -> List[EventSummary]:
        ...
