from __future__ import annotations

import asyncio
from datetime import datetime, timedelta, timezone
from typing import AsyncIterator, Dict, Iterable, List, Optional, Set
from uuid import uuid4

from roster_sync.application.classify import ALREADY_REGISTERED_MARKER, NO_ACCOUNT_MARKER
from roster_sync.domain.models import (
    Account,
    EventSummary,
    ExistingParticipant,
    NotifiedPlayer,
    Organization,
    RegistrationResult,
)
from roster_sync.ports.eventlink import EventDiscoveryPort, EventRegistrationPort


class MockEventlinkClient(EventRegistrationPort, EventDiscoveryPort):
    """
    Lightweight in-memory EventLink mock for development and dry runs.

    Accounts are keyed by email. Registering a known email pushes a
    player-registered notification for a player without a name, the way
    EventLink reports players who never filled in their profile. Registering an
    unknown email fails with the "No platform account found" message. Guest
    registrations succeed unless the name is listed in ``failing_guests`` and
    are not pushed to subscribers.
    """

    def __init__(
        self,
        accounts: Optional[Iterable[str]] = None,
        roster: Optional[Iterable[ExistingParticipant]] = None,
        failing_guests: Optional[Iterable[str]] = None,
    ) -> None:
        self.accounts: Set[str] = {email.lower() for email in (accounts or [])}
        self.roster: List[ExistingParticipant] = list(roster or [])
        self.failing_guests: Set[str] = set(failing_guests or [])
        self.registered_emails: Set[str] = set()
        self.names: Dict[str, tuple[str, str]] = {}
        self.organization = Organization(id="org-1", name="Mock Game Store")
        self._subscribers: List[asyncio.Queue] = []

    # EventRegistrationPort ---------------------------------------------------

    async def register_player_by_email(self, event_id: str, email: str) -> RegistrationResult:
        normalized = email.lower()
        if normalized in self.registered_emails:
            return RegistrationResult(success=False, error_message=f"{ALREADY_REGISTERED_MARKER}: {email}")
        if normalized not in self.accounts:
            return RegistrationResult(success=False, error_message=f"{NO_ACCOUNT_MARKER} for {email}")
        self.registered_emails.add(normalized)
        player = NotifiedPlayer(id=str(uuid4()))
        self.roster.append(ExistingParticipant())
        for queue in self._subscribers:
            queue.put_nowait(player)
        return RegistrationResult(success=True)

    async def register_guest_player(self, event_id: str, first_name: str, last_name: str) -> RegistrationResult:
        if f"{first_name} {last_name}" in self.failing_guests:
            return RegistrationResult(success=False)
        self.roster.append(ExistingParticipant(first_name=first_name, last_name=last_name))
        return RegistrationResult(success=True)

    async def set_registered_player_name(
        self,
        event_id: str,
        player_id: str,
        first_name: str,
        last_name: str,
    ) -> None:
        self.names[player_id] = (first_name, last_name)

    async def subscribe_to_player_registered(self, event_id: str) -> AsyncIterator[NotifiedPlayer]:
        queue: asyncio.Queue = asyncio.Queue()
        self._subscribers.append(queue)
        return self._drain(queue)

    async def get_players_in_event(self, event_id: str) -> List[ExistingParticipant]:
        return list(self.roster)

    # EventDiscoveryPort ------------------------------------------------------

    async def get_me(self) -> Account:
        return Account(id="mock-user", organizations=[self.organization])

    async def get_upcoming_events(self, organization_id: str) -> List[EventSummary]:
        start = datetime.now(timezone.utc).replace(hour=18, minute=0, second=0, microsecond=0)
        return [
            EventSummary(id="mock-event-1", title="Friday Night Magic", scheduled_start_time=start + timedelta(days=1)),
            EventSummary(id="mock-event-2", title="Store Championship", scheduled_start_time=start + timedelta(days=8)),
        ]

    @staticmethod
    async def _drain(queue: asyncio.Queue) -> AsyncIterator[NotifiedPlayer]:
        while True:
            yield await queue.get()
