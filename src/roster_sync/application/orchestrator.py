from __future__ import annotations

import asyncio
import logging
from typing import AsyncIterator, List, Optional, Sequence

from roster_sync.application.classify import classify_registration
from roster_sync.domain.errors import SubscriptionClosedError
from roster_sync.domain.models import (
    NotifiedPlayer,
    OrchestratorState,
    ParticipantRecord,
    RegistrationOutcome,
    RegistrationResult,
)
from roster_sync.ports.eventlink import EventRegistrationPort


class RegistrationOrchestrator:
    """Registers players one at a time and waits for the roster to confirm each email registration.

    Confirmation is correlated by arrival order: the player-registered stream is
    expected to push exactly one player per accepted email registration, before
    the next email registration is issued. An email registration opens a
    single-slot confirmation token just before the request goes out; the first
    roster notification to arrive while the token is open fills it. Notifications
    arriving while no token is open (guest registrations, players who signed up
    on their own) are dropped, so only one email registration is ever outstanding.

    States:
        IDLE: move the cursor to the next player, or finish.
        AWAITING_CONFIRMATION: issue the registration call for the current player.
        DRAINING: wait for the roster notification of the accepted registration.
        DONE: every player has been attempted; return the missing players.
    """

    def __init__(self, eventlink: EventRegistrationPort, event_id: str) -> None:
        self.eventlink = eventlink
        self.event_id = event_id
        self.state = OrchestratorState.IDLE
        self.logger = logging.getLogger(__name__)
        self._players: Sequence[ParticipantRecord] = ()
        self._cursor = -1
        self._missing: List[ParticipantRecord] = []
        self._confirmation: Optional[asyncio.Future[NotifiedPlayer]] = None
        self._listener: Optional[asyncio.Task[None]] = None

    @property
    def missing(self) -> List[ParticipantRecord]:
        return list(self._missing)

    async def run(self, players: Sequence[ParticipantRecord]) -> List[ParticipantRecord]:
        self._players = tuple(players)
        self._cursor = -1
        self._missing = []
        self._confirmation = None
        self.state = OrchestratorState.IDLE

        stream = await self.eventlink.subscribe_to_player_registered(self.event_id)
        self._listener = asyncio.create_task(self._listen(stream))
        try:
            current: Optional[ParticipantRecord] = None
            while self.state is not OrchestratorState.DONE:
                if self.state is OrchestratorState.IDLE:
                    current = self._advance()
                elif self.state is OrchestratorState.AWAITING_CONFIRMATION:
                    await self._attempt(current)
                elif self.state is OrchestratorState.DRAINING:
                    await self._confirm(current)
        finally:
            await self._stop_listener()
        return self.missing

    # Transitions -------------------------------------------------------------

    def _advance(self) -> Optional[ParticipantRecord]:
        self._cursor += 1
        if self._cursor >= len(self._players):
            self.state = OrchestratorState.DONE
            return None
        self.state = OrchestratorState.AWAITING_CONFIRMATION
        self.logger.info("-----")
        return self._players[self._cursor]

    async def _attempt(self, player: ParticipantRecord) -> None:
        if player.is_guest:
            self.logger.info("Adding guest player %s", player.display_name)
            await self._register_guest(player)
            self.state = OrchestratorState.IDLE
            return

        self.logger.info("Adding player %s (%s)", player.display_name, player.email)
        self._confirmation = asyncio.get_running_loop().create_future()
        try:
            result = await self.eventlink.register_player_by_email(self.event_id, player.email)
        except ConnectionError as e:
            self.logger.error("Registration request for %s failed: %s", player.display_name, e)
            result = RegistrationResult(success=False)
        outcome = classify_registration(result)

        if outcome is not RegistrationOutcome.SUCCESS:
            self._confirmation = None

        if outcome is RegistrationOutcome.SUCCESS:
            self.state = OrchestratorState.DRAINING
        elif outcome is RegistrationOutcome.ALREADY_REGISTERED:
            self.logger.info("Player already registered. Skipping.")
            self.state = OrchestratorState.IDLE
        elif outcome is RegistrationOutcome.NO_ACCOUNT_FOUND:
            self.logger.info("Player does not have an account with that email address. Adding as guest.")
            await self._register_guest(player)
            self.state = OrchestratorState.IDLE
        else:
            if result.error_message:
                self.logger.info(result.error_message)
            self.logger.info("Unable to add player. Logging.")
            self._missing.append(player)
            self.state = OrchestratorState.IDLE

    async def _confirm(self, player: ParticipantRecord) -> None:
        notified = await self._next_notification()
        if not notified.has_name():
            self.logger.info("No name set by player; adding name")
            try:
                await self.eventlink.set_registered_player_name(
                    self.event_id,
                    notified.id,
                    player.first_name,
                    player.last_name,
                )
            except ConnectionError as e:
                # Registered either way; only the display name is missing.
                self.logger.error("Unable to set name for %s (player %s): %s", player.display_name, notified.id, e)
        self.logger.info("Player added.")
        self.state = OrchestratorState.IDLE

    # Helpers -----------------------------------------------------------------

    async def _register_guest(self, player: ParticipantRecord) -> bool:
        try:
            result = await self.eventlink.register_guest_player(self.event_id, player.first_name, player.last_name)
        except ConnectionError as e:
            self.logger.error("Guest registration request for %s failed: %s", player.display_name, e)
            result = RegistrationResult(success=False)
        if not result.success:
            self.logger.error("Unable to add guest player for some reason - %s", player.display_name)
            self._missing.append(player)
        return result.success

    async def _listen(self, stream: AsyncIterator[NotifiedPlayer]) -> None:
        async for player in stream:
            confirmation = self._confirmation
            if confirmation is not None and not confirmation.done():
                self.logger.debug("Roster notification for player %s", player.id)
                confirmation.set_result(player)
            else:
                self.logger.debug("Ignoring roster notification for player %s", player.id)

    async def _next_notification(self) -> NotifiedPlayer:
        confirmation = self._confirmation
        await asyncio.wait({confirmation, self._listener}, return_when=asyncio.FIRST_COMPLETED)
        self._confirmation = None
        if confirmation.done():
            return confirmation.result()

        confirmation.cancel()
        error = None if self._listener.cancelled() else self._listener.exception()
        self.logger.error("Player-registered stream closed while waiting for confirmation: %s", error)
        raise SubscriptionClosedError(
            "Player-registered stream closed while waiting for confirmation",
            unprocessed=[*self._missing, *self._players[self._cursor:]],
        ) from error

    async def _stop_listener(self) -> None:
        if self._listener is None:
            return
        if not self._listener.done():
            self._listener.cancel()
        results = await asyncio.gather(self._listener, return_exceptions=True)
        error = results[0]
        if isinstance(error, Exception):
            self.logger.warning("Player-registered stream ended with an error: %s", error)
        self._listener = None
