from __future__ import annotations

import json
import logging
from datetime import datetime
from typing import Any, AsyncIterator, Dict, List, Optional, Tuple

import httpx

from roster_sync.domain.models import (
    Account,
    EventSummary,
    ExistingParticipant,
    NotifiedPlayer,
    Organization,
    RegistrationResult,
)
from roster_sync.ports.eventlink import EventDiscoveryPort, EventRegistrationPort

logger = logging.getLogger(__name__)

GRAPHQL_PATH = "/silverbeak-griffin-service/graphql"
TOKEN_PATH = "/auth/oauth/token"

REGISTER_PLAYER_BY_EMAIL = """
mutation registerPlayerByEmail($eventId: ID!, $email: String!) {
  registerPlayerByEmail(eventId: $eventId, email: $email) { id firstName lastName }
}
"""

REGISTER_GUEST_PLAYER = """
mutation registerGuestPlayer($eventId: ID!, $firstName: String!, $lastName: String!) {
  registerGuestPlayer(eventId: $eventId, firstName: $firstName, lastName: $lastName) { id firstName lastName }
}
"""

SET_REGISTERED_PLAYER_NAME = """
mutation setRegisteredPlayerName($input: SetRegisteredPlayerNameInput!) {
  setRegisteredPlayerName(input: $input) { id firstName lastName }
}
"""

PLAYERS_IN_EVENT = """
query getPlayersInEvent($eventId: ID!) {
  event(id: $eventId) { registeredPlayers { id firstName lastName } }
}
"""

ME = """
query getMe {
  me { personaId roles { organization { id name } } }
}
"""

UPCOMING_EVENTS = """
query getUpcomingEvents($orgId: ID!) {
  upcomingEvents(orgId: $orgId) { events { id title scheduledStartTime } }
}
"""

PLAYER_REGISTERED = """
subscription playerRegistered($eventId: ID!) {
  playerRegistered(eventId: $eventId) { id firstName lastName }
}
"""


class EventlinkClient(EventRegistrationPort, EventDiscoveryPort):
    """GraphQL client for the EventLink event-management API."""

    def __init__(
        self,
        base_url: str = "https://api.tabletop.wizards.com",
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.client = httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout,
            transport=transport,
            headers={"Content-Type": "application/json"},
        )
        logger.info(f"Initialized EventlinkClient with base_url={base_url}, timeout={timeout}")

    async def login(self, username: str, password: str) -> None:
        try:
            response = await self.client.post(
                TOKEN_PATH,
                data={"grant_type": "password", "username": username, "password": password},
                headers={"Content-Type": "application/x-www-form-urlencoded"},
            )
            response.raise_for_status()
        except httpx.TimeoutException as e:
            logger.error(f"Timeout logging in to EventLink: {e}")
            raise ConnectionError(f"Timeout logging in to EventLink: {e}") from e
        except httpx.ConnectError as e:
            logger.error(f"Failed to connect to EventLink: {e}")
            raise ConnectionError(f"Failed to connect to EventLink: {e}") from e
        except httpx.HTTPStatusError as e:
            logger.error(f"EventLink login failed with status {e.response.status_code}: {e.response.text}")
            raise ConnectionError(f"EventLink login failed: {e.response.status_code} - {e.response.text}") from e
        try:
            token = response.json()["access_token"]
        except (ValueError, KeyError, TypeError) as e:
            logger.error(f"EventLink login response did not contain an access token: {e}")
            raise ConnectionError(f"EventLink login response did not contain an access token: {e}") from e
        self.client.headers["Authorization"] = f"Bearer {token}"
        logger.info(f"Logged in to EventLink as {username}")

    async def aclose(self) -> None:
        await self.client.aclose()

    # EventRegistrationPort ---------------------------------------------------

    async def register_player_by_email(self, event_id: str, email: str) -> RegistrationResult:
        payload = await self._execute(REGISTER_PLAYER_BY_EMAIL, {"eventId": event_id, "email": email})
        return _registration_result(payload)

    async def register_guest_player(self, event_id: str, first_name: str, last_name: str) -> RegistrationResult:
        payload = await self._execute(
            REGISTER_GUEST_PLAYER,
            {"eventId": event_id, "firstName": first_name, "lastName": last_name},
        )
        return _registration_result(payload)

    async def set_registered_player_name(
        self,
        event_id: str,
        player_id: str,
        first_name: str,
        last_name: str,
    ) -> None:
        payload = await self._execute(
            SET_REGISTERED_PLAYER_NAME,
            {"input": {"eventId": event_id, "id": player_id, "firstName": first_name, "lastName": last_name}},
        )
        _raise_for_errors(payload, "setRegisteredPlayerName")

    async def get_players_in_event(self, event_id: str) -> List[ExistingParticipant]:
        payload = await self._execute(PLAYERS_IN_EVENT, {"eventId": event_id})
        data = _raise_for_errors(payload, "getPlayersInEvent")
        players = (data.get("event") or {}).get("registeredPlayers") or []
        return [
            ExistingParticipant(first_name=player.get("firstName"), last_name=player.get("lastName"))
            for player in players
        ]

    async def subscribe_to_player_registered(self, event_id: str) -> AsyncIterator[NotifiedPlayer]:
        request = self.client.build_request(
            "POST",
            GRAPHQL_PATH,
            json={"query": PLAYER_REGISTERED, "variables": {"eventId": event_id}},
            headers={"Accept": "text/event-stream"},
            timeout=httpx.Timeout(self.client.timeout.connect, read=None),
        )
        try:
            response = await self.client.send(request, stream=True)
            response.raise_for_status()
        except httpx.TimeoutException as e:
            logger.error(f"Timeout subscribing to EventLink player registrations: {e}")
            raise ConnectionError(f"Timeout subscribing to EventLink player registrations: {e}") from e
        except httpx.ConnectError as e:
            logger.error(f"Failed to connect to EventLink for player registrations: {e}")
            raise ConnectionError(f"Failed to connect to EventLink: {e}") from e
        except httpx.HTTPStatusError as e:
            await e.response.aclose()
            logger.error(f"EventLink subscription returned error status {e.response.status_code}")
            raise ConnectionError(f"EventLink subscription error: {e.response.status_code}") from e
        logger.info(f"Subscribed to player registrations for event {event_id}")
        return self._player_registered_stream(response)

    # EventDiscoveryPort ------------------------------------------------------

    async def get_me(self) -> Account:
        payload = await self._execute(ME, {})
        me = _raise_for_errors(payload, "getMe").get("me") or {}
        return Account(
            id=me.get("personaId"),
            organizations=[
                Organization(id=role["organization"]["id"], name=role["organization"]["name"])
                for role in me.get("roles") or []
            ],
        )

    async def get_upcoming_events(self, organization_id: str) -> List[EventSummary]:
        payload = await self._execute(UPCOMING_EVENTS, {"orgId": organization_id})
        page = _raise_for_errors(payload, "getUpcomingEvents").get("upcomingEvents") or {}
        return [
            EventSummary(
                id=event["id"],
                title=event["title"],
                scheduled_start_time=_parse_timestamp(event.get("scheduledStartTime")),
            )
            for event in page.get("events") or []
        ]

    # Internal ----------------------------------------------------------------

    async def _execute(self, query: str, variables: Dict[str, Any]) -> Dict[str, Any]:
        try:
            response = await self.client.post(GRAPHQL_PATH, json={"query": query, "variables": variables})
            response.raise_for_status()
            return response.json()
        except httpx.TimeoutException as e:
            logger.error(f"Timeout connecting to EventLink API: {e}")
            raise ConnectionError(f"Timeout connecting to EventLink API: {e}") from e
        except httpx.ConnectError as e:
            logger.error(f"Failed to connect to EventLink API: {e}")
            raise ConnectionError(f"Failed to connect to EventLink API: {e}") from e
        except httpx.HTTPStatusError as e:
            logger.error(f"EventLink API returned error status {e.response.status_code}: {e.response.text}")
            raise ConnectionError(f"EventLink API error: {e.response.status_code} - {e.response.text}") from e

    async def _player_registered_stream(self, response: httpx.Response) -> AsyncIterator[NotifiedPlayer]:
        try:
            async for event, data in iter_sse_events(response.aiter_lines()):
                if event == "complete":
                    logger.info("EventLink closed the player registration subscription")
                    return
                if event != "next" or not data:
                    continue
                message = json.loads(data)
                if message.get("errors"):
                    logger.error(f"EventLink subscription error: {message['errors']}")
                    continue
                player = (message.get("data") or {}).get("playerRegistered")
                if player:
                    yield NotifiedPlayer(
                        id=player["id"],
                        first_name=player.get("firstName"),
                        last_name=player.get("lastName"),
                    )
        finally:
            await response.aclose()


async def iter_sse_events(lines: AsyncIterator[str]) -> AsyncIterator[Tuple[str, str]]:
    """Group server-sent-event lines into (event, data) pairs."""

    event = "message"
    data: List[str] = []
    async for line in lines:
        if not line:
            if data:
                yield event, "\n".join(data)
            event, data = "message", []
        elif line.startswith(":"):
            continue
        else:
            field, _, value = line.partition(":")
            value = value[1:] if value.startswith(" ") else value
            if field == "event":
                event = value
            elif field == "data":
                data.append(value)
    if data:
        yield event, "\n".join(data)


def _registration_result(payload: Dict[str, Any]) -> RegistrationResult:
    errors = payload.get("errors") or []
    if errors:
        return RegistrationResult(success=False, error_message=errors[0].get("message"))
    return RegistrationResult(success=True)


def _raise_for_errors(payload: Dict[str, Any], operation: str) -> Dict[str, Any]:
    errors = payload.get("errors") or []
    if errors:
        message = "; ".join(error.get("message", "") for error in errors)
        logger.error(f"EventLink {operation} failed: {message}")
        raise ConnectionError(f"EventLink {operation} failed: {message}")
    return payload.get("data") or {}


def _parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    return datetime.fromisoformat(value.replace("Z", "+00:00"))
