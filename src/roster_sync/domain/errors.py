from __future__ import annotations

from typing import TYPE_CHECKING, Dict, List, Optional, Sequence

if TYPE_CHECKING:
    from roster_sync.domain.models import ParticipantRecord


class RosterSyncError(Exception):
    pass


class MalformedInputError(RosterSyncError):
    """Raised when an input row is missing a first or last name."""

    def __init__(self, message: str, row_number: Optional[int] = None, row: Optional[Dict[str, str]] = None) -> None:
        super().__init__(message)
        self.row_number = row_number
        self.row = row or {}


class OutputWriteError(RosterSyncError):
    pass


class ConfigurationError(RosterSyncError):
    pass


class SubscriptionClosedError(RosterSyncError):
    """The player-registered stream ended while a confirmation was still expected.

    ``unprocessed`` holds the players already known to be missing, followed by
    the unconfirmed player and every player not yet attempted, in input order.
    """

    def __init__(self, message: str, unprocessed: Optional[Sequence[ParticipantRecord]] = None) -> None:
        super().__init__(message)
        self.unprocessed: List[ParticipantRecord] = list(unprocessed or [])
