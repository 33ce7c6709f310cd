from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ParticipantRecord(BaseModel):
    """A player we intend to add to the event, as read from the input file."""

    model_config = ConfigDict(frozen=True)

    first_name: str
    last_name: str
    email: Optional[str] = None
    row_number: Optional[int] = Field(default=None, exclude=True)

    @field_validator("first_name", "last_name")
    @classmethod
    def validate_name_present(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("name must not be empty")
        return value

    @field_validator("email", mode="before")
    @classmethod
    def blank_email_is_guest(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        value = value.strip()
        return value or None

    @property
    def is_guest(self) -> bool:
        return self.email is None

    @property
    def display_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


class ExistingParticipant(BaseModel):
    """A player already present in the event roster."""

    model_config = ConfigDict(frozen=True)

    first_name: Optional[str] = None
    last_name: Optional[str] = None

    @field_validator("first_name", "last_name", mode="before")
    @classmethod
    def trim_name(cls, value: Optional[str]) -> Optional[str]:
        # Trimmed the same way as input rows.
        return value.strip() if isinstance(value, str) else value

    def matches(self, record: ParticipantRecord) -> bool:
        return self.first_name == record.first_name and self.last_name == record.last_name


class NotifiedPlayer(BaseModel):
    """Player pushed by the event's player-registered notification stream."""

    id: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None

    def has_name(self) -> bool:
        return bool(self.first_name) and bool(self.last_name)


class RegistrationResult(BaseModel):
    """Raw answer of a registration call."""

    success: bool
    error_message: Optional[str] = None


class RegistrationOutcome(str, Enum):
    SUCCESS = "success"
    ALREADY_REGISTERED = "already_registered"
    NO_ACCOUNT_FOUND = "no_account_found"
    OTHER_FAILURE = "other_failure"


class DedupDecision(str, Enum):
    INCLUDE = "include"
    INCLUDE_WITH_WARNING = "include_with_warning"
    SKIP = "skip"


class OrchestratorState(str, Enum):
    IDLE = "idle"
    AWAITING_CONFIRMATION = "awaiting_confirmation"
    DRAINING = "draining"
    DONE = "done"


class Organization(BaseModel):
    id: str
    name: str


class Account(BaseModel):
    """The logged-in user and the organizations they hold a role in."""

    id: Optional[str] = None
    organizations: List[Organization] = Field(default_factory=list)


class EventSummary(BaseModel):
    id: str
    title: str
    scheduled_start_time: Optional[datetime] = None

    def label(self) -> str:
        if self.scheduled_start_time is None:
            return self.title
        return f"{self.title} ({self.scheduled_start_time.date().isoformat()})"


class ReconciliationReport(BaseModel):
    """Summary of one sync run."""

    event_id: str
    rows_read: int = 0
    skipped_duplicates: int = 0
    warned_duplicates: int = 0
    queued: int = 0
    missing: List[ParticipantRecord] = Field(default_factory=list)

    @property
    def registered(self) -> int:
        return self.queued - len(self.missing)
