from __future__ import annotations

from typing import Dict, Iterator, Sequence

from roster_sync.domain.models import ParticipantRecord


class ParticipantSource:
    """Yields raw rows (column name -> cell) from the participant file."""

    def rows(self) -> Iterator[Dict[str, str]]:
        raise NotImplementedError


class MissingPlayerSink:
    """Persists the players that could not be registered."""

    def write(self, records: Sequence[ParticipantRecord]) -> None:
        raise NotImplementedError
