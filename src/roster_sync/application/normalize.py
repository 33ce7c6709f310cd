from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Mapping, Optional

from pydantic import BaseModel

from roster_sync.domain.errors import MalformedInputError
from roster_sync.domain.models import ParticipantRecord

logger = logging.getLogger(__name__)


class CsvMappings(BaseModel):
    """Column names in the participant file for each record field."""

    first_name: str = "firstName"
    last_name: str = "lastName"
    email: str = "email"

    def header(self) -> List[str]:
        return [self.first_name, self.last_name, self.email]

    def to_row(self, record: ParticipantRecord) -> Dict[str, str]:
        return {
            self.first_name: record.first_name,
            self.last_name: record.last_name,
            self.email: record.email or "",
        }


def _cell(row: Mapping[str, Optional[str]], column: str) -> str:
    value = row.get(column)
    return value.strip() if value else ""


def normalize_row(
    row: Mapping[str, Optional[str]],
    mappings: CsvMappings,
    row_number: Optional[int] = None,
) -> ParticipantRecord:
    first_name = _cell(row, mappings.first_name)
    last_name = _cell(row, mappings.last_name)
    if not first_name or not last_name:
        logger.error("User data missing from row %s - are the column mappings set correctly? %s", row_number, dict(row))
        raise MalformedInputError(
            f"Row {row_number} is missing '{mappings.first_name}' or '{mappings.last_name}'",
            row_number=row_number,
            row=dict(row),
        )
    return ParticipantRecord(
        first_name=first_name,
        last_name=last_name,
        email=_cell(row, mappings.email),
        row_number=row_number,
    )


def normalize_rows(rows: Iterable[Mapping[str, Optional[str]]], mappings: CsvMappings) -> List[ParticipantRecord]:
    """Normalize every row, failing on the first malformed one."""
    return [normalize_row(row, mappings, row_number=index) for index, row in enumerate(rows, start=1)]
