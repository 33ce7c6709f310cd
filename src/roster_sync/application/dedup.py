from __future__ import annotations

import logging
from typing import Iterable, List, Sequence, Tuple

from roster_sync.domain.models import DedupDecision, ExistingParticipant, ParticipantRecord

logger = logging.getLogger(__name__)


class DuplicateFilter:
    """Cross-references input players against the roster snapshot taken before the run."""

    def __init__(self, existing: Iterable[ExistingParticipant]) -> None:
        self._existing: Tuple[ExistingParticipant, ...] = tuple(existing)

    def decide(self, record: ParticipantRecord) -> DedupDecision:
        if not any(player.matches(record) for player in self._existing):
            logger.info("Queueing %s", record.display_name)
            return DedupDecision.INCLUDE

        if record.email:
            logger.warning(
                'There is already a player in this event with the name "%s". They may have already been added - '
                "if the email address %s is in the error file, you may want to ignore it.",
                record.display_name,
                record.email,
            )
            return DedupDecision.INCLUDE_WITH_WARNING

        logger.warning(
            'There is already a player in this event with the name "%s". '
            "They did not provide an email address. They will be skipped.",
            record.display_name,
        )
        return DedupDecision.SKIP

    def filter(self, records: Sequence[ParticipantRecord]) -> List[Tuple[ParticipantRecord, DedupDecision]]:
        """Return every record with its decision, in input order."""
        return [(record, self.decide(record)) for record in records]
