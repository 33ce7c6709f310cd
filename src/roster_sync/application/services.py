from __future__ import annotations

import logging
from typing import Dict, List, Optional

from roster_sync.application.dedup import DuplicateFilter
from roster_sync.application.normalize import CsvMappings, normalize_rows
from roster_sync.application.orchestrator import RegistrationOrchestrator
from roster_sync.domain.errors import SubscriptionClosedError
from roster_sync.domain.models import DedupDecision, EventSummary, ReconciliationReport
from roster_sync.ports.eventlink import EventDiscoveryPort, EventRegistrationPort
from roster_sync.ports.tabular import MissingPlayerSink, ParticipantSource


class RosterReconciliationService:
    """Application service: read players, drop known duplicates, register the rest, report the misses."""

    def __init__(
        self,
        eventlink: EventRegistrationPort,
        mappings: Optional[CsvMappings] = None,
        discovery: Optional[EventDiscoveryPort] = None,
    ) -> None:
        self.eventlink = eventlink
        self.mappings = mappings or CsvMappings()
        self.discovery = discovery
        self.logger = logging.getLogger(__name__)

    async def reconcile(
        self,
        event_id: str,
        source: ParticipantSource,
        sink: MissingPlayerSink,
    ) -> ReconciliationReport:
        records = normalize_rows(source.rows(), self.mappings)
        report = ReconciliationReport(event_id=event_id, rows_read=len(records))

        existing = await self.eventlink.get_players_in_event(event_id)
        self.logger.info("Event %s already has %d players", event_id, len(existing))

        queued = []
        for record, decision in DuplicateFilter(existing).filter(records):
            if decision is DedupDecision.SKIP:
                report.skipped_duplicates += 1
                continue
            if decision is DedupDecision.INCLUDE_WITH_WARNING:
                report.warned_duplicates += 1
            queued.append(record)
        report.queued = len(queued)

        orchestrator = RegistrationOrchestrator(self.eventlink, event_id)
        try:
            report.missing = await orchestrator.run(queued)
        except SubscriptionClosedError as e:
            self.logger.error("Run stopped early; writing %d missing or unattempted players", len(e.unprocessed))
            sink.write(e.unprocessed)
            raise

        sink.write(report.missing)
        self.logger.info(
            "Registered %d of %d players; %d could not be added",
            report.registered,
            report.queued,
            len(report.missing),
        )
        return report

    async def list_upcoming_events(self) -> Dict[str, List[EventSummary]]:
        """Return upcoming events keyed by organization name."""

        discovery = self._require_discovery_port()
        account = await discovery.get_me()
        if not account.organizations:
            self.logger.error("No roles found for this user!")
            return {}
        events: Dict[str, List[EventSummary]] = {}
        for organization in account.organizations:
            events[organization.name] = await discovery.get_upcoming_events(organization.id)
        return events

    def _require_discovery_port(self) -> EventDiscoveryPort:
        if self.discovery is None:
            raise RuntimeError("Event discovery port is not configured for RosterReconciliationService.")
        return self.discovery
