from .application.orchestrator import RegistrationOrchestrator
from .application.services import RosterReconciliationService
from .adapters.eventlink.client import EventlinkClient
from .adapters.eventlink.mock import MockEventlinkClient
from .infrastructure.csv_files import CsvMissingPlayerWriter, CsvParticipantSource

__all__ = [
    "RegistrationOrchestrator",
    "RosterReconciliationService",
    "EventlinkClient",
    "MockEventlinkClient",
    "CsvMissingPlayerWriter",
    "CsvParticipantSource",
]
