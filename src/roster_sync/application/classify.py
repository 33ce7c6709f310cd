from __future__ import annotations

from roster_sync.domain.models import RegistrationOutcome, RegistrationResult

ALREADY_REGISTERED_MARKER = "Player already registered"
NO_ACCOUNT_MARKER = "No platform account found"


def classify_registration(result: RegistrationResult) -> RegistrationOutcome:
    """Map a registration-by-email answer onto the outcomes the orchestrator acts on."""

    if result.success:
        return RegistrationOutcome.SUCCESS
    message = result.error_message or ""
    if ALREADY_REGISTERED_MARKER in message:
        return RegistrationOutcome.ALREADY_REGISTERED
    if NO_ACCOUNT_MARKER in message:
        return RegistrationOutcome.NO_ACCOUNT_FOUND
    return RegistrationOutcome.OTHER_FAILURE
