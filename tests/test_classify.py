from roster_sync.application.classify import (
    ALREADY_REGISTERED_MARKER,
    NO_ACCOUNT_MARKER,
    classify_registration,
)
from roster_sync.domain.models import RegistrationOutcome, RegistrationResult


def test_success():
    assert classify_registration(RegistrationResult(success=True)) is RegistrationOutcome.SUCCESS


def test_already_registered():
    result = RegistrationResult(success=False, error_message=f"Error: {ALREADY_REGISTERED_MARKER} for this event")

    assert classify_registration(result) is RegistrationOutcome.ALREADY_REGISTERED


def test_no_account_found():
    result = RegistrationResult(success=False, error_message=f"{NO_ACCOUNT_MARKER} for a@x.com")

    assert classify_registration(result) is RegistrationOutcome.NO_ACCOUNT_FOUND


def test_other_failure():
    result = RegistrationResult(success=False, error_message="Event is full")

    assert classify_registration(result) is RegistrationOutcome.OTHER_FAILURE


def test_failure_without_message_is_other_failure():
    assert classify_registration(RegistrationResult(success=False)) is RegistrationOutcome.OTHER_FAILURE


def test_markers_are_case_sensitive():
    result = RegistrationResult(success=False, error_message="player already registered")

    assert classify_registration(result) is RegistrationOutcome.OTHER_FAILURE
