from __future__ import annotations

import asyncio
import logging
import sys
from typing import Optional, Sequence, Tuple, Union

import click

from roster_sync.adapters.eventlink.client import EventlinkClient
from roster_sync.adapters.eventlink.mock import MockEventlinkClient
from roster_sync.application.normalize import CsvMappings
from roster_sync.application.services import RosterReconciliationService
from roster_sync.config import Settings
from roster_sync.domain.errors import RosterSyncError
from roster_sync.domain.models import ReconciliationReport
from roster_sync.infrastructure.csv_files import CsvMissingPlayerWriter, CsvParticipantSource

logger = logging.getLogger("roster_sync")

Eventlink = Union[EventlinkClient, MockEventlinkClient]


async def _connect(mock: bool, mock_accounts: Sequence[str] = ()) -> Eventlink:
    if mock:
        logger.info("Using in-memory EventLink mock")
        return MockEventlinkClient(accounts=mock_accounts)
    settings = Settings.from_env()
    client = EventlinkClient(base_url=settings.base_url, timeout=settings.timeout)
    try:
        await client.login(settings.username, settings.password)
    except ConnectionError:
        await client.aclose()
        raise
    return client


async def _close(eventlink: Eventlink) -> None:
    if isinstance(eventlink, EventlinkClient):
        await eventlink.aclose()


async def _sync(
    event_id: str,
    input_path: str,
    output_path: str,
    mappings: CsvMappings,
    mock: bool,
    mock_accounts: Sequence[str],
) -> ReconciliationReport:
    eventlink = await _connect(mock, mock_accounts)
    try:
        service = RosterReconciliationService(eventlink=eventlink, mappings=mappings)
        return await service.reconcile(
            event_id,
            source=CsvParticipantSource(input_path),
            sink=CsvMissingPlayerWriter(output_path, mappings),
        )
    finally:
        await _close(eventlink)


async def _events(mock: bool) -> None:
    eventlink = await _connect(mock)
    try:
        service = RosterReconciliationService(eventlink=eventlink, discovery=eventlink)
        upcoming = await service.list_upcoming_events()
    finally:
        await _close(eventlink)
    for organization, events in upcoming.items():
        click.echo(organization)
        for event in events:
            click.echo(f"  {event.id}  {event.label()}")


def _run(coro) -> Optional[ReconciliationReport]:
    try:
        return asyncio.run(coro)
    except (RosterSyncError, ConnectionError) as exc:
        logger.error("%s", exc)
        sys.exit(1)


@click.group()
@click.option("--verbose", "-v", is_flag=True, default=False, help="Enable debug logging")
def cli(verbose: bool) -> None:
    """Add players from a CSV file to an EventLink event."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )


@cli.command()
@click.option("--event-id", required=True, help="EventLink event to add players to")
@click.option(
    "--input",
    "input_path",
    required=True,
    type=click.Path(exists=True, dir_okay=False),
    help="Player CSV with a header row",
)
@click.option(
    "--output",
    "output_path",
    required=True,
    type=click.Path(dir_okay=False),
    help="Where to save the players that could not be added",
)
@click.option("--first-name-column", default="firstName", show_default=True)
@click.option("--last-name-column", default="lastName", show_default=True)
@click.option("--email-column", default="email", show_default=True)
@click.option("--mock", is_flag=True, default=False, help="Run against an in-memory EventLink instead of the API")
@click.option(
    "--mock-account",
    "mock_accounts",
    multiple=True,
    help="[--mock] Email address that has an EventLink account (repeatable)",
)
def sync(
    event_id: str,
    input_path: str,
    output_path: str,
    first_name_column: str,
    last_name_column: str,
    email_column: str,
    mock: bool,
    mock_accounts: Tuple[str, ...],
) -> None:
    """Register every player in INPUT and write the ones that could not be added to OUTPUT."""
    mappings = CsvMappings(first_name=first_name_column, last_name=last_name_column, email=email_column)
    report = _run(_sync(event_id, input_path, output_path, mappings, mock, mock_accounts))
    logger.info(
        "Done! rows=%d skipped=%d warned=%d registered=%d missing=%d",
        report.rows_read,
        report.skipped_duplicates,
        report.warned_duplicates,
        report.registered,
        len(report.missing),
    )


@cli.command()
@click.option("--mock", is_flag=True, default=False, help="Run against an in-memory EventLink instead of the API")
def events(mock: bool) -> None:
    """List upcoming events for every organization the account belongs to."""
    _run(_events(mock))


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
