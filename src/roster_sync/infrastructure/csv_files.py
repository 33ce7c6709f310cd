from __future__ import annotations

import csv
import logging
from pathlib import Path
from typing import Dict, Iterator, Sequence

from roster_sync.application.normalize import CsvMappings
from roster_sync.domain.errors import OutputWriteError
from roster_sync.domain.models import ParticipantRecord
from roster_sync.ports.tabular import MissingPlayerSink, ParticipantSource

logger = logging.getLogger(__name__)


class CsvParticipantSource(ParticipantSource):
    """Reads the participant file; the first row is the header."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def rows(self) -> Iterator[Dict[str, str]]:
        # utf-8-sig: spreadsheet exports often start with a BOM
        with open(self.path, "r", newline="", encoding="utf-8-sig") as fh:
            yield from csv.DictReader(fh)


class CsvMissingPlayerWriter(MissingPlayerSink):
    """Writes unregistered players in the input file's column layout.

    The file is written to a temporary sibling and renamed into place, so the
    destination either holds the complete result or is left untouched.
    """

    def __init__(self, path: str | Path, mappings: CsvMappings | None = None) -> None:
        self.path = Path(path)
        self.mappings = mappings or CsvMappings()

    def write(self, records: Sequence[ParticipantRecord]) -> None:
        temp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(temp_path, "w", newline="", encoding="utf-8") as fh:
                writer = csv.DictWriter(fh, fieldnames=self.mappings.header())
                writer.writeheader()
                for record in records:
                    writer.writerow(self.mappings.to_row(record))
            temp_path.replace(self.path)
        except OSError as e:
            if temp_path.exists():
                temp_path.unlink()
            logger.error(f"Failed to write missing players to {self.path}: {e}")
            raise OutputWriteError(f"Failed to write missing players to {self.path}: {e}") from e
        logger.info(f"Wrote {len(records)} missing players to {self.path}")
