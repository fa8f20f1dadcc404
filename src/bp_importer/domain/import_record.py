"""
Import audit domain models.

An ImportRecord summarizes one import attempt. Successful attempts keep a
snapshot of the imported batch; failed attempts keep the error message.
"""

import uuid
from datetime import datetime, timezone
from typing import NamedTuple

from pydantic import BaseModel, ConfigDict, Field, model_validator

from bp_importer.domain.reading import Reading

NO_DATE_RANGE = "N/A"


class ImportTally(NamedTuple):
    """Outcome counts of one import batch."""

    imported: int
    skipped: int

    @property
    def total(self) -> int:
        return self.imported + self.skipped


class ImportRecord(BaseModel):
    """One audit entry for an import attempt."""

    record_id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    file_name: str
    import_timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    reading_count: int = Field(ge=0)
    date_range_label: str = NO_DATE_RANGE
    success: bool
    error_message: str | None = None
    readings: list[Reading] | None = Field(
        None, description="Snapshot of the batch, kept only for successful imports"
    )

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="after")
    def _check_outcome_fields(self) -> "ImportRecord":
        if not self.success and self.readings is not None:
            raise ValueError("failed import records cannot carry a readings snapshot")
        if self.success and self.error_message is not None:
            raise ValueError("successful import records cannot carry an error message")
        return self
