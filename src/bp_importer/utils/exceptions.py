"""
Custom exceptions for the blood pressure importer.

Each error domain carries a ``kind`` drawn from a fixed enumeration plus
the structured context needed to render its message.
"""

from enum import Enum


class BPImporterError(Exception):
    """Base exception for all blood pressure importer errors."""

    pass


class ConfigurationError(BPImporterError):
    """Raised when there is a configuration error."""

    pass


class ValidationError(BPImporterError):
    """Raised when data validation fails."""

    pass


class ParseErrorKind(str, Enum):
    """File-level parse failures."""

    EMPTY_FILE = "empty_file"
    MISSING_REQUIRED_COLUMNS = "missing_required_columns"
    DECODE_FAILURE = "decode_failure"


class ParseError(BPImporterError):
    """Raised when a file as a whole cannot be turned into readings."""

    def __init__(
        self,
        kind: ParseErrorKind,
        missing_columns: list[str] | None = None,
        encoding: str | None = None,
    ) -> None:
        self.kind = kind
        self.missing_columns = missing_columns or []
        self.encoding = encoding
        super().__init__(self.message)

    @property
    def message(self) -> str:
        """Human readable description of the failure."""
        if self.kind == ParseErrorKind.EMPTY_FILE:
            return "CSV file is empty"
        if self.kind == ParseErrorKind.MISSING_REQUIRED_COLUMNS:
            missing = ", ".join(self.missing_columns)
            return f"CSV file is missing required columns: {missing}"
        return f"CSV file could not be decoded as {self.encoding or 'text'}"


class RowErrorKind(str, Enum):
    """Row-level failures; the parser skips the offending row."""

    INVALID_DATE_FORMAT = "invalid_date_format"
    INVALID_BLOOD_PRESSURE_VALUES = "invalid_blood_pressure_values"


class RowError(BPImporterError):
    """Raised when a single row cannot be turned into a reading."""

    def __init__(self, kind: RowErrorKind, value: str | None = None) -> None:
        self.kind = kind
        self.value = value
        super().__init__(self.message)

    @property
    def message(self) -> str:
        """Human readable description of the failure."""
        if self.kind == RowErrorKind.INVALID_DATE_FORMAT:
            return f"Invalid date or time format: {self.value!r}"
        return f"Invalid blood pressure values: {self.value!r}"


class HealthStoreErrorKind(str, Enum):
    """Failures reported by the external health store."""

    UNAVAILABLE = "unavailable"
    AUTHORIZATION_DENIED = "authorization_denied"
    WRITE_FAILED = "write_failed"
    QUERY_FAILED = "query_failed"


class HealthStoreError(BPImporterError):
    """Raised when the external health store rejects or fails an operation."""

    def __init__(
        self,
        kind: HealthStoreErrorKind,
        sample_type: str | None = None,
        detail: str | None = None,
    ) -> None:
        self.kind = kind
        self.sample_type = sample_type
        self.detail = detail
        super().__init__(self.message)

    @property
    def message(self) -> str:
        """Human readable description of the failure."""
        if self.kind == HealthStoreErrorKind.UNAVAILABLE:
            text = f"Health store does not support {self.sample_type or 'this data'}"
        elif self.kind == HealthStoreErrorKind.AUTHORIZATION_DENIED:
            text = f"Health store authorization was denied for {self.sample_type or 'this data'}"
        elif self.kind == HealthStoreErrorKind.WRITE_FAILED:
            text = "Failed to save reading to health store"
        else:
            text = "Failed to query health store"
        if self.detail:
            text = f"{text}: {self.detail}"
        return text


class PersistenceErrorKind(str, Enum):
    """Failures of the key-value persistence facility."""

    READ_FAILED = "read_failed"
    WRITE_FAILED = "write_failed"
    DECODE_FAILED = "decode_failed"


class PersistenceError(BPImporterError):
    """Raised when persisted state cannot be read or written."""

    def __init__(self, kind: PersistenceErrorKind, key: str, detail: str | None = None) -> None:
        self.kind = kind
        self.key = key
        self.detail = detail
        super().__init__(self.message)

    @property
    def message(self) -> str:
        """Human readable description of the failure."""
        action = {
            PersistenceErrorKind.READ_FAILED: "read",
            PersistenceErrorKind.WRITE_FAILED: "write",
            PersistenceErrorKind.DECODE_FAILED: "decode",
        }[self.kind]
        text = f"Failed to {action} persisted value {self.key!r}"
        if self.detail:
            text = f"{text}: {self.detail}"
        return text
