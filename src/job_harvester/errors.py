from typing import Any


class HarvesterError(Exception):
    """Base class for every failure the pipeline converts into a skip."""


class FetchError(HarvesterError):
    """A content source could not be reached or returned unusable data."""

    def __init__(self, url: str, message: str) -> None:
        super().__init__(f"{message} ({url})")
        self.url = url


class ExtractionError(HarvesterError):
    """
    Extraction output could not be turned into a candidate record.

    `reason` is one of "no_json_found", "malformed" or "service_failure".
    `raw_text` keeps the offending service output for diagnosis.
    """

    def __init__(self, reason: str, message: str, raw_text: str | None = None) -> None:
        super().__init__(message)
        self.reason = reason
        self.raw_text = raw_text


class ExtractionServiceError(ExtractionError):
    """The extraction service itself failed (timeout, auth, quota, bad response)."""

    def __init__(self, message: str) -> None:
        super().__init__("service_failure", message)


class JobValidationError(HarvesterError):
    """
    A candidate record does not match the job-record shape.

    `reason` is one of "missing_field", "invalid_category" or "invalid_value".
    """

    def __init__(
        self,
        reason: str,
        message: str,
        field: str | None = None,
        payload: Any = None,
    ) -> None:
        super().__init__(message)
        self.reason = reason
        self.field = field
        self.payload = payload


class StoreError(HarvesterError):
    """A query, insert or delete against the job store failed."""
