"""Domain errors and failure typing."""

from __future__ import annotations


class PipelineError(Exception):
    """Base class for pipeline failures."""

    error_code = "PIPELINE_ERROR"

    def __init__(self, message: str, *, key: str | None = None) -> None:
        super().__init__(message)
        self.key = key


class ConfigError(PipelineError):
    """Raised for invalid or missing configuration."""

    error_code = "CONFIG_ERROR"


class ContractError(PipelineError):
    """Raised when strict output contracts are broken."""

    error_code = "CONTRACT_ERROR"


class FetchFailure(PipelineError):
    """Raised when a remote page could not be retrieved or staged."""

    error_code = "FETCH_FAILURE"


class StagingReadFailure(PipelineError):
    """Raised when an expected staged page is missing or unreadable."""

    error_code = "STAGING_READ_FAILURE"


class AlignmentFault(PipelineError):
    """Raised when staged rows do not line up with the entity's field layout."""

    error_code = "ALIGNMENT_FAULT"


class ResolutionFault(PipelineError):
    """Raised when a village references a regency the resolver never saw."""

    error_code = "RESOLUTION_FAULT"


class SerializationFailure(PipelineError):
    """Raised when an output artifact could not be written."""

    error_code = "SERIALIZATION_FAILURE"
