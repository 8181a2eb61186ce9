"""
Error taxonomy for property data resolution.

"Not found" is never an exception: adapters and the resolver return None.
Only InvalidInputError is meant to reach the caller of resolve().
"""
from typing import Optional


class PropertyDataError(Exception):
    """Base class for all propdata errors."""


class InvalidInputError(PropertyDataError, ValueError):
    """Empty or malformed address/city supplied by the caller."""


class ConfigurationError(PropertyDataError):
    """City configuration missing or invalid."""


class SourceUnavailableError(PropertyDataError):
    """
    An external source could not answer: network failure, timeout,
    HTTP error status, malformed payload or missing credentials.
    """

    def __init__(self, source: str, reason: str):
        self.source = source
        self.reason = reason
        super().__init__(f"{source}: {reason}")


class IntegrityViolation(PropertyDataError):
    """
    A candidate assessment record was refused because its monetary
    values did not come from an assessment-grade source.
    """

    def __init__(self, source: str, kind: str, reason: str, parcel_id: Optional[str] = None):
        self.source = source
        self.kind = kind
        self.reason = reason
        self.parcel_id = parcel_id
        super().__init__(f"{source} ({kind}): {reason}")
