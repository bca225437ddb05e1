"""Domain exceptions.

Every error raised by ReelRoll derives from ``ReelRollError``. Subclasses set
``http_status_code`` and ``error_code`` so the API layer can render them
without knowing each type.
"""

from fastapi import status


class ReelRollError(Exception):
    """Base exception for all ReelRoll errors."""

    http_status_code: int = status.HTTP_400_BAD_REQUEST
    error_code: str = "REELROLL_ERROR"

    def __init__(self, message: str = "An error occurred"):
        self.message = message
        super().__init__(self.message)


class ConfigurationError(ReelRollError):
    """Missing credentials or an unusable section selection."""

    error_code = "CONFIGURATION_ERROR"


class TransportFailure(ReelRollError):
    """A section fetch timed out, was refused, or returned an HTTP error."""

    http_status_code = status.HTTP_502_BAD_GATEWAY
    error_code = "TRANSPORT_FAILURE"


class PayloadFormatError(ReelRollError):
    """A section payload is neither a markup document nor a JSON envelope."""

    http_status_code = status.HTTP_502_BAD_GATEWAY
    error_code = "PAYLOAD_FORMAT"


class MalformedRecord(ReelRollError):
    """One upstream record could not be normalized."""

    error_code = "MALFORMED_RECORD"


class EmptyPoolError(ReelRollError):
    """No items are available across the selected sections."""

    http_status_code = status.HTTP_404_NOT_FOUND
    error_code = "EMPTY_POOL"

    def __init__(self, message: str = "No items found in selected sections"):
        super().__init__(message)


class ReconciliationMismatch(ReelRollError):
    """The measured landing slot disagrees with the drawn pick."""

    http_status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    error_code = "RECONCILIATION_MISMATCH"

    def __init__(self, expected_index: int, measured_index: int):
        self.expected_index = expected_index
        self.measured_index = measured_index
        super().__init__(f"Reveal landed on pool index {measured_index}, expected {expected_index}")


class CatalogError(ReelRollError):
    """The catalog server answered the connectivity check with an unexpected error."""

    http_status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    error_code = "CATALOG_ERROR"

    def __init__(self, message: str = "Error validating credentials"):
        super().__init__(message)


class ServerUnreachableError(CatalogError):
    http_status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    error_code = "SERVER_UNREACHABLE"

    def __init__(self, message: str = "Cannot connect to Plex server"):
        super().__init__(message)


class UnauthorizedError(CatalogError):
    http_status_code = status.HTTP_401_UNAUTHORIZED
    error_code = "UNAUTHORIZED"

    def __init__(self, message: str = "Invalid Plex token"):
        super().__init__(message)
