from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .models import TransactionOutcome


class SsidError(Exception):
    """Base exception for DID registry operations."""

    error_code = "ssidError"

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class InvalidMnemonic(SsidError):
    error_code = "notValidMnemonic"


class InvalidIdentifierFormat(SsidError):
    error_code = "notValidIdentifier"


class InvalidIdentifierLength(SsidError):
    error_code = "identifierLengthInvalid"


class DataTooLarge(SsidError):
    error_code = "dataTooLarge"


class FetchFailed(SsidError):
    error_code = "fetchFailed"


class ChainServiceError(SsidError):
    """Chain client unavailable or misconfigured."""

    error_code = "chainUnavailable"


class TransactionFailed(SsidError):
    """A submitted transaction resolved to a failure outcome."""

    def __init__(self, outcome: "TransactionOutcome") -> None:
        self.outcome = outcome
        self.error_code = outcome.kind
        super().__init__(outcome.describe())
