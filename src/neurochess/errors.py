"""Error taxonomy for move acquisition and session orchestration."""
from __future__ import annotations


class NeuroChessError(RuntimeError):
    """Base class for domain errors."""

    code: str = "neurochess_error"


class ConfigError(NeuroChessError):
    """Seat configuration cannot be used (missing credential, unknown provider)."""

    code = "config_error"


class UnknownProviderError(ConfigError):
    code = "unknown_provider"


class TransportError(NeuroChessError):
    """Network failure or non-2xx HTTP response."""

    code = "transport_error"

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ProviderProtocolError(NeuroChessError):
    """The provider answered with an error payload or without any text."""

    code = "provider_error"


class ExtractionFailure(NeuroChessError):
    """No move token could be found in the model's reply."""

    code = "extraction_failure"


class IllegalMoveError(NeuroChessError):
    code = "illegal_move"


class ExhaustedRetriesError(NeuroChessError):
    """Every attempt failed; wraps the last recorded error."""

    code = "exhausted_retries"

    def __init__(self, attempts: int, last_error: BaseException | None) -> None:
        message = str(last_error) if last_error else "Failed to get move from LLM"
        super().__init__(message)
        self.attempts = attempts
        self.last_error = last_error


# Absorbed by the move request loop; each one consumes an attempt.
RETRYABLE_ERRORS = (TransportError, ProviderProtocolError, ExtractionFailure, IllegalMoveError)


__all__ = [
    "ConfigError",
    "ExhaustedRetriesError",
    "ExtractionFailure",
    "IllegalMoveError",
    "NeuroChessError",
    "ProviderProtocolError",
    "RETRYABLE_ERRORS",
    "TransportError",
    "UnknownProviderError",
]
