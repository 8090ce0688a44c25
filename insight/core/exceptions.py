"""
Custom exceptions for the Insight analytics engine.

Exception hierarchy:
    InsightError (base)
    ├── DataUnavailableError - No price history and upstream failed
    ├── UpstreamFailureError - Transient market data provider error
    ├── InvalidInputError - Malformed wallet/token data
    ├── NotFoundError - Unknown token reference upstream
    └── InternalError - Invariant violation inside the engine

Each exception carries a user-friendly message that can be returned to API
callers, and optionally a technical message for logging. The orchestrator
tags the first failure with the component it came from (``origin``).
"""


class InsightError(Exception):
    """
    Base exception for all Insight errors.

    Attributes:
        message: User-friendly error message (can be shown to users)
        technical_message: Detailed message for logs (optional)
        origin: Component that raised the error (set by the orchestrator)
    """

    def __init__(
        self,
        message: str = "An error occurred. Please try again later.",
        technical_message: str | None = None,
        origin: str | None = None,
    ):
        self.message = message
        self.technical_message = technical_message or message
        self.origin = origin
        super().__init__(self.technical_message)

    def __str__(self) -> str:
        if self.origin:
            return f"[{self.origin}] {self.technical_message}"
        return self.technical_message


class DataUnavailableError(InsightError):
    """
    Raised when no price history exists for a token and the refresh failed.

    A stale series is always preferred over this error; it is raised only
    when the cache has nothing to fall back to.
    """

    def __init__(
        self,
        message: str = "Market data for this token is currently unavailable.",
        technical_message: str | None = None,
        origin: str | None = None,
    ):
        super().__init__(message, technical_message, origin)


class UpstreamFailureError(InsightError):
    """
    Raised by market data sources on transport or provider errors.

    Examples:
        - Birdeye API timeout
        - HTTP 5xx
        - Malformed response body
    """

    def __init__(
        self,
        message: str = "Market data provider is temporarily unavailable.",
        technical_message: str | None = None,
        origin: str | None = None,
    ):
        super().__init__(message, technical_message, origin)


class InvalidInputError(InsightError):
    """
    Raised when wallet or token data fails validation.

    Examples:
        - Negative balance or USD value
        - NaN/infinite amounts
        - Invalid Solana address
    """

    def __init__(
        self,
        message: str = "Invalid wallet or token data.",
        technical_message: str | None = None,
        origin: str | None = None,
    ):
        super().__init__(message, technical_message, origin)


class NotFoundError(InsightError):
    """Raised when the upstream provider does not know the token."""

    def __init__(
        self,
        message: str = "Token not found.",
        technical_message: str | None = None,
        origin: str | None = None,
    ):
        super().__init__(message, technical_message, origin)


class InternalError(InsightError):
    """
    Raised on invariant violations (programming errors).

    Examples:
        - Portfolio concentrations not summing to 1
        - Unexpected exception inside a numeric component

    Never retried.
    """

    def __init__(
        self,
        message: str = "Internal analysis error.",
        technical_message: str | None = None,
        origin: str | None = None,
    ):
        super().__init__(message, technical_message, origin)
