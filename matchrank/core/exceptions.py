"""Exception types for matchrank.

Provider failures are recovered by the aggregator and selector at their own
boundary. Zero results are never an exception.
"""


class MatchRankError(Exception):
    """Base class for all matchrank errors."""


class ProviderError(MatchRankError):
    """A single upstream provider call failed.

    Covers HTTP errors, transport errors and timeouts, malformed payloads and
    API-level error responses.
    """

    def __init__(self, provider: str, message: str, cause: BaseException | None = None):
        self.provider = provider
        self.cause = cause
        super().__init__(f"{provider}: {message}")


class InvalidTimezoneError(MatchRankError, ValueError):
    """An unrecognized IANA timezone identifier."""

    def __init__(self, timezone: str | None):
        self.timezone = timezone
        super().__init__(f"Invalid timezone: {timezone!r}")
