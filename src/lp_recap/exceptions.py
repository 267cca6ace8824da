"""Exception hierarchy shared by the stores, the Riot client and the engines."""


class LpRecapError(Exception):
    """Base class for all application errors."""


class InvalidRank(LpRecapError, ValueError):
    """Raised when a tier or division string is not part of the ladder."""

    def __init__(self, tier: str | None, division: str | None, reason: str) -> None:
        super().__init__(f"Invalid rank {tier!r}/{division!r}: {reason}")
        self.tier = tier
        self.division = division


class StoreUnavailable(LpRecapError):
    """Raised when the backing store cannot serve a request."""

    def __init__(self, operation: str, message: str) -> None:
        super().__init__(f"Store unavailable during {operation}: {message}")
        self.operation = operation


class RiotApiError(LpRecapError):
    """Exception for Riot API errors."""

    def __init__(self, status_code: int, message: str, url: str) -> None:
        super().__init__(f"Riot API error {status_code}: {message}")
        self.status_code = status_code
        self.url = url


class NotFound(RiotApiError):
    """The requested resource does not exist upstream (404)."""


class RateLimited(RiotApiError):
    """Upstream kept answering 429 after the client ran out of retries."""


class Unauthorized(RiotApiError):
    """The API key was rejected (401/403)."""


class UpstreamError(RiotApiError):
    """Any other upstream failure: 5xx, transport errors, unparseable payloads."""
