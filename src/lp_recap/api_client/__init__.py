"""API client package."""

from lp_recap.api_client.match_source import RiotMatchSource
from lp_recap.api_client.rate_limiter import RateLimiter
from lp_recap.api_client.riot_client import Platform, Region, RiotApiClient
from lp_recap.api_client.validation import ValidationError, validate_response

__all__ = [
    "Platform",
    "RateLimiter",
    "Region",
    "RiotApiClient",
    "RiotMatchSource",
    "ValidationError",
    "validate_response",
]
