"""Async Riot API client with rate limiting and validation."""

from __future__ import annotations

import asyncio
from enum import Enum
from urllib.parse import quote

import aiohttp

from lp_recap.api_client.rate_limiter import RateLimiter
from lp_recap.api_client.validation import validate_id_list, validate_list, validate_response
from lp_recap.config import Settings, get_settings
from lp_recap.exceptions import NotFound, RateLimited, Unauthorized, UpstreamError
from lp_recap.logging_config import get_logger
from lp_recap.schemas.records import GameKind
from lp_recap.schemas.riot_api import AccountDto, LeagueEntryDto, LeagueMatchDto, TftMatchDto

logger = get_logger(__name__)

DEFAULT_RETRY_AFTER_SECONDS = 10


class Region(str, Enum):
    """Riot API regional routing values (account-v1, match-v5, tft-match-v1)."""

    AMERICAS = "americas"
    ASIA = "asia"
    EUROPE = "europe"
    SEA = "sea"


class Platform(str, Enum):
    """Riot API platform routing values (league-v4, tft-league-v1)."""

    BR1 = "br1"
    EUN1 = "eun1"
    EUW1 = "euw1"
    JP1 = "jp1"
    KR = "kr"
    LA1 = "la1"
    LA2 = "la2"
    NA1 = "na1"
    OC1 = "oc1"
    PH2 = "ph2"
    RU = "ru"
    SG2 = "sg2"
    TH2 = "th2"
    TR1 = "tr1"
    TW2 = "tw2"
    VN2 = "vn2"


class RiotApiClient:
    """Async client for the Riot Games API.

    This client handles:
    - Rate limiting shared across all concurrent callers
    - Bounded retries when Riot answers 429
    - Mapping HTTP failures onto the application error types
    - Response validation

    League and TFT endpoints may use different API keys; the key is chosen
    per request.
    """

    def __init__(
        self,
        api_key: str | None = None,
        tft_api_key: str | None = None,
        rate_limiter: RateLimiter | None = None,
        settings: Settings | None = None,
    ) -> None:
        """Initialize the Riot API client.

        Args:
            api_key: League API key (defaults to settings)
            tft_api_key: TFT API key (defaults to settings, then to ``api_key``)
            rate_limiter: Custom rate limiter (defaults to configured limits)
            settings: Settings to read defaults from
        """
        settings = settings or get_settings()
        self._api_key = api_key or settings.riot_api_key
        self._tft_api_key = tft_api_key or settings.tft_riot_api_key or self._api_key
        self._rate_limiter = rate_limiter or RateLimiter.from_settings(settings)
        self._max_retries = settings.max_rate_limit_retries
        self._timeout = settings.request_timeout_seconds
        self.region = Region(settings.match_region)
        self.platform = Platform(settings.platform)
        self._session: aiohttp.ClientSession | None = None

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create the aiohttp session."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self._timeout),
            )
        return self._session

    async def close(self) -> None:
        """Close the HTTP session."""
        if self._session and not self._session.closed:
            await self._session.close()
            self._session = None

    async def __aenter__(self) -> RiotApiClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> None:
        await self.close()

    def _build_url(self, routing: str, endpoint: str) -> str:
        return f"https://{routing}.api.riotgames.com{endpoint}"

    def _key_for(self, game_kind: GameKind) -> str:
        return self._tft_api_key if game_kind is GameKind.TFT else self._api_key

    async def _request(
        self,
        routing: str,
        endpoint: str,
        game_kind: GameKind = GameKind.LEAGUE,
        params: dict[str, object] | None = None,
    ) -> object:
        """Make a rate-limited GET request to the Riot API.

        Args:
            routing: Region or platform routing value
            endpoint: API endpoint path
            game_kind: Selects which API key authenticates the request
            params: Query parameters

        Returns:
            Decoded JSON response

        Raises:
            NotFound: On 404
            Unauthorized: On 401 or 403
            RateLimited: When 429 persists past the retry budget
            UpstreamError: On any other failure
        """
        url = self._build_url(routing, endpoint)
        headers = {"X-Riot-Token": self._key_for(game_kind)}
        session = await self._get_session()
        attempt = 0

        while True:
            await self._rate_limiter.acquire()

            logger.debug("Making Riot API request", url=url, params=params, attempt=attempt)

            try:
                async with session.get(url, params=params, headers=headers) as response:
                    if response.status == 429:
                        retry_after = int(
                            response.headers.get("Retry-After", DEFAULT_RETRY_AFTER_SECONDS)
                        )
                        if attempt >= self._max_retries:
                            logger.error(
                                "Rate limited by Riot API; giving up",
                                url=url,
                                attempts=attempt + 1,
                            )
                            raise RateLimited(429, "Rate limit exceeded", url)

                        logger.warning(
                            "Rate limited by Riot API; retrying after delay",
                            retry_after=retry_after,
                            url=url,
                            attempt=attempt,
                        )
                        attempt += 1
                        await self._rate_limiter.drain()
                        await asyncio.sleep(retry_after)
                        continue

                    if response.status == 404:
                        raise NotFound(404, "Not found", url)

                    if response.status in (401, 403):
                        raise Unauthorized(response.status, "API key rejected", url)

                    response_text = await response.text()
                    if response.status != 200:
                        logger.error(
                            "Riot API error",
                            status_code=response.status,
                            url=url,
                            response=response_text[:500],
                        )
                        raise UpstreamError(response.status, response_text[:500], url)

                    try:
                        return await response.json()
                    except (aiohttp.ContentTypeError, ValueError) as e:
                        logger.error(
                            "Failed to parse JSON response",
                            url=url,
                            error=str(e),
                            response=response_text[:500],
                        )
                        raise UpstreamError(
                            response.status, f"Invalid JSON response: {e}", url
                        ) from e
            except (aiohttp.ClientError, asyncio.TimeoutError) as e:
                logger.error("Riot API request failed", url=url, error=str(e))
                raise UpstreamError(0, f"Request failed: {e!r}", url) from e

    # Account-V1

    async def get_account_by_riot_id(
        self,
        game_name: str,
        tag_line: str,
        region: Region | None = None,
    ) -> AccountDto:
        """Get account by Riot ID.

        Args:
            game_name: Game name part of Riot ID
            tag_line: Tag line part of Riot ID
            region: Regional routing value (defaults to configured region)

        Returns:
            Account data
        """
        routing = (region or self.region).value
        endpoint = (
            f"/riot/account/v1/accounts/by-riot-id/{quote(game_name)}/{quote(tag_line)}"
        )
        data = await self._request(routing, endpoint)
        return validate_response(
            AccountDto, data, "account-v1/by-riot-id", self._build_url(routing, endpoint)
        )

    # League-V4 / TFT-League-V1

    async def get_league_entries(
        self,
        puuid: str,
        game_kind: GameKind = GameKind.LEAGUE,
        platform: Platform | None = None,
    ) -> list[LeagueEntryDto]:
        """Get ranked entries for a player, one per queue type.

        Args:
            puuid: Player Universal Unique Identifier
            game_kind: Which ladder family to query
            platform: Platform routing value (defaults to configured platform)

        Returns:
            League entries (empty if the player is unranked everywhere)
        """
        routing = (platform or self.platform).value
        if game_kind is GameKind.TFT:
            endpoint = f"/tft/league/v1/by-puuid/{puuid}"
            name = "tft-league-v1/by-puuid"
        else:
            endpoint = f"/lol/league/v4/entries/by-puuid/{puuid}"
            name = "league-v4/by-puuid"

        data = await self._request(routing, endpoint, game_kind=game_kind)
        return validate_list(LeagueEntryDto, data, name, self._build_url(routing, endpoint))

    async def get_ranked_entry(
        self,
        puuid: str,
        game_kind: GameKind,
        platform: Platform | None = None,
    ) -> LeagueEntryDto | None:
        """Entry for the ladder queue of ``game_kind``, or None if unranked."""
        entries = await self.get_league_entries(puuid, game_kind, platform)
        for entry in entries:
            if entry.queue_type == game_kind.ranked_queue_type and entry.is_ranked:
                return entry
        return None

    # Match-V5 / TFT-Match-V1

    async def get_match_ids(
        self,
        puuid: str,
        game_kind: GameKind = GameKind.LEAGUE,
        region: Region | None = None,
        count: int = 20,
        queue: int | None = None,
        start_time: int | None = None,
        end_time: int | None = None,
    ) -> list[str]:
        """Get recent match IDs for a player, newest first.

        Args:
            puuid: Player Universal Unique Identifier
            game_kind: Which match API to query
            region: Regional routing value (defaults to configured region)
            count: Number of match IDs to return (max 100)
            queue: Queue ID filter (League only; tft-match-v1 has none)
            start_time: Start time filter (epoch seconds)
            end_time: End time filter (epoch seconds)

        Returns:
            List of match IDs
        """
        routing = (region or self.region).value
        params: dict[str, object] = {"count": min(count, 100)}
        if start_time is not None:
            params["startTime"] = start_time
        if end_time is not None:
            params["endTime"] = end_time

        if game_kind is GameKind.TFT:
            endpoint = f"/tft/match/v1/matches/by-puuid/{puuid}/ids"
            name = "tft-match-v1/ids"
        else:
            endpoint = f"/lol/match/v5/matches/by-puuid/{puuid}/ids"
            name = "match-v5/ids"
            if queue is not None:
                params["queue"] = queue

        data = await self._request(routing, endpoint, game_kind=game_kind, params=params)
        return validate_id_list(data, name, self._build_url(routing, endpoint))

    async def get_match(self, match_id: str, region: Region | None = None) -> LeagueMatchDto:
        """Get League match details by match ID (format: PLATFORM_GAMEID)."""
        routing = (region or self.region).value
        endpoint = f"/lol/match/v5/matches/{match_id}"
        data = await self._request(routing, endpoint)
        return validate_response(
            LeagueMatchDto, data, "match-v5/match", self._build_url(routing, endpoint)
        )

    async def get_tft_match(self, match_id: str, region: Region | None = None) -> TftMatchDto:
        """Get TFT match details by match ID."""
        routing = (region or self.region).value
        endpoint = f"/tft/match/v1/matches/{match_id}"
        data = await self._request(routing, endpoint, game_kind=GameKind.TFT)
        return validate_response(
            TftMatchDto, data, "tft-match-v1/match", self._build_url(routing, endpoint)
        )
