"""Riot API adapter exposing matches as :class:`MatchRecord` values."""

from lp_recap.api_client.riot_client import Region, RiotApiClient
from lp_recap.ports import MatchSource
from lp_recap.schemas.records import GameKind, MatchRecord


class RiotMatchSource(MatchSource):
    """Fetches single matches of one game kind from the Riot API."""

    def __init__(
        self,
        client: RiotApiClient,
        game_kind: GameKind,
        region: Region | None = None,
    ) -> None:
        self._client = client
        self.game_kind = game_kind
        self._region = region

    async def fetch(self, match_id: str) -> MatchRecord:
        if self.game_kind is GameKind.TFT:
            tft_match = await self._client.get_tft_match(match_id, self._region)
            return tft_match.to_record()
        match = await self._client.get_match(match_id, self._region)
        return match.to_record()

    def __repr__(self) -> str:
        return f"<RiotMatchSource(game_kind={self.game_kind.value})>"
