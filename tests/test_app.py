"""Tests for wiring the application from settings."""

from pathlib import Path

import pytest

from lp_recap.app import AppContext
from lp_recap.config import Settings
from lp_recap.schemas.records import GameKind


@pytest.mark.asyncio
async def test_context_from_settings(tmp_path: Path) -> None:
    settings = Settings(
        _env_file=None,
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'lp_recap.db'}",
    )
    context = AppContext.from_settings(settings)
    try:
        await context.init_db()

        assert await context.tracking.list_tracked(GameKind.LEAGUE) == []
        assert await context.match_cache.get_matches([], GameKind.TFT) == []
    finally:
        await context.close()


def test_tft_key_falls_back_to_league_key() -> None:
    settings = Settings(_env_file=None, riot_api_key="league")
    assert settings.tft_api_key == "league"

    settings = Settings(_env_file=None, riot_api_key="league", tft_riot_api_key="tft")
    assert settings.tft_api_key == "tft"
