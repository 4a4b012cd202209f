"""Tests for application wiring and lifecycle."""

import time
from datetime import datetime

import pytest

from conftest import make_message
from wabot.app import WabotApp
from wabot.core.types import ConnectionState
from wabot.messenger.models import ConnectionUpdate


@pytest.fixture
def app(config, cache, gateway, ai_client, tiktok):
    return WabotApp(config, cache, gateway=gateway, ai_client=ai_client, tiktok=tiktok)


class TestWabotApp:
    @pytest.mark.asyncio
    async def test_start_attaches_and_starts_gateway(self, app, gateway, cache):
        await app.start()
        assert ("start",) in gateway.calls
        await gateway._on_messages([make_message(text="halo", message_id="A")])
        assert "A" in cache

    @pytest.mark.asyncio
    async def test_stop_closes_clients(self, app, gateway, ai_client, tiktok):
        await app.start()
        await app.stop()
        assert ("stop",) in gateway.calls
        ai_client.aclose.assert_awaited_once()
        tiktok.aclose.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_connection_events_surface_as_app_events(self, app, gateway):
        await app.start()
        await gateway._on_connection(ConnectionUpdate(state=ConnectionState.CLOSE, reason="timeout"))
        assert app.restart_requested.is_set()
        assert not app.terminate_requested.is_set()

    def test_cache_and_uptime_survive_rebuild(self, config, cache, gateway, ai_client, tiktok):
        started = (time.monotonic() - 3600, datetime(2026, 1, 1, 8, 0, 0))
        first = WabotApp(config, cache, gateway=gateway, ai_client=ai_client, tiktok=tiktok, started=started)
        second = WabotApp(config, cache, gateway=gateway, ai_client=ai_client, tiktok=tiktok, started=started)
        assert first.cache is second.cache
        assert second.services.started_at == started[0]
        assert second.services.started_wall == started[1]
