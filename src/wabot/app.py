"""Application orchestrator - wires all components and manages lifecycle."""

from __future__ import annotations

import asyncio
from datetime import datetime

from wabot.ai.client import AIClient, create_ai_client
from wabot.commands.base import BotServices
from wabot.commands.router import CommandRouter
from wabot.config import AppConfig
from wabot.core.cache import DeletedMessageCache
from wabot.events import EventWiring
from wabot.log import get_logger
from wabot.media.pipeline import MediaPipeline
from wabot.messenger.base import Gateway
from wabot.messenger.bridge import BridgeGateway
from wabot.services.tiktok import TikTokDownloader

logger = get_logger(__name__)


class WabotApp:
    """Top-level application orchestrator.

    The deleted-message cache is passed in so it survives reconnects: a
    new app is built per gateway session, but the cache lives as long as
    the process.
    """

    def __init__(
        self,
        config: AppConfig,
        cache: DeletedMessageCache,
        gateway: Gateway | None = None,
        ai_client: AIClient | None = None,
        tiktok: TikTokDownloader | None = None,
        started: tuple[float, datetime] | None = None,
    ):
        self.config = config
        self.cache = cache
        self.gateway = gateway or BridgeGateway(config.gateway)
        self.pipeline = MediaPipeline(self.gateway, config.media)
        self.ai_client = ai_client or create_ai_client(config.ai)
        self.tiktok = tiktok or TikTokDownloader(config.tiktok)
        self.services = BotServices(
            gateway=self.gateway,
            config=config,
            cache=cache,
            pipeline=self.pipeline,
            ai=self.ai_client,
            tiktok=self.tiktok,
        )
        if started is not None:
            # Uptime counts from process start, not from the latest reconnect
            self.services.started_at, self.services.started_wall = started
        self.router = CommandRouter(self.services)
        self.wiring = EventWiring(self.gateway, cache, self.router, config.gateway.auth_dir)

    @property
    def restart_requested(self) -> asyncio.Event:
        return self.wiring.reconnect

    @property
    def terminate_requested(self) -> asyncio.Event:
        return self.wiring.logged_out

    async def start(self) -> None:
        """Initialize and start all components."""
        self.wiring.attach()
        await self.gateway.start()
        logger.info(
            "wabot_started",
            commands=self.router.names(),
            ai_backend=self.config.ai.backend,
            model=self.ai_client.model_name,
            cached_messages=len(self.cache),
        )

    async def stop(self) -> None:
        """Gracefully shut down all components."""
        try:
            await self.gateway.stop()
        except Exception as e:
            logger.error("gateway_stop_error", error=str(e))
        await self.ai_client.aclose()
        await self.tiktok.aclose()
        logger.info("wabot_stopped")
