"""TikTok video URL resolution through the tikwm.com API."""

from __future__ import annotations

from typing import Optional

import httpx

from wabot import texts
from wabot.config import TikTokConfig
from wabot.core.errors import UpstreamServiceError
from wabot.log import get_logger

logger = get_logger(__name__)


class TikTokDownloader:
    """Resolves a TikTok share link to a directly playable video URL."""

    def __init__(self, config: TikTokConfig, http_client: httpx.AsyncClient | None = None):
        self._config = config
        self._http = http_client or httpx.AsyncClient(timeout=config.timeout)

    async def resolve(self, url: str) -> Optional[str]:
        """Return the HD (else SD) video URL, or None when the API has no video.

        Raises UpstreamServiceError on transport or API failure.
        """
        try:
            resp = await self._http.post(self._config.api_url, data={"url": url})
            resp.raise_for_status()
            body = resp.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.error("tiktok_api_error", error=str(e))
            raise UpstreamServiceError(texts.TTDL_FAILURE, detail=str(e)) from e

        data = body.get("data") if isinstance(body, dict) else None
        if not isinstance(data, dict):
            logger.info("tiktok_no_data", code=body.get("code") if isinstance(body, dict) else None)
            raise UpstreamServiceError(texts.TTDL_NO_DATA, detail=str(body)[:200])

        return data.get("hdplay") or data.get("play") or None

    async def aclose(self) -> None:
        await self._http.aclose()
