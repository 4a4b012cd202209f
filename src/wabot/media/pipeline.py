"""Media retrieval, temp/status persistence and ffmpeg sticker transcoding."""

from __future__ import annotations

import asyncio
import itertools
import re
import time
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator

from wabot import texts
from wabot.config import MediaConfig
from wabot.core.errors import MediaFetchError, TranscodeError
from wabot.core.types import MediaKind
from wabot.log import get_logger
from wabot.messenger.base import Gateway
from wabot.messenger.models import ContentDescriptor

logger = get_logger(__name__)

_EXTENSIONS = {
    MediaKind.IMAGE: "jpg",
    MediaKind.VIDEO: "mp4",
    MediaKind.STICKER: "webp",
}

_COMMON_ARGS = ("-loop", "0", "-preset", "default", "-an", "-vsync", "0")
_STICKER_FILTERS = {
    MediaKind.IMAGE: ("-filter:v", "fps=fps=20", "-lossless", "1"),
    MediaKind.VIDEO: ("-filter:v", "fps=fps=15,scale=512:512:force_original_aspect_ratio=decrease"),
}

_counter = itertools.count(1)


def extension_for(kind: MediaKind) -> str:
    return _EXTENSIONS.get(kind, "bin")


def sticker_command(ffmpeg_path: str, input_path: Path, output_path: Path, kind: MediaKind) -> list[str]:
    """Build the ffmpeg argv for turning an image or short video into a WebP sticker."""
    if kind not in _STICKER_FILTERS:
        raise ValueError(f"Cannot make a sticker from {kind}")
    return [
        ffmpeg_path,
        "-y",
        "-i", str(input_path),
        "-vcodec", "libwebp",
        *_STICKER_FILTERS[kind],
        *_COMMON_ARGS,
        str(output_path),
    ]


def _remove(path: Path) -> None:
    """Delete a temp file; failures are logged so they never replace the real error."""
    try:
        path.unlink(missing_ok=True)
    except OSError as e:
        logger.warning("temp_file_cleanup_failed", path=str(path), error=str(e))


class MediaPipeline:
    """Turns gateway content descriptors into bytes, files and stickers."""

    def __init__(self, gateway: Gateway, config: MediaConfig):
        self._gateway = gateway
        self._config = config
        self.temp_dir = Path(config.temp_dir)
        self.status_dir = Path(config.status_dir)

    async def fetch_binary(
        self,
        descriptor: ContentDescriptor,
        kind: MediaKind,
        failure_text: str = texts.MEDIA_FETCH_FAILURE,
    ) -> bytes:
        """Drain the gateway's chunk stream for ``descriptor`` into one buffer.

        ``failure_text`` is the reply shown if the stream fails or is empty.
        """
        chunks: list[bytes] = []
        try:
            async for chunk in self._gateway.download_content(descriptor, kind):
                chunks.append(chunk)
        except Exception as e:
            logger.warning("media_fetch_failed", kind=str(kind), error=str(e))
            raise MediaFetchError(failure_text, detail=str(e)) from e

        data = b"".join(chunks)
        if not data:
            raise MediaFetchError(failure_text, detail="empty media stream")
        logger.debug("media_fetched", kind=str(kind), size=len(data))
        return data

    def _unique_name(self, purpose: str, extension: str) -> str:
        return f"{purpose}_{time.time_ns()}_{next(_counter)}.{extension.lstrip('.')}"

    def persist_to_temp(self, data: bytes, extension: str, purpose: str = "temp") -> Path:
        self.temp_dir.mkdir(parents=True, exist_ok=True)
        path = self.temp_dir / self._unique_name(purpose, extension)
        path.write_bytes(data)
        return path

    def save_status(self, data: bytes, conversation_id: str, kind: MediaKind) -> Path:
        """Keep a durable copy of a downloaded status under the status directory."""
        self.status_dir.mkdir(parents=True, exist_ok=True)
        digits = re.sub(r"[^0-9]", "", conversation_id)
        path = self.status_dir / f"{time.time_ns() // 1_000_000}_{digits}.{extension_for(kind)}"
        path.write_bytes(data)
        logger.info("status_saved", path=str(path), size=len(data))
        return path

    @asynccontextmanager
    async def transcode_to_sticker(self, input_path: Path, kind: MediaKind) -> AsyncIterator[Path]:
        """Run ffmpeg on ``input_path`` and yield the WebP output path.

        The input file is removed as soon as ffmpeg exits; the output file is
        removed when the block exits, whether or not the caller's send worked.
        """
        self.temp_dir.mkdir(parents=True, exist_ok=True)
        output_path = self.temp_dir / self._unique_name("sticker", "webp")
        try:
            try:
                await self._run_ffmpeg(input_path, output_path, kind)
            finally:
                _remove(input_path)
            yield output_path
        finally:
            _remove(output_path)

    async def _run_ffmpeg(self, input_path: Path, output_path: Path, kind: MediaKind) -> None:
        cmd = sticker_command(self._config.ffmpeg_path, input_path, output_path, kind)
        logger.debug("ffmpeg_start", kind=str(kind), input=str(input_path))
        try:
            # ffmpeg reads stdin for keystrokes; a background bot would get SIGTTIN
            process = await asyncio.create_subprocess_exec(
                *cmd,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.DEVNULL,
                stderr=asyncio.subprocess.PIPE,
            )
        except FileNotFoundError as e:
            logger.error("ffmpeg_not_found", ffmpeg_path=self._config.ffmpeg_path)
            raise TranscodeError(texts.STICKER_FAILURE, detail=str(e)) from e

        try:
            _, stderr = await process.communicate()
        except asyncio.CancelledError:
            if process.returncode is None:
                process.kill()
                await process.wait()
            logger.warning("ffmpeg_cancelled", input=str(input_path))
            raise
        if process.returncode != 0:
            stderr_text = stderr.decode("utf-8", errors="replace").strip()
            logger.error("ffmpeg_error", returncode=process.returncode, stderr=stderr_text[-500:])
            raise TranscodeError(texts.STICKER_FAILURE, detail=f"ffmpeg exit {process.returncode}")
        if not output_path.exists():
            raise TranscodeError(texts.STICKER_FAILURE, detail="ffmpeg produced no output")

    @asynccontextmanager
    async def make_sticker(self, data: bytes, kind: MediaKind) -> AsyncIterator[bytes]:
        """Persist ``data``, transcode it, and yield the sticker bytes.

        Both temp files are gone once the block exits.
        """
        input_path = self.persist_to_temp(data, extension_for(kind), purpose="temp")
        async with self.transcode_to_sticker(input_path, kind) as output_path:
            yield output_path.read_bytes()
