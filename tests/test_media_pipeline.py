"""Tests for media fetch, temp persistence and sticker transcoding."""

import asyncio
import os
from pathlib import Path

import pytest

from conftest import descriptor
from wabot import texts
from wabot.core.errors import MediaFetchError, TranscodeError
from wabot.core.types import MediaKind
from wabot.media.pipeline import extension_for, sticker_command


class TestStickerCommand:
    def test_image_args(self):
        cmd = sticker_command("ffmpeg", Path("in.jpg"), Path("out.webp"), MediaKind.IMAGE)
        assert cmd == [
            "ffmpeg", "-y", "-i", "in.jpg", "-vcodec", "libwebp",
            "-filter:v", "fps=fps=20", "-lossless", "1",
            "-loop", "0", "-preset", "default", "-an", "-vsync", "0",
            "out.webp",
        ]

    def test_video_args(self):
        cmd = sticker_command("/usr/bin/ffmpeg", Path("in.mp4"), Path("out.webp"), MediaKind.VIDEO)
        assert cmd[0] == "/usr/bin/ffmpeg"
        assert "fps=fps=15,scale=512:512:force_original_aspect_ratio=decrease" in cmd
        assert "-lossless" not in cmd
        assert cmd[-1] == "out.webp"

    def test_rejects_other_kinds(self):
        with pytest.raises(ValueError):
            sticker_command("ffmpeg", Path("a"), Path("b"), MediaKind.AUDIO)

    def test_extensions(self):
        assert extension_for(MediaKind.IMAGE) == "jpg"
        assert extension_for(MediaKind.VIDEO) == "mp4"
        assert extension_for(MediaKind.STICKER) == "webp"
        assert extension_for(MediaKind.DOCUMENT) == "bin"


class TestFetchBinary:
    @pytest.mark.asyncio
    async def test_concatenates_chunks(self, services, gateway):
        gateway.media["img"] = [b"ab", b"cd", b"ef"]
        data = await services.pipeline.fetch_binary(descriptor("img"), MediaKind.IMAGE)
        assert data == b"abcdef"

    @pytest.mark.asyncio
    async def test_stream_error(self, services, gateway):
        gateway.media["img"] = ConnectionError("reset")
        with pytest.raises(MediaFetchError) as exc_info:
            await services.pipeline.fetch_binary(descriptor("img"), MediaKind.IMAGE)
        assert exc_info.value.user_message == texts.MEDIA_FETCH_FAILURE
        assert "reset" in exc_info.value.detail

    @pytest.mark.asyncio
    async def test_empty_stream(self, services):
        with pytest.raises(MediaFetchError):
            await services.pipeline.fetch_binary(descriptor("missing"), MediaKind.IMAGE)

    @pytest.mark.asyncio
    async def test_custom_failure_text(self, services, gateway):
        gateway.media["img"] = OSError("expired")
        with pytest.raises(MediaFetchError) as exc_info:
            await services.pipeline.fetch_binary(descriptor("img"), MediaKind.IMAGE, failure_text="❌ x")
        assert exc_info.value.user_message == "❌ x"


class TestPersistence:
    def test_persist_to_temp_round_trip(self, services, config):
        path = services.pipeline.persist_to_temp(b"\x00\x01binary", "jpg")
        assert path.parent == Path(config.media.temp_dir)
        assert path.suffix == ".jpg"
        assert path.read_bytes() == b"\x00\x01binary"

    def test_temp_names_are_unique(self, services):
        paths = {services.pipeline.persist_to_temp(b"x", "mp4") for _ in range(20)}
        assert len(paths) == 20

    def test_save_status_name(self, services, config):
        path = services.pipeline.save_status(b"jpeg", "628123@s.whatsapp.net", MediaKind.IMAGE)
        assert path.parent == Path(config.media.status_dir)
        stamp, _, rest = path.name.partition("_")
        assert stamp.isdigit()
        assert rest == "628123.jpg"
        assert path.read_bytes() == b"jpeg"


class TestTranscode:
    @pytest.mark.asyncio
    async def test_make_sticker_cleans_up(self, services, config, fake_ffmpeg):
        async with services.pipeline.make_sticker(b"jpeg", MediaKind.IMAGE) as webp:
            assert webp.startswith(b"RIFF")
            # Input is gone as soon as ffmpeg exits; only the output remains
            assert len(os.listdir(config.media.temp_dir)) == 1
        assert os.listdir(config.media.temp_dir) == []
        assert len(fake_ffmpeg.calls) == 1

    @pytest.mark.asyncio
    async def test_output_removed_when_caller_fails(self, services, config, fake_ffmpeg):
        with pytest.raises(RuntimeError):
            async with services.pipeline.make_sticker(b"mp4", MediaKind.VIDEO):
                raise RuntimeError("send failed")
        assert os.listdir(config.media.temp_dir) == []

    @pytest.mark.asyncio
    async def test_ffmpeg_failure(self, services, config, fake_ffmpeg):
        fake_ffmpeg.returncode = 1
        with pytest.raises(TranscodeError) as exc_info:
            async with services.pipeline.make_sticker(b"junk", MediaKind.IMAGE):
                pytest.fail("should not yield")
        assert exc_info.value.user_message == texts.STICKER_FAILURE
        assert os.listdir(config.media.temp_dir) == []

    @pytest.mark.asyncio
    async def test_ffmpeg_missing(self, services, config, monkeypatch):
        async def missing(*cmd, **kwargs):
            raise FileNotFoundError(cmd[0])

        monkeypatch.setattr("asyncio.create_subprocess_exec", missing)
        with pytest.raises(TranscodeError):
            async with services.pipeline.make_sticker(b"jpeg", MediaKind.IMAGE):
                pass
        assert os.listdir(config.media.temp_dir) == []

    @pytest.mark.asyncio
    async def test_ffmpeg_stdin_is_detached(self, services, fake_ffmpeg):
        async with services.pipeline.make_sticker(b"jpeg", MediaKind.IMAGE):
            pass
        assert fake_ffmpeg.kwargs[0]["stdin"] == asyncio.subprocess.DEVNULL

    @pytest.mark.asyncio
    async def test_cancel_kills_ffmpeg(self, services, config, fake_ffmpeg):
        fake_ffmpeg.hang = True

        async def convert():
            async with services.pipeline.make_sticker(b"mp4", MediaKind.VIDEO):
                pytest.fail("should not yield")

        task = asyncio.create_task(convert())
        while not fake_ffmpeg.processes:
            await asyncio.sleep(0)
        await asyncio.sleep(0)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task
        assert fake_ffmpeg.processes[0].killed
        assert os.listdir(config.media.temp_dir) == []
