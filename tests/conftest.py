"""Pytest configuration and shared fixtures."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from wabot.commands.base import BotServices
from wabot.commands.router import CommandRouter
from wabot.config import AppConfig, MediaConfig, OwnerConfig
from wabot.core.cache import DeletedMessageCache
from wabot.core.types import ParticipantRole
from wabot.media.pipeline import MediaPipeline
from wabot.messenger.base import Gateway
from wabot.messenger.models import (
    ContentDescriptor,
    GroupMetadata,
    GroupParticipant,
    InboundMessage,
    Payload,
    QuotedMessage,
    TextPayload,
)

OWNER_NUMBER = "6285122173013"
GROUP_ID = "120363000000000001@g.us"
DIRECT_ID = "628222000111@s.whatsapp.net"
ADMIN_ID = "628333000111@s.whatsapp.net"
MEMBER_ID = "628444000111@s.whatsapp.net"


class FakeGateway(Gateway):
    """In-memory gateway recording every outbound call."""

    def __init__(self) -> None:
        super().__init__()
        self.sent: list[Any] = []
        self.calls: list[tuple[Any, ...]] = []
        self.groups: dict[str, GroupMetadata] = {}
        # descriptor.url -> chunks, or an exception to raise mid-stream
        self.media: dict[str, Any] = {}
        self.fail_send = False

    async def start(self) -> None:
        self.calls.append(("start",))

    async def stop(self) -> None:
        self.calls.append(("stop",))

    async def send_message(self, message) -> None:
        if self.fail_send:
            raise ConnectionError("send failed")
        self.sent.append(message)

    async def group_metadata(self, group_id: str) -> GroupMetadata:
        self.calls.append(("group_metadata", group_id))
        return self.groups[group_id]

    async def group_update_subject(self, group_id: str, subject: str) -> None:
        self.calls.append(("group_update_subject", group_id, subject))

    async def group_update_description(self, group_id: str, description: str) -> None:
        self.calls.append(("group_update_description", group_id, description))

    async def group_participants_remove(self, group_id: str, participants: list[str]) -> None:
        self.calls.append(("group_participants_remove", group_id, participants))

    async def download_content(self, descriptor, kind):
        self.calls.append(("download_content", descriptor.url, str(kind)))
        source = self.media.get(descriptor.url, [])
        if isinstance(source, Exception):
            raise source
        for chunk in source:
            yield chunk

    def texts(self) -> list[str]:
        return [m.text for m in self.sent if m.text is not None]


def make_message(
    text: str = "",
    payload: Payload | None = None,
    conversation_id: str = DIRECT_ID,
    sender_id: str | None = None,
    message_id: str = "MSG1",
    from_self: bool = False,
    mentions: tuple[str, ...] = (),
    quoted: QuotedMessage | None = None,
) -> InboundMessage:
    return InboundMessage(
        id=message_id,
        conversation_id=conversation_id,
        sender_id=sender_id or conversation_id,
        payload=payload if payload is not None else TextPayload(text=text),
        from_self=from_self,
        push_name="Tester",
        mentions=mentions,
        quoted=quoted,
    )


def descriptor(name: str) -> ContentDescriptor:
    return ContentDescriptor(url=name, direct_path=f"/v/{name}", media_key=f"key-{name}")


@pytest.fixture
def gateway() -> FakeGateway:
    gw = FakeGateway()
    gw.groups[GROUP_ID] = GroupMetadata(
        id=GROUP_ID,
        subject="Grup Test",
        participants=(
            GroupParticipant(MEMBER_ID, ParticipantRole.MEMBER),
            GroupParticipant(ADMIN_ID, ParticipantRole.ADMIN),
        ),
    )
    return gw


@pytest.fixture
def config(tmp_path: Path) -> AppConfig:
    return AppConfig(
        owner=OwnerConfig(number=OWNER_NUMBER, name="Owner"),
        media=MediaConfig(
            temp_dir=str(tmp_path / "temp_sticker"),
            status_dir=str(tmp_path / "statuses"),
        ),
    )


@pytest.fixture
def cache() -> DeletedMessageCache:
    return DeletedMessageCache(max_entries=1000)


@pytest.fixture
def ai_client() -> MagicMock:
    client = MagicMock()
    client.model_name = "gpt-test"
    client.ask = AsyncMock(return_value="Black hole adalah ...")
    client.aclose = AsyncMock()
    return client


@pytest.fixture
def tiktok() -> MagicMock:
    downloader = MagicMock()
    downloader.resolve = AsyncMock(return_value="https://cdn.example/video.mp4")
    downloader.aclose = AsyncMock()
    return downloader


@pytest.fixture
def services(gateway, config, cache, ai_client, tiktok) -> BotServices:
    return BotServices(
        gateway=gateway,
        config=config,
        cache=cache,
        pipeline=MediaPipeline(gateway, config.media),
        ai=ai_client,
        tiktok=tiktok,
    )


@pytest.fixture
def router(services) -> CommandRouter:
    return CommandRouter(services)


class FakeProcess:
    """Stands in for an ffmpeg subprocess."""

    def __init__(self, returncode: int, output_path: Path | None, hang: bool = False):
        self.returncode: int | None = None if hang else returncode
        self._exit_code = returncode
        self._output_path = output_path
        self._hang = hang
        self.killed = False

    async def communicate(self, input: bytes | None = None):
        if self._hang:
            await asyncio.Event().wait()
        if self.returncode == 0 and self._output_path is not None:
            self._output_path.write_bytes(b"RIFF....WEBPVP8 sticker")
        return b"", b"" if self.returncode == 0 else b"Invalid data found when processing input"

    def kill(self) -> None:
        self.killed = True

    async def wait(self) -> int:
        self.returncode = -9 if self.killed else self._exit_code
        return self.returncode


class FakeFFmpeg:
    def __init__(self) -> None:
        self.calls: list[tuple[str, ...]] = []
        self.kwargs: list[dict] = []
        self.processes: list[FakeProcess] = []
        self.returncode = 0
        self.hang = False

    async def __call__(self, *cmd, **kwargs) -> FakeProcess:
        self.calls.append(cmd)
        self.kwargs.append(kwargs)
        process = FakeProcess(self.returncode, Path(cmd[-1]), hang=self.hang)
        self.processes.append(process)
        return process


@pytest.fixture
def fake_ffmpeg(monkeypatch) -> FakeFFmpeg:
    """Patch subprocess creation so no real ffmpeg runs."""
    fake = FakeFFmpeg()
    monkeypatch.setattr(asyncio, "create_subprocess_exec", fake)
    return fake
