"""The ``k`` command: re-send the last deleted message of the conversation."""

from __future__ import annotations

import time

from wabot import texts
from wabot.commands.base import CommandContext
from wabot.core.types import MediaKind
from wabot.log import get_logger
from wabot.messenger.models import (
    AudioPayload,
    DocumentPayload,
    ImagePayload,
    OutgoingMessage,
    StickerPayload,
    TextPayload,
    UnsupportedPayload,
    VideoPayload,
)

logger = get_logger(__name__)


async def recover_deleted(ctx: CommandContext) -> None:
    record = ctx.services.cache.get_last_deleted(ctx.chat_id)
    if record is None:
        # Evicted, never cached, or never deleted: indistinguishable here.
        await ctx.reply(texts.RECOVER_NOTHING)
        return

    fetch = ctx.services.pipeline.fetch_binary
    chat_id = ctx.chat_id
    logger.info("recovering_deleted", original_id=record.id, kind=type(record.payload).__name__)

    match record.payload:
        case TextPayload(text=text) if text:
            await ctx.reply(texts.RECOVER_TEXT.format(text=text))
        case ImagePayload(descriptor=descriptor):
            data = await fetch(descriptor, MediaKind.IMAGE, texts.RECOVER_IMAGE_FAILURE)
            await ctx.send(
                OutgoingMessage(chat_id=chat_id, image=data, caption=texts.RECOVER_IMAGE_CAPTION),
                failure_text=texts.RECOVER_IMAGE_FAILURE,
            )
        case VideoPayload(descriptor=descriptor):
            data = await fetch(descriptor, MediaKind.VIDEO, texts.RECOVER_VIDEO_FAILURE)
            await ctx.send(
                OutgoingMessage(chat_id=chat_id, video=data, caption=texts.RECOVER_VIDEO_CAPTION),
                failure_text=texts.RECOVER_VIDEO_FAILURE,
            )
        case DocumentPayload(descriptor=descriptor, mimetype=mimetype, file_name=file_name):
            data = await fetch(descriptor, MediaKind.DOCUMENT, texts.RECOVER_DOCUMENT_FAILURE)
            await ctx.send(
                OutgoingMessage(
                    chat_id=chat_id,
                    document=data,
                    mimetype=mimetype,
                    file_name=file_name or f"file_{time.time_ns() // 1_000_000}",
                ),
                failure_text=texts.RECOVER_DOCUMENT_FAILURE,
            )
        case AudioPayload(descriptor=descriptor, mimetype=mimetype):
            data = await fetch(descriptor, MediaKind.AUDIO, texts.RECOVER_AUDIO_FAILURE)
            await ctx.send(
                OutgoingMessage(chat_id=chat_id, audio=data, mimetype=mimetype, ptt=False),
                failure_text=texts.RECOVER_AUDIO_FAILURE,
            )
        case StickerPayload(descriptor=descriptor):
            data = await fetch(descriptor, MediaKind.STICKER, texts.RECOVER_STICKER_FAILURE)
            await ctx.send(
                OutgoingMessage(chat_id=chat_id, sticker=data),
                failure_text=texts.RECOVER_STICKER_FAILURE,
            )
        case TextPayload() | UnsupportedPayload():
            await ctx.reply(texts.RECOVER_UNSUPPORTED)
