"""Media commands: TikTok download, sticker maker and status download."""

from __future__ import annotations

from wabot import texts
from wabot.commands.base import CommandContext
from wabot.core.auth import owner_jid
from wabot.core.errors import ParseError, UpstreamServiceError
from wabot.log import get_logger
from wabot.messenger.models import ImagePayload, OutgoingMessage, VideoPayload

logger = get_logger(__name__)


async def tiktok_download(ctx: CommandContext) -> None:
    if not ctx.argument:
        raise ParseError(texts.TTDL_MISSING_URL)
    await ctx.reply(texts.TTDL_PROCESSING)
    video_url = await ctx.services.tiktok.resolve(ctx.argument)
    if not video_url:
        raise UpstreamServiceError(texts.TTDL_NO_VIDEO)
    await ctx.send(
        OutgoingMessage(chat_id=ctx.chat_id, video_url=video_url, caption=texts.TTDL_CAPTION),
        failure_text=texts.TTDL_FAILURE,
    )


async def sticker(ctx: CommandContext) -> None:
    payload = ctx.message.payload
    if not isinstance(payload, (ImagePayload, VideoPayload)):
        raise ParseError(texts.STICKER_NEED_MEDIA)

    pipeline = ctx.services.pipeline
    data = await pipeline.fetch_binary(
        payload.descriptor, payload.kind, failure_text=texts.STICKER_FETCH_FAILURE
    )
    async with pipeline.make_sticker(data, payload.kind) as webp:
        await ctx.send(
            OutgoingMessage(chat_id=ctx.chat_id, sticker=webp),
            failure_text=texts.STICKER_SEND_FAILURE,
        )


async def status_download(ctx: CommandContext) -> None:
    """Download a replied-to status, keep a copy, and forward it to the owner."""
    quoted = ctx.message.quoted
    if quoted is None:
        raise ParseError(texts.STATUS_NEED_REPLY)
    payload = quoted.payload
    if not isinstance(payload, (ImagePayload, VideoPayload)):
        raise ParseError(texts.STATUS_NO_MEDIA)
    if not quoted.is_status:
        logger.debug("status_reply_not_broadcast", quoted_from=quoted.conversation_id)

    services = ctx.services
    data = await services.pipeline.fetch_binary(
        payload.descriptor, payload.kind, failure_text=texts.STATUS_FAILURE
    )
    saved = services.pipeline.save_status(data, ctx.chat_id, payload.kind)

    target = owner_jid(services.config.owner.number)
    if isinstance(payload, ImagePayload):
        caption = texts.STATUS_IMAGE_CAPTION.format(source=ctx.chat_id, filename=saved.name)
        outgoing = OutgoingMessage(chat_id=target, image=data, caption=caption)
    else:
        caption = texts.STATUS_VIDEO_CAPTION.format(source=ctx.chat_id, filename=saved.name)
        outgoing = OutgoingMessage(chat_id=target, video=data, caption=caption)
    await ctx.send(outgoing, failure_text=texts.STATUS_FAILURE)
    logger.info("status_forwarded", saved=saved.name, kind=str(payload.kind))

    if services.config.features.notify_requester:
        try:
            await ctx.reply(texts.STATUS_SENT)
        except Exception as e:
            logger.warning("status_ack_failed", error=str(e))
