"""Informational commands: menu, owner, bot and runtime."""

from __future__ import annotations

import os
import platform
import time
from pathlib import Path

from wabot import texts
from wabot.commands.base import CommandContext

_RAM_BAR_WIDTH = 20


def format_uptime(seconds: float) -> str:
    h = int(seconds // 3600)
    m = int((seconds % 3600) // 60)
    s = int(seconds % 60)
    return f"{h} Jam {m} Menit {s} Detik"


def ram_bar(percent: int, width: int = _RAM_BAR_WIDTH) -> str:
    filled = round(percent / 100 * width)
    return "█" * filled + "░" * (width - filled)


def _cpu_model() -> str:
    cpuinfo = Path("/proc/cpuinfo")
    if cpuinfo.exists():
        for line in cpuinfo.read_text(errors="replace").splitlines():
            if line.lower().startswith("model name"):
                return line.split(":", 1)[1].strip()
    return platform.processor() or "Unknown"


def _memory_mb() -> tuple[float, float]:
    """Return (total, free) physical memory in MB, or zeros where sysconf is unavailable."""
    try:
        page = os.sysconf("SC_PAGE_SIZE")
        total = os.sysconf("SC_PHYS_PAGES") * page
        free = os.sysconf("SC_AVPHYS_PAGES") * page
    except (ValueError, OSError, AttributeError):
        return 0.0, 0.0
    return total / 1024 / 1024, free / 1024 / 1024


async def menu(ctx: CommandContext) -> None:
    await ctx.reply(texts.MENU.format(t=ctx.services.config.bot.trigger))


async def owner(ctx: CommandContext) -> None:
    cfg = ctx.services.config.owner
    await ctx.reply(texts.OWNER_CARD.format(name=cfg.name, number=cfg.number))


async def bot_info(ctx: CommandContext) -> None:
    cfg = ctx.services.config
    await ctx.reply(
        texts.BOT_CARD.format(
            name=cfg.bot.name,
            version=cfg.bot.version,
            python=platform.python_version(),
            model=ctx.services.ai.model_name or "unknown",
            platform=cfg.bot.platform_label,
        )
    )


async def runtime(ctx: CommandContext) -> None:
    total_mb, free_mb = _memory_mb()
    used_mb = total_mb - free_mb
    percent = round(used_mb / total_mb * 100) if total_mb else 0
    await ctx.reply(
        texts.RUNTIME_CARD.format(
            uptime=format_uptime(time.monotonic() - ctx.services.started_at),
            cpu=_cpu_model(),
            used_mb=f"{used_mb:.0f}",
            total_mb=f"{total_mb:.0f}",
            bar=ram_bar(percent),
            percent=percent,
            platform=f"{platform.system().lower()} {platform.machine()}",
            python=platform.python_version(),
            since=ctx.services.started_wall.strftime("%d/%m/%Y %H:%M:%S"),
        )
    )
