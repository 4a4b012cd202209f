"""Tests for command parsing and the text surface of inbound messages."""

import pytest

from conftest import descriptor, make_message
from wabot.commands.base import ParsedCommand, parse_command
from wabot.messenger.models import (
    AudioPayload,
    DocumentPayload,
    ImagePayload,
    UnsupportedPayload,
    VideoPayload,
)


class TestParseCommand:
    @pytest.mark.parametrize("text", [".menu", ".Menu", ".MENU", "  .menu  "])
    def test_case_insensitive_token(self, text):
        assert parse_command(text) == ParsedCommand(command="menu", argument="")

    def test_argument_is_rest_of_text_trimmed(self):
        parsed = parse_command(".ai   apa itu black hole?  ")
        assert parsed == ParsedCommand(command="ai", argument="apa itu black hole?")

    def test_argument_keeps_inner_whitespace(self):
        parsed = parse_command(".setname Grup  Baru\nKedua")
        assert parsed.argument == "Grup  Baru\nKedua"

    def test_argument_case_preserved(self):
        assert parse_command(".SETDESC Halo Dunia").argument == "Halo Dunia"

    @pytest.mark.parametrize("text", ["", "halo", "menu", "apa .menu", "   "])
    def test_non_command_text(self, text):
        assert parse_command(text) is None

    def test_bare_trigger_is_not_a_command(self):
        assert parse_command(".") is None
        assert parse_command(". menu") is None

    def test_custom_trigger(self):
        assert parse_command("!ping", trigger="!") == ParsedCommand(command="ping", argument="")
        assert parse_command(".ping", trigger="!") is None


class TestTextSurface:
    def test_text_payload(self):
        assert make_message(text=".menu").text_surface == ".menu"

    def test_image_caption(self):
        msg = make_message(payload=ImagePayload(descriptor("img"), caption=".sticker"))
        assert msg.text_surface == ".sticker"

    def test_video_caption(self):
        msg = make_message(payload=VideoPayload(descriptor("vid"), caption=".Sticker"))
        assert parse_command(msg.text_surface).command == "sticker"

    def test_document_file_name(self):
        msg = make_message(payload=DocumentPayload(descriptor("doc"), file_name="laporan.pdf"))
        assert msg.text_surface == "laporan.pdf"

    def test_media_without_caption_is_empty(self):
        assert make_message(payload=AudioPayload(descriptor("aud"))).text_surface == ""
        assert make_message(payload=ImagePayload(descriptor("img"))).text_surface == ""

    def test_unsupported_payload_is_empty(self):
        assert make_message(payload=UnsupportedPayload("locationMessage")).text_surface == ""
