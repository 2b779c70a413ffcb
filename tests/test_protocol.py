# SPDX-License-Identifier: MIT
# Copyright (c) 2026 ADNT Sarl <info@adnt.io>

"""Tests for protocol framing and response decoding."""

import pytest
from fastboot_protocol.protocol import (
    BLOCK_SIZE,
    HEADER_SIZE,
    READ_SIZE,
    Response,
    Status,
    build_response,
    clean_payload,
    decode_payload,
    encode_command,
    encode_download,
    parse_status,
)


class TestConstants:
    """Tests for wire constants."""

    def test_sizes(self):
        """Header, read and block sizes match the protocol."""
        assert HEADER_SIZE == 4
        assert READ_SIZE == 64
        assert BLOCK_SIZE == 524288


class TestStatusEnum:
    """Tests for Status enum."""

    def test_all_members(self):
        """All expected statuses exist."""
        assert len(Status) == 5

    def test_str(self):
        """Status __str__ returns name."""
        assert str(Status.OKAY) == "OKAY"
        assert str(Status.UNKNOWN) == "UNKNOWN"


class TestParseStatus:
    """Tests for parse_status."""

    @pytest.mark.parametrize("header,status", [
        (b"INFO", Status.INFO),
        (b"OKAY", Status.OKAY),
        (b"DATA", Status.DATA),
        (b"FAIL", Status.FAIL),
    ])
    def test_known_headers(self, header, status):
        """Known headers classify exactly, with or without payload."""
        assert parse_status(header) is status
        assert parse_status(header + b"some text") is status

    @pytest.mark.parametrize("chunk", [
        b"okay",
        b"Okay",
        b"fail: lowercase",
        b"OKA!",
        b"XXXXpayload",
        b"\x00\x00\x00\x00",
        b" OKAY",
    ])
    def test_unrecognized_headers(self, chunk):
        """Anything else classifies as UNKNOWN (case-sensitive)."""
        assert parse_status(chunk) is Status.UNKNOWN

    @pytest.mark.parametrize("chunk", [b"", b"O", b"OK", b"OKA"])
    def test_short_reads(self, chunk):
        """Reads shorter than the header are UNKNOWN."""
        assert parse_status(chunk) is Status.UNKNOWN

    def test_non_ascii_header(self):
        """Non-ASCII header bytes do not raise."""
        assert parse_status(b"\xff\xfe\xfd\xfcrest") is Status.UNKNOWN


class TestEncodeCommand:
    """Tests for encode_command."""

    def test_text(self):
        """Text commands are ASCII encoded."""
        assert encode_command("getvar:product") == b"getvar:product"

    def test_bytes_passthrough(self):
        """Byte commands are sent unchanged."""
        assert encode_command(b"reboot") == b"reboot"
        assert encode_command(bytearray(b"continue")) == b"continue"

    def test_non_ascii_text_rejected(self):
        """Non-ASCII text cannot be framed."""
        with pytest.raises(UnicodeEncodeError):
            encode_command("getvar:é")


class TestEncodeDownload:
    """Tests for encode_download."""

    def test_255(self):
        """Size is 8 uppercase, zero-padded hex digits."""
        assert encode_download(255) == b"download:000000FF"

    def test_zero(self):
        assert encode_download(0) == b"download:00000000"

    def test_large(self):
        """Upper-case hex for multi-block sizes."""
        assert encode_download(2 * BLOCK_SIZE + 100) == b"download:00100064"
        assert encode_download(0xABCDEF12) == b"download:ABCDEF12"

    def test_out_of_range(self):
        """Sizes that do not fit in 8 hex digits are rejected."""
        with pytest.raises(ValueError):
            encode_download(0x100000000)
        with pytest.raises(ValueError):
            encode_download(-1)


class TestDecodePayload:
    """Tests for decode_payload."""

    def test_strips_header(self):
        assert decode_payload(b"OKAYdone") == "done"

    def test_header_only(self):
        assert decode_payload(b"OKAY") == ""

    def test_short_chunk(self):
        """Short chunks have no payload."""
        assert decode_payload(b"OK") == ""


class TestCleanPayload:
    """Tests for clean_payload."""

    def test_removes_cr_and_nul(self):
        """Every CR and NUL is removed."""
        assert clean_payload("a\rb\0c\r\n\0") == "abc\n"

    def test_preserves_other_characters(self):
        """Everything else, newlines included, is kept."""
        text = "line one\nline\ttwo: 0x1F !?\n"
        assert clean_payload(text) == text


class TestBuildResponse:
    """Tests for build_response."""

    def test_single_okay(self):
        """A single terminal frame."""
        resp = build_response([b"OKAY0.4"])
        assert resp.status is Status.OKAY
        assert resp.payload == "0.4\n"
        assert resp.raw_data == b"OKAY0.4"

    def test_info_frames_joined(self):
        """INFO payloads precede the terminal payload, newline separated."""
        resp = build_response([b"INFOfirst", b"INFOsecond\r", b"OKAYlast\0\0"])
        assert resp.status is Status.OKAY
        assert resp.payload == "first\nsecond\nlast\n"
        assert resp.raw_data == b"OKAYlast\0\0"

    def test_payload_never_contains_header(self):
        """No status token leaks into the payload."""
        resp = build_response([b"INFOa", b"INFOb", b"FAILc"])
        for token in ("INFO", "OKAY", "DATA", "FAIL"):
            assert token not in resp.payload
        assert resp.status is Status.FAIL

    def test_unknown_terminal(self):
        """An unrecognized last frame gives UNKNOWN."""
        resp = build_response([b"INFOx", b"????y"])
        assert resp.status is Status.UNKNOWN
        assert resp.payload == "x\ny\n"

    def test_data_status(self):
        resp = build_response([b"DATA000000FF"])
        assert resp.status is Status.DATA
        assert resp.payload == "000000FF\n"

    def test_empty(self):
        """At least one frame is required."""
        with pytest.raises(ValueError):
            build_response([])


class TestResponse:
    """Tests for Response dataclass."""

    def test_is_ok_true(self):
        assert Response(Status.OKAY, "").is_ok is True

    def test_is_ok_false(self):
        """is_ok is False for every other status."""
        for status in Status:
            if status is not Status.OKAY:
                assert Response(status, "").is_ok is False

    def test_default_raw_data(self):
        assert Response(Status.FAIL, "x").raw_data == b""
