# SPDX-License-Identifier: MIT
# Copyright (c) 2026 ADNT Sarl <info@adnt.io>

"""
Fastboot protocol definitions and framing.

Commands are plain ASCII strings. Every response frame starts with a
4-byte status token (INFO, OKAY, DATA or FAIL) followed by free-form text.
Zero or more INFO frames may precede the single terminal frame.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Sequence, Union

HEADER_SIZE = 4
READ_SIZE = 64
BLOCK_SIZE = 512 * 1024


class Status(Enum):
    """Response status, decoded from the 4-byte frame header."""
    FAIL = "FAIL"
    OKAY = "OKAY"
    DATA = "DATA"
    INFO = "INFO"
    UNKNOWN = ""

    def __str__(self) -> str:
        return self.name


_STATUS_BY_HEADER = {
    status.value: status for status in Status if status is not Status.UNKNOWN
}


@dataclass
class Response:
    """Terminal response to a command."""
    status: Status
    payload: str
    raw_data: bytes = b""

    @property
    def is_ok(self) -> bool:
        return self.status is Status.OKAY


def encode_command(command: Union[bytes, str]) -> bytes:
    """
    Encode a command for the bulk-out endpoint.

    Args:
        command: Raw command bytes, or text that must be pure ASCII

    Returns:
        Command frame bytes
    """
    if isinstance(command, str):
        return command.encode("ascii")
    return bytes(command)


def encode_download(size: int) -> bytes:
    """Encode a download announcement for a payload of `size` bytes."""
    if size < 0 or size > 0xFFFFFFFF:
        raise ValueError(f"Download size out of range: {size}")
    return f"download:{size:08X}".encode("ascii")


def parse_status(chunk: bytes) -> Status:
    """
    Classify a response frame by its header.

    Reads shorter than the header and unrecognized tokens decode as
    Status.UNKNOWN rather than raising.
    """
    if len(chunk) < HEADER_SIZE:
        return Status.UNKNOWN
    header = chunk[:HEADER_SIZE].decode("ascii", errors="replace")
    return _STATUS_BY_HEADER.get(header, Status.UNKNOWN)


def decode_payload(chunk: bytes) -> str:
    """Return the text following the status header of a frame."""
    return chunk[HEADER_SIZE:].decode("ascii", errors="replace")


def clean_payload(text: str) -> str:
    """Strip carriage returns and NUL characters."""
    return text.replace("\r", "").replace("\0", "")


def build_response(chunks: Sequence[bytes]) -> Response:
    """
    Assemble the frames read for one command into a Response.

    Args:
        chunks: Raw frames in the order they were read; the last one
            carries the terminal status

    Returns:
        Response with newline-joined payloads of all frames

    Raises:
        ValueError: If no frames were given
    """
    if not chunks:
        raise ValueError("No response frames")

    text = "".join(decode_payload(chunk) + "\n" for chunk in chunks)
    last = chunks[-1]
    return Response(
        status=parse_status(last),
        payload=clean_payload(text),
        raw_data=bytes(last),
    )
