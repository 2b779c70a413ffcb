# SPDX-License-Identifier: MIT
# Copyright (c) 2026 ADNT Sarl <info@adnt.io>

"""
Data upload through the download handshake.

    host                         device
    download:XXXXXXXX   ->
                        <-       DATAXXXXXXXX
    block 1..N (raw)    ->
                        <-       OKAY / FAIL...

Blocks go straight to the bulk-out endpoint; the device does not
acknowledge them individually.
"""

import io
import logging
from typing import BinaryIO, Callable, Optional

from .errors import InvalidDownloadResponseError, ShortWriteError, UploadError, UploadFailedError
from .protocol import (
    BLOCK_SIZE,
    READ_SIZE,
    Status,
    encode_download,
    parse_status,
)

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int], None]


def stream_length(stream: BinaryIO) -> int:
    """Return the number of bytes between the current position and the end."""
    start = stream.tell()
    end = stream.seek(0, io.SEEK_END)
    stream.seek(start)
    return end - start


def send_download_command(session, size: int) -> None:
    """
    Announce a payload of `size` bytes.

    Raises:
        InvalidDownloadResponseError: If the device does not answer DATA
    """
    resp = session.command(encode_download(size))
    if resp.status is not Status.DATA:
        raise InvalidDownloadResponseError(size, resp)


def transfer_block(session, block: bytes) -> None:
    """Write one raw block to the bulk-out endpoint."""
    written = session.handle.write_bulk(block, session.timeout)
    if written != len(block):
        raise ShortWriteError(written, len(block), what="block")


def read_final_status(session) -> None:
    """
    Read the single status frame that ends a transfer.

    Raises:
        UploadFailedError: If the status is anything but OKAY
    """
    chunk = session.handle.read_bulk(READ_SIZE, session.timeout)
    status = parse_status(chunk)
    logger.debug("Upload final status: %s", status)
    if status is not Status.OKAY:
        raise UploadFailedError(chunk.decode("ascii", errors="replace"))


def upload_stream(
    session,
    stream: BinaryIO,
    progress_callback: Optional[ProgressCallback] = None,
) -> int:
    """
    Upload the rest of a binary stream to the device.

    Args:
        session: Connected session
        stream: Readable, seekable binary stream
        progress_callback: Optional callback(bytes_sent, total_bytes)

    Returns:
        Number of bytes uploaded

    Raises:
        InvalidDownloadResponseError: If the announcement is rejected
        ShortWriteError: If a block is only partially written
        UploadError: If the stream ends before the announced size
        UploadFailedError: If the device reports failure after the transfer
    """
    size = stream_length(stream)
    send_download_command(session, size)
    logger.debug("Device accepted download of %d bytes", size)

    sent = 0
    while sent < size:
        want = min(BLOCK_SIZE, size - sent)
        block = stream.read(want)
        if len(block) != want:
            raise UploadError(
                f"Payload ended early at offset {sent + len(block)} of {size}"
            )

        transfer_block(session, block)
        sent += want

        if progress_callback:
            progress_callback(sent, size)

    read_final_status(session)
    logger.info("Uploaded %d bytes", size)
    return size
