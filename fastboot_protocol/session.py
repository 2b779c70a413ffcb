# SPDX-License-Identifier: MIT
# Copyright (c) 2026 ADNT Sarl <info@adnt.io>

"""
Fastboot session: one opened device and the command/response cycle.
"""

import io
import logging
from pathlib import Path
from typing import BinaryIO, Optional, Union

from .discovery import list_matching
from .errors import FastbootError, NoDeviceFoundError, NotConnectedError, ShortWriteError
from .protocol import READ_SIZE, Response, Status, build_response, encode_command, parse_status
from .upload import ProgressCallback, upload_stream
from .usb_backend import ClaimableDevice, PyUsbBackend, UsbBackend, UsbHandle

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 3000
CONFIGURATION = 1
INTERFACE = 0


class Session:
    """
    Connection to a single fastboot device.

    Can be used as a context manager, which connects on entry and
    disconnects on every exit path:
        with Session(serial="0123456789ABCDEF") as s:
            resp = s.command("getvar:product")
    """

    def __init__(
        self,
        serial: Optional[str] = None,
        timeout: int = DEFAULT_TIMEOUT,
        backend: Optional[UsbBackend] = None,
    ):
        """
        Args:
            serial: Only connect to the device with this serial (default: first found)
            timeout: USB transfer timeout in milliseconds (default 3000)
            backend: USB backend (default: PyUsbBackend)
        """
        self._serial = serial
        self.timeout = timeout
        self._backend = backend or PyUsbBackend()
        self._handle: Optional[UsbHandle] = None
        self._closed = False

    def __enter__(self):
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type is None:
            self.disconnect()
        elif self._handle is not None:
            # Keep the body's exception; a failing close is only logged
            try:
                self.disconnect()
            except Exception as e:
                logger.warning("Error closing device after failure: %s", e)
        return False

    @property
    def serial(self) -> Optional[str]:
        """Serial filter given at construction."""
        return self._serial

    @property
    def is_connected(self) -> bool:
        return self._handle is not None

    @property
    def handle(self) -> UsbHandle:
        """The open device handle."""
        if self._handle is None:
            raise NotConnectedError("Not connected to a fastboot device")
        return self._handle

    def connect(self) -> None:
        """
        Open the first fastboot device matching the serial filter.

        Raises:
            NoDeviceFoundError: If no device matches
        """
        if self._closed:
            raise FastbootError("Session has been disconnected")
        if self._handle is not None:
            raise FastbootError("Session is already connected")

        matches = list_matching(self._backend, self._serial)
        if not matches:
            raise NoDeviceFoundError("No fastboot devices found!")

        handle = self._backend.open(matches[0])
        if isinstance(handle, ClaimableDevice):
            try:
                handle.set_configuration(CONFIGURATION)
                handle.claim_interface(INTERFACE)
            except BaseException:
                handle.close()
                raise

        self._handle = handle
        logger.info("Connected to fastboot device %s", handle.serial_number)

    def disconnect(self) -> None:
        """Release the device. The session cannot be reconnected afterwards."""
        handle = self.handle
        self._handle = None
        self._closed = True
        handle.close()
        logger.info("Disconnected from fastboot device")

    def get_serial_number(self) -> Optional[str]:
        """Serial number of the connected device."""
        return self.handle.serial_number

    def command(self, command: Union[bytes, str]) -> Response:
        """
        Send a command and read frames until a non-INFO status arrives.

        A FAIL (or UNKNOWN) answer is returned, not raised; check
        Response.status.

        Raises:
            ShortWriteError: If the command was only partially written
        """
        handle = self.handle
        data = encode_command(command)
        logger.debug("-> %r", data)

        written = handle.write_bulk(data, self.timeout)
        if written != len(data):
            raise ShortWriteError(written, len(data))

        chunks = []
        while True:
            chunk = handle.read_bulk(READ_SIZE, self.timeout)
            chunks.append(chunk)
            status = parse_status(chunk)
            logger.debug("<- %s %r", status, chunk)
            if status is not Status.INFO:
                break

        return build_response(chunks)

    def upload_data(
        self,
        data: Union[bytes, BinaryIO],
        progress_callback: Optional[ProgressCallback] = None,
    ) -> int:
        """
        Upload a payload into the device's download buffer.

        Args:
            data: Payload bytes, or a seekable binary stream read from its
                current position
            progress_callback: Optional callback(bytes_sent, total_bytes)

        Returns:
            Number of bytes uploaded
        """
        if isinstance(data, (bytes, bytearray, memoryview)):
            data = io.BytesIO(data)
        return upload_stream(self, data, progress_callback)

    def upload_file(
        self,
        path: Union[str, Path],
        progress_callback: Optional[ProgressCallback] = None,
    ) -> int:
        """
        Upload the contents of a file.

        Raises:
            FileNotFoundError: If the file does not exist
        """
        with open(path, "rb") as stream:
            return upload_stream(self, stream, progress_callback)
