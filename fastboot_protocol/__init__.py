# SPDX-License-Identifier: MIT
# Copyright (c) 2026 ADNT Sarl <info@adnt.io>

"""
Fastboot protocol - Python client library.

This package provides a Python interface to devices in fastboot mode
over USB bulk endpoints (via pyusb).

Example usage:
    from fastboot_protocol import Session, Status, wait_for_device, PyUsbBackend

    wait_for_device(PyUsbBackend())

    with Session() as session:
        print(f"Serial: {session.get_serial_number()}")

        resp = session.command("getvar:product")
        if resp.status is Status.OKAY:
            print(resp.payload)

        session.upload_file(
            "boot.img",
            progress_callback=lambda sent, total: print(f"{sent}/{total}")
        )
"""

from .discovery import (
    FASTBOOT_PID,
    FASTBOOT_VID,
    is_fastboot_device,
    list_devices,
    list_matching,
    wait_for_device,
)
from .errors import (
    FastbootError,
    DeviceTimeoutError,
    NoDeviceFoundError,
    DeviceOpenError,
    NotConnectedError,
    ShortWriteError,
    ProtocolError,
    InvalidDownloadResponseError,
    UploadError,
    UploadFailedError,
)
from .protocol import (
    BLOCK_SIZE,
    READ_SIZE,
    Response,
    Status,
    build_response,
    clean_payload,
    encode_command,
    encode_download,
    parse_status,
)
from .session import Session
from .usb_backend import (
    ClaimableDevice,
    DeviceDescriptor,
    PyUsbBackend,
    UsbBackend,
    UsbHandle,
)

__version__ = "0.1.0"

__all__ = [
    # Discovery
    "FASTBOOT_VID",
    "FASTBOOT_PID",
    "is_fastboot_device",
    "list_devices",
    "list_matching",
    "wait_for_device",
    # Errors
    "FastbootError",
    "DeviceTimeoutError",
    "NoDeviceFoundError",
    "DeviceOpenError",
    "NotConnectedError",
    "ShortWriteError",
    "ProtocolError",
    "InvalidDownloadResponseError",
    "UploadError",
    "UploadFailedError",
    # Protocol
    "BLOCK_SIZE",
    "READ_SIZE",
    "Response",
    "Status",
    "build_response",
    "clean_payload",
    "encode_command",
    "encode_download",
    "parse_status",
    # Session
    "Session",
    # USB
    "ClaimableDevice",
    "DeviceDescriptor",
    "PyUsbBackend",
    "UsbBackend",
    "UsbHandle",
]
