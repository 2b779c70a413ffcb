# SPDX-License-Identifier: MIT
# Copyright (c) 2026 ADNT Sarl <info@adnt.io>

"""Pytest configuration and scripted USB fakes."""

from typing import List, Optional

import pytest

from fastboot_protocol.discovery import FASTBOOT_PID, FASTBOOT_VID
from fastboot_protocol.errors import DeviceOpenError
from fastboot_protocol.usb_backend import (
    ClaimableDevice,
    DeviceDescriptor,
    UsbBackend,
    UsbHandle,
)


def pytest_addoption(parser):
    """Add custom command-line options."""
    parser.addoption(
        "--serial",
        action="store",
        default=None,
        help="Serial number of a physical fastboot device for integration tests",
    )


class FakeHandle(ClaimableDevice):
    """Claimable handle that replays scripted bulk-in frames."""

    def __init__(self, responses: List[bytes] = None, serial: Optional[str] = "FAKE0001"):
        self.responses = list(responses or [])
        self.writes: List[bytes] = []
        self.reads: List[int] = []
        self.timeouts: List[int] = []
        self.configuration = None
        self.interface = None
        self.closed = False
        self.short_by = 0
        self._serial = serial

    @property
    def serial_number(self) -> Optional[str]:
        return self._serial

    def set_configuration(self, value: int) -> None:
        self.configuration = value

    def claim_interface(self, number: int) -> None:
        self.interface = number

    def write_bulk(self, data: bytes, timeout: int) -> int:
        self.writes.append(bytes(data))
        self.timeouts.append(timeout)
        return len(data) - self.short_by

    def read_bulk(self, size: int, timeout: int) -> bytes:
        self.reads.append(size)
        self.timeouts.append(timeout)
        if not self.responses:
            raise AssertionError("Unexpected bulk read")
        return self.responses.pop(0)[:size]

    def close(self) -> None:
        self.closed = True


class PlainHandle(UsbHandle):
    """Handle without the claim capability."""

    def __init__(self, serial: Optional[str] = "PLAIN001"):
        self._serial = serial
        self.closed = False

    @property
    def serial_number(self) -> Optional[str]:
        return self._serial

    def write_bulk(self, data: bytes, timeout: int) -> int:
        return len(data)

    def read_bulk(self, size: int, timeout: int) -> bytes:
        return b"OKAY"

    def close(self) -> None:
        self.closed = True


class FakeBackend(UsbBackend):
    """Backend with a fixed device list; opens devices to prepared handles."""

    def __init__(self, devices: List[DeviceDescriptor] = None, handles: dict = None):
        self.devices = list(devices or [])
        self.handles = dict(handles or {})
        self.list_calls = 0
        self.opened: List[DeviceDescriptor] = []

    def list_devices(self) -> List[DeviceDescriptor]:
        self.list_calls += 1
        return list(self.devices)

    def open(self, descriptor: DeviceDescriptor) -> UsbHandle:
        self.opened.append(descriptor)
        handle = self.handles.get(descriptor.serial_number)
        if handle is None:
            raise DeviceOpenError(f"Cannot open {descriptor}")
        return handle


def fastboot_descriptor(serial: Optional[str] = "FAKE0001") -> DeviceDescriptor:
    """Descriptor carrying the fastboot identity."""
    return DeviceDescriptor(FASTBOOT_VID, FASTBOOT_PID, serial)


@pytest.fixture
def handle():
    """Claimable fake handle with no scripted responses."""
    return FakeHandle()


@pytest.fixture
def backend(handle):
    """Backend exposing one fastboot device backed by `handle`."""
    return FakeBackend([fastboot_descriptor("FAKE0001")], {"FAKE0001": handle})


@pytest.fixture
def device_serial(request):
    """Serial of the physical device from the command line, if any."""
    return request.config.getoption("--serial")
