# SPDX-License-Identifier: MIT
# Copyright (c) 2026 ADNT Sarl <info@adnt.io>

"""Finding fastboot devices among the attached USB devices."""

import logging
import time
from typing import List, Optional

from .errors import DeviceOpenError, DeviceTimeoutError
from .usb_backend import FASTBOOT_PID, FASTBOOT_VID, DeviceDescriptor, UsbBackend

logger = logging.getLogger(__name__)


def is_fastboot_device(descriptor: DeviceDescriptor, serial: Optional[str] = None) -> bool:
    """
    Decide whether a descriptor is a fastboot device.

    Args:
        descriptor: Device to check
        serial: If given (and not blank), the serial string must match exactly

    Returns:
        True if the device matches all criteria.
    """
    if descriptor.vendor_id != FASTBOOT_VID or descriptor.product_id != FASTBOOT_PID:
        return False

    if serial and serial.strip():
        return descriptor.serial_number == serial

    return True


def list_matching(backend: UsbBackend, serial: Optional[str] = None) -> List[DeviceDescriptor]:
    """Return all attached fastboot devices, optionally filtered by serial."""
    return [d for d in backend.list_devices() if is_fastboot_device(d, serial)]


def wait_for_device(
    backend: UsbBackend,
    max_attempts: int = 50,
    poll_interval: int = 500,
) -> DeviceDescriptor:
    """
    Block until a fastboot device is attached.

    Args:
        backend: USB backend to poll
        max_attempts: Number of device listings before giving up
        poll_interval: Delay between listings in milliseconds

    Returns:
        The first matching device

    Raises:
        DeviceTimeoutError: If no device showed up after max_attempts polls
    """
    for attempt in range(max_attempts):
        matches = list_matching(backend)
        if matches:
            logger.debug("Fastboot device found after %d poll(s)", attempt + 1)
            return matches[0]

        if attempt + 1 < max_attempts:
            time.sleep(poll_interval / 1000)

    raise DeviceTimeoutError(
        f"Fastboot Timeout Error! No device after {max_attempts} attempts"
    )


def list_devices(backend: UsbBackend) -> List[Optional[str]]:
    """
    List serial numbers of all attached fastboot devices.

    Each device is opened only long enough to read its serial number.
    Devices that cannot be opened are skipped.
    """
    serials: List[Optional[str]] = []
    for descriptor in list_matching(backend):
        try:
            handle = backend.open(descriptor)
        except DeviceOpenError as e:
            logger.warning("Skipping device: %s", e)
            continue

        try:
            serials.append(handle.serial_number)
        finally:
            handle.close()

    return serials
