# SPDX-License-Identifier: MIT
# Copyright (c) 2026 ADNT Sarl <info@adnt.io>

"""
USB access layer.

The protocol code only talks to the abstract UsbBackend / UsbHandle pair.
PyUsbBackend implements them on top of pyusb (libusb). Handles that also
implement ClaimableDevice get configuration 1 and interface 0 claimed
when a session connects.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional

import usb.core
import usb.util

from .errors import DeviceOpenError

logger = logging.getLogger(__name__)

FASTBOOT_VID = 0x18D1
FASTBOOT_PID = 0xD00D

ENDPOINT_OUT = 0x01
ENDPOINT_IN = 0x81


@dataclass(frozen=True)
class DeviceDescriptor:
    """
    One attached USB device, as seen before it is opened.

    Attributes:
        vendor_id: USB Vendor ID.
        product_id: USB Product ID.
        serial_number: USB serial string, if it could be read.
        bus: Bus number (backend specific, used to re-locate the device).
        address: Device address on the bus.
    """
    vendor_id: int
    product_id: int
    serial_number: Optional[str] = None
    bus: Optional[int] = None
    address: Optional[int] = None


class UsbHandle(ABC):
    """An opened USB device with one bulk-out and one bulk-in endpoint."""

    @property
    @abstractmethod
    def serial_number(self) -> Optional[str]:
        """Serial string of the device."""

    @abstractmethod
    def write_bulk(self, data: bytes, timeout: int) -> int:
        """
        Write to the bulk-out endpoint.

        Args:
            data: Bytes to send
            timeout: Timeout in milliseconds

        Returns:
            Number of bytes actually written
        """

    @abstractmethod
    def read_bulk(self, size: int, timeout: int) -> bytes:
        """
        Read up to `size` bytes from the bulk-in endpoint.

        Returns:
            The bytes read; its length is the actual transfer size
        """

    @abstractmethod
    def close(self) -> None:
        """Release the device."""


class ClaimableDevice(UsbHandle):
    """A handle that supports selecting a configuration and claiming an interface."""

    @abstractmethod
    def set_configuration(self, value: int) -> None:
        """Select the active configuration."""

    @abstractmethod
    def claim_interface(self, number: int) -> None:
        """Claim an interface for exclusive use."""


class UsbBackend(ABC):
    """Enumerates and opens USB devices."""

    @abstractmethod
    def list_devices(self) -> List[DeviceDescriptor]:
        """Return every currently attached device."""

    @abstractmethod
    def open(self, descriptor: DeviceDescriptor) -> UsbHandle:
        """
        Open a device previously returned by list_devices().

        Raises:
            DeviceOpenError: If the device is gone or cannot be accessed
        """


def _read_serial(device) -> Optional[str]:
    """Read the serial string descriptor of a pyusb device."""
    if not device.iSerialNumber:
        return None
    return usb.util.get_string(device, device.iSerialNumber)


class PyUsbHandle(ClaimableDevice):
    """pyusb implementation of an opened device."""

    def __init__(
        self,
        device,
        serial_number: Optional[str],
        endpoint_out: int = ENDPOINT_OUT,
        endpoint_in: int = ENDPOINT_IN,
    ):
        self._device = device
        self._serial_number = serial_number
        self._endpoint_out = endpoint_out
        self._endpoint_in = endpoint_in
        self._claimed: Optional[int] = None

    @property
    def serial_number(self) -> Optional[str]:
        return self._serial_number

    def set_configuration(self, value: int) -> None:
        self._device.set_configuration(value)

    def claim_interface(self, number: int) -> None:
        usb.util.claim_interface(self._device, number)
        self._claimed = number

    def write_bulk(self, data: bytes, timeout: int) -> int:
        return self._device.write(self._endpoint_out, data, timeout=timeout)

    def read_bulk(self, size: int, timeout: int) -> bytes:
        return bytes(self._device.read(self._endpoint_in, size, timeout=timeout))

    def close(self) -> None:
        try:
            if self._claimed is not None:
                usb.util.release_interface(self._device, self._claimed)
                self._claimed = None
        finally:
            usb.util.dispose_resources(self._device)


class PyUsbBackend(UsbBackend):
    """
    USB backend using pyusb.

    Args:
        endpoint_out: Bulk-out endpoint address (default 0x01)
        endpoint_in: Bulk-in endpoint address (default 0x81)
    """

    def __init__(self, endpoint_out: int = ENDPOINT_OUT, endpoint_in: int = ENDPOINT_IN):
        self.endpoint_out = endpoint_out
        self.endpoint_in = endpoint_in

    def list_devices(self) -> List[DeviceDescriptor]:
        """
        Describe every attached device.

        Only fastboot devices have their serial read; each of them is
        released again right after the string descriptor read.
        """
        results: List[DeviceDescriptor] = []
        for device in usb.core.find(find_all=True):
            serial = None
            if device.idVendor == FASTBOOT_VID and device.idProduct == FASTBOOT_PID:
                try:
                    serial = _read_serial(device)
                except (usb.core.USBError, ValueError) as e:
                    # No permission to read string descriptors
                    logger.debug(
                        "Cannot read serial of %04x:%04x: %s",
                        device.idVendor, device.idProduct, e,
                    )
                finally:
                    usb.util.dispose_resources(device)
            results.append(DeviceDescriptor(
                vendor_id=device.idVendor,
                product_id=device.idProduct,
                serial_number=serial,
                bus=device.bus,
                address=device.address,
            ))
        return results

    def open(self, descriptor: DeviceDescriptor) -> PyUsbHandle:
        device = usb.core.find(
            idVendor=descriptor.vendor_id,
            idProduct=descriptor.product_id,
            custom_match=lambda d: (
                (descriptor.bus is None or d.bus == descriptor.bus)
                and (descriptor.address is None or d.address == descriptor.address)
            ),
        )
        if device is None:
            raise DeviceOpenError(f"Device is no longer attached: {descriptor}")

        try:
            serial = _read_serial(device)
        except (usb.core.USBError, ValueError) as e:
            usb.util.dispose_resources(device)
            raise DeviceOpenError(f"Cannot open {descriptor}: {e}") from e

        return PyUsbHandle(device, serial, self.endpoint_out, self.endpoint_in)
