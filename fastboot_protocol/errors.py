# SPDX-License-Identifier: MIT
# Copyright (c) 2026 ADNT Sarl <info@adnt.io>

"""Exceptions raised by the fastboot client."""


class FastbootError(Exception):
    """Base exception for fastboot client errors."""
    pass


class DeviceTimeoutError(FastbootError):
    """No fastboot device appeared within the polling budget."""
    pass


class NoDeviceFoundError(FastbootError):
    """No attached device matched the fastboot identity filter."""
    pass


class DeviceOpenError(FastbootError):
    """A listed device could not be opened."""
    pass


class NotConnectedError(FastbootError):
    """Operation requires a connected session."""
    pass


class ShortWriteError(FastbootError):
    """Fewer (or more) bytes were written to the endpoint than requested."""

    def __init__(self, actual: int, expected: int, what: str = "command"):
        super().__init__(
            f"Failed to write {what}! Transferred: {actual} of {expected} bytes"
        )
        self.actual = actual
        self.expected = expected


class ProtocolError(FastbootError):
    """Protocol-level error (unexpected status, etc.)."""
    pass


class InvalidDownloadResponseError(ProtocolError):
    """The device did not answer a download announcement with DATA."""

    def __init__(self, size: int, response=None):
        super().__init__(f"Invalid response from device! (data size: {size})")
        self.size = size
        self.response = response


class UploadError(ProtocolError):
    """Error during data upload."""
    pass


class UploadFailedError(UploadError):
    """The final status after a data transfer was not OKAY."""

    def __init__(self, text: str):
        super().__init__(f"Invalid status after upload: {text!r}")
        self.text = text
