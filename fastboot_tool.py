#!/usr/bin/env python3
# SPDX-License-Identifier: MIT
# Copyright (c) 2026 ADNT Sarl <info@adnt.io>

"""
Command-line tool for devices in fastboot mode.

Usage:
    python fastboot_tool.py devices
    python fastboot_tool.py wait --attempts 50
    python fastboot_tool.py --serial 0123456789ABCDEF command getvar:product
    python fastboot_tool.py download boot.img

Requirements:
    pip install pyusb
"""

import argparse
import logging
import sys
from pathlib import Path

import usb.core

from fastboot_protocol import PyUsbBackend, Session, Status, list_devices, wait_for_device
from fastboot_protocol.errors import FastbootError, UploadError


def cmd_devices(backend: PyUsbBackend) -> int:
    """List attached fastboot devices."""
    serials = list_devices(backend)
    if not serials:
        print("No fastboot devices found!")
        return 1

    for serial in serials:
        print(f"{serial or '(no serial)'}\tfastboot")
    return 0


def cmd_wait(backend: PyUsbBackend, attempts: int, interval: int) -> int:
    """Wait for a fastboot device."""
    print("Waiting for device... ", end="", flush=True)
    device = wait_for_device(backend, max_attempts=attempts, poll_interval=interval)
    print(f"OK ({device.serial_number or 'no serial'})")
    return 0


def cmd_command(session: Session, text: str) -> int:
    """Send a raw command and print the response."""
    resp = session.command(text)
    print(f"{resp.status}: {resp.payload.strip()}")
    return 0 if resp.status in (Status.OKAY, Status.DATA) else 1


def cmd_download(session: Session, path: Path) -> int:
    """Upload a file into the device's download buffer."""
    size = path.stat().st_size
    print(f"File:   {path} ({size} bytes)")
    print(f"Device: {session.get_serial_number()}")
    print()

    def progress(sent: int, total: int):
        pct = sent * 100 // total
        print(f"\rUploading: {pct:3d}% ({sent}/{total} bytes)", end="", flush=True)

    try:
        session.upload_file(path, progress_callback=progress)
    except UploadError as e:
        print(f"\nFAILED: {e}")
        return 1

    print("\rUploading: 100% - Complete!          ")
    return 0


def main():
    parser = argparse.ArgumentParser(
        description="Command-line tool for fastboot devices"
    )
    parser.add_argument(
        "--serial", "-s",
        default=None,
        help="Serial number of the target device (default: first found)"
    )
    parser.add_argument(
        "--timeout", "-t",
        type=int,
        default=3000,
        help="USB transfer timeout in milliseconds"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Log USB traffic"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    # devices command
    subparsers.add_parser("devices", help="List attached fastboot devices")

    # wait command
    wait_parser = subparsers.add_parser("wait", help="Wait for a fastboot device")
    wait_parser.add_argument("--attempts", type=int, default=50,
                             help="Number of polls before giving up")
    wait_parser.add_argument("--interval", type=int, default=500,
                             help="Delay between polls in milliseconds")

    # command command
    command_parser = subparsers.add_parser("command", help="Send a raw command")
    command_parser.add_argument("text", help="Command text (e.g. getvar:product)")

    # download command
    download_parser = subparsers.add_parser("download", help="Upload a file")
    download_parser.add_argument("file", type=Path, help="Payload file")

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(name)s %(levelname)s: %(message)s",
    )

    backend = PyUsbBackend()

    try:
        if args.command == "devices":
            sys.exit(cmd_devices(backend))
        elif args.command == "wait":
            sys.exit(cmd_wait(backend, args.attempts, args.interval))

        if args.command == "download" and not args.file.exists():
            print(f"Error: File not found: {args.file}")
            sys.exit(1)

        with Session(serial=args.serial, timeout=args.timeout, backend=backend) as session:
            if args.command == "command":
                code = cmd_command(session, args.text)
            else:
                code = cmd_download(session, args.file)
    except (FastbootError, usb.core.USBError) as e:
        print(f"Error: {e}")
        sys.exit(1)

    sys.exit(code)


if __name__ == "__main__":
    main()
