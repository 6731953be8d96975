"""Capture raw HR and PMD notifications to a JSONL file for later replay."""

from __future__ import annotations

import asyncio
import base64
import json
from datetime import datetime, timezone
from pathlib import Path

from bleak import BleakClient
from bleak.backends.characteristic import BleakGATTCharacteristic

from hrvmon.ble import has_pmd_service, resolve_address
from hrvmon.protocol import (
    ECG_START,
    HR_MEASUREMENT_UUID,
    PMD_CONTROL_UUID,
    PMD_DATA_UUID,
    MeasurementType,
    build_stop_measurement,
)

LOGS_DIR = Path.cwd() / "logs"


def capture_record(uuid: str, data: bytes | bytearray, timestamp: str | None = None) -> dict:
    """Build one JSONL capture record."""
    if timestamp is None:
        timestamp = datetime.now(timezone.utc).isoformat()
    return {
        "timestamp": timestamp,
        "uuid": uuid,
        "hex_data": bytes(data).hex(),
        "raw_bytes_b64": base64.b64encode(bytes(data)).decode("ascii"),
        "length": len(data),
    }


async def capture(
    address: str | None = None,
    duration: float | None = None,
    output: str | None = None,
    enable_ecg: bool = True,
) -> None:
    """Log every HR (and optionally ECG) notification to a JSONL file.

    Args:
        address: BLE address. If None, scans for a strap.
        duration: Capture duration in seconds. None = run until Ctrl+C.
        output: Output file path. If None, auto-generates in logs/.
        enable_ecg: If True, start the PMD ECG stream as well.
    """
    address = await resolve_address(address)
    if address is None:
        print("No heart-rate strap found.")
        return

    if output is None:
        LOGS_DIR.mkdir(parents=True, exist_ok=True)
        ts = datetime.now().strftime("%Y%m%d_%H%M%S")
        output = str(LOGS_DIR / f"capture_{ts}.jsonl")

    outpath = Path(output)
    outpath.parent.mkdir(parents=True, exist_ok=True)
    count = 0

    print(f"Connecting to {address}...")

    async with BleakClient(address) as client:
        print(f"Connected. MTU={client.mtu_size}")

        with open(outpath, "a") as f:

            def make_handler(char_uuid: str):
                def handler(_char: BleakGATTCharacteristic, data: bytearray) -> None:
                    nonlocal count
                    f.write(json.dumps(capture_record(char_uuid, data)) + "\n")
                    f.flush()
                    count += 1
                return handler

            await client.start_notify(HR_MEASUREMENT_UUID, make_handler(HR_MEASUREMENT_UUID))
            ecg_started = False
            if enable_ecg and has_pmd_service(client):
                await client.start_notify(PMD_DATA_UUID, make_handler(PMD_DATA_UUID))
                await client.write_gatt_char(PMD_CONTROL_UUID, ECG_START, response=True)
                ecg_started = True

            label = "HR + ECG" if ecg_started else "HR"
            print(f"\nCapturing [{label}] → {outpath}")
            print("Press Ctrl+C to stop.\n")

            try:
                if duration:
                    await asyncio.sleep(duration)
                else:
                    while True:
                        await asyncio.sleep(1)
            except asyncio.CancelledError:
                pass
            finally:
                if ecg_started:
                    try:
                        await client.write_gatt_char(
                            PMD_CONTROL_UUID, build_stop_measurement(MeasurementType.ECG), response=True
                        )
                    except Exception:
                        pass  # best-effort cleanup
                print(f"\nCapture complete. {count} frames → {outpath}")
