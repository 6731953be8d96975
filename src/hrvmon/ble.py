"""Live BLE transport: feed a connected Polar H10 into a SensorDevice.

Heart Rate Measurement notifications (0x2A37) carry the RR intervals.
ECG requires the proprietary PMD service: the start command is written to
the PMD control point and samples arrive on the PMD data characteristic.
Notifications are delivered on the asyncio loop thread, one at a time, so
the calculator layer sees a strictly ordered, single-threaded event stream.
"""

from __future__ import annotations

import asyncio
import logging

from bleak import BleakClient
from bleak.backends.characteristic import BleakGATTCharacteristic

from hrvmon.device import SensorDevice
from hrvmon.protocol import (
    ECG_START,
    HR_MEASUREMENT_UUID,
    PMD_CONTROL_UUID,
    PMD_DATA_UUID,
    PMD_SERVICE_UUID,
    MeasurementType,
    build_stop_measurement,
)
from hrvmon.scanner import find_strap

logger = logging.getLogger(__name__)


def has_pmd_service(client: BleakClient) -> bool:
    """Check whether the connected device exposes the Polar PMD service."""
    return any(service.uuid.lower() == PMD_SERVICE_UUID for service in client.services)


async def resolve_address(address: str | None) -> str | None:
    if address is not None:
        return address
    device = await find_strap()
    if device is None:
        return None
    return device.address


async def stream_device(
    device: SensorDevice,
    address: str | None = None,
    enable_ecg: bool = False,
    duration: float | None = None,
) -> None:
    """Connect to a strap and push its notifications into ``device``.

    Args:
        device: Receives every HR and PMD frame.
        address: BLE address. If None, scans for a strap.
        enable_ecg: Start the PMD ECG stream (needed for QTc).
        duration: Seconds to stream. None = run until cancelled.
    """
    address = await resolve_address(address)
    if address is None:
        print("No heart-rate strap found.")
        return

    print(f"Connecting to {address}...")

    async with BleakClient(address) as client:
        print(f"Connected. MTU={client.mtu_size}")

        def _on_hr(_char: BleakGATTCharacteristic, data: bytearray) -> None:
            device.handle_heart_rate_frame(data)

        def _on_pmd(_char: BleakGATTCharacteristic, data: bytearray) -> None:
            device.handle_pmd_frame(data)

        await client.start_notify(HR_MEASUREMENT_UUID, _on_hr)

        ecg_started = False
        if enable_ecg:
            if has_pmd_service(client):
                await client.start_notify(PMD_CONTROL_UUID, lambda _c, d: logger.debug("PMD control: %s", d.hex()))
                await client.start_notify(PMD_DATA_UUID, _on_pmd)
                await client.write_gatt_char(PMD_CONTROL_UUID, ECG_START, response=True)
                ecg_started = True
            else:
                print("Warning: no PMD service; ECG (and QTc) unavailable.")

        streams = "HR" + (" + ECG" if ecg_started else "")
        print(f"\nStreaming {streams} (Ctrl+C to stop):\n")

        try:
            if duration:
                await asyncio.sleep(duration)
            else:
                while True:
                    await asyncio.sleep(1)
        except asyncio.CancelledError:
            pass
        finally:
            print(f"\n  Stopping ({device.frames_received} frames received)...")
            try:
                if ecg_started:
                    await client.write_gatt_char(
                        PMD_CONTROL_UUID, build_stop_measurement(MeasurementType.ECG), response=True
                    )
                await client.stop_notify(HR_MEASUREMENT_UUID)
            except Exception as e:
                logger.debug("stream teardown failed: %s", e)
            device.close()
