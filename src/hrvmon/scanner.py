"""Discover Polar H10 (or any standard heart-rate) straps over BLE."""

import asyncio

from bleak import BleakScanner
from bleak.backends.device import BLEDevice
from bleak.backends.scanner import AdvertisementData

from hrvmon.protocol import HR_SERVICE_UUID, PMD_SERVICE_UUID, POLAR_NAME_PREFIX

Found = tuple[BLEDevice, AdvertisementData]


def advertised_name(device: BLEDevice, adv: AdvertisementData) -> str:
    return adv.local_name or device.name or ""


def is_polar(device: BLEDevice, adv: AdvertisementData) -> bool:
    uuids = [u.lower() for u in adv.service_uuids or []]
    return advertised_name(device, adv).upper().startswith(POLAR_NAME_PREFIX) or PMD_SERVICE_UUID in uuids


def is_heart_rate_strap(device: BLEDevice, adv: AdvertisementData) -> bool:
    uuids = [u.lower() for u in adv.service_uuids or []]
    return is_polar(device, adv) or HR_SERVICE_UUID in uuids


async def scan(timeout: float = 10.0) -> list[Found]:
    """Listen for advertisements and collect heart-rate straps.

    Returns (device, advertisement) pairs, Polar devices first, then by
    signal strength.
    """
    seen: dict[str, Found] = {}

    def _on_advertisement(device: BLEDevice, adv: AdvertisementData) -> None:
        if not is_heart_rate_strap(device, adv):
            return
        if device.address not in seen:
            print(f"  {advertised_name(device, adv) or '?':<20} {device.address}  {adv.rssi} dBm")
        seen[device.address] = (device, adv)

    print(f"Listening for heart-rate straps ({timeout:g}s)...")
    async with BleakScanner(detection_callback=_on_advertisement):
        await asyncio.sleep(timeout)

    found = sorted(seen.values(), key=lambda item: (not is_polar(*item), -item[1].rssi))
    print(f"{len(found)} strap(s) found." if found else "No heart-rate straps found.")
    return found


async def find_strap(timeout: float = 10.0) -> BLEDevice | None:
    """Return the best strap in range, or None."""
    found = await scan(timeout)
    return found[0][0] if found else None
