"""iOS Simulator control through ``xcrun simctl`` (macOS with Xcode only)."""

from __future__ import annotations

import asyncio
import io
import json
import logging
import sys
import tempfile
import uuid
from pathlib import Path
from typing import Optional

from PIL import Image, UnidentifiedImageError

from breakbot.errors import SimulatorError
from breakbot.models.simulator import ScreenSize, SimulatorDevice, SimulatorRunResult

logger = logging.getLogger(__name__)

RUNTIME_PREFIX = "com.apple.CoreSimulator.SimRuntime."


async def _simctl(*args: str) -> str:
    """Run ``xcrun simctl`` and return its stdout."""
    proc = await asyncio.create_subprocess_exec(
        "xcrun", "simctl", *args,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
    )
    stdout, stderr = await proc.communicate()
    if proc.returncode != 0:
        message = stderr.decode(errors="replace").strip()
        raise SimulatorError(message or f"xcrun simctl {args[0]} exited with {proc.returncode}")
    return stdout.decode(errors="replace")


async def is_available() -> bool:
    """True on macOS when ``xcrun simctl`` can be run."""
    if sys.platform != "darwin":
        return False
    try:
        await _simctl("help")
        return True
    except (OSError, SimulatorError):
        return False


def _parse_devices(payload: dict) -> list[SimulatorDevice]:
    devices = []
    for runtime, device_list in payload.get("devices", {}).items():
        if not isinstance(device_list, list):
            continue
        for d in device_list:
            name = d.get("name", "")
            # Only iPhone/iPad devices
            if "iPhone" not in name and "iPad" not in name:
                continue
            devices.append(SimulatorDevice(
                udid=d["udid"],
                name=name,
                state=d.get("state", ""),
                device_type=d.get("deviceTypeIdentifier", ""),
                runtime=runtime.replace(RUNTIME_PREFIX, "").replace("-", " "),
                is_available=d.get("isAvailable", False),
            ))
    return devices


async def list_simulators() -> list[SimulatorDevice]:
    try:
        output = await _simctl("list", "devices", "-j")
        return _parse_devices(json.loads(output))
    except (OSError, SimulatorError, json.JSONDecodeError, KeyError) as e:
        logger.error("Error listing simulators: %s", e)
        return []


async def get_booted_simulators() -> list[SimulatorDevice]:
    return [d for d in await list_simulators() if d.is_booted]


async def boot_simulator(udid: str, warmup_seconds: float = 5.0) -> bool:
    """Boot a simulator; one that is already booted counts as success."""
    try:
        await _simctl("boot", udid)
    except SimulatorError as e:
        if "current state: Booted" in str(e):
            return True
        logger.error("Error booting simulator %s: %s", udid, e)
        return False
    except OSError as e:
        logger.error("Error booting simulator %s: %s", udid, e)
        return False
    await asyncio.sleep(warmup_seconds)
    return True


async def open_url(
    udid: str, url: str, first_wait: float = 2.0, load_wait: float = 4.0,
) -> bool:
    """Open ``url`` in the simulator's Safari.

    The URL is opened twice: the first open dismisses Safari's start page
    overlay, the second actually loads it.
    """
    try:
        await _simctl("openurl", udid, url)
        await asyncio.sleep(first_wait)
        await _simctl("openurl", udid, url)
        await asyncio.sleep(load_wait)
        return True
    except (OSError, SimulatorError) as e:
        logger.error("Error opening URL in simulator: %s", e)
        return False


async def take_screenshot(udid: str) -> Optional[bytes]:
    """Capture the simulator screen as PNG bytes."""
    path = Path(tempfile.gettempdir()) / f"breakbot-sim-{udid}-{uuid.uuid4().hex[:8]}.png"
    try:
        await _simctl("io", udid, "screenshot", str(path))
        return path.read_bytes()
    except (OSError, SimulatorError) as e:
        logger.error("Error taking simulator screenshot: %s", e)
        return None
    finally:
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            logger.warning("Could not remove %s: %s", path, e)


def get_screen_size(png: bytes) -> Optional[ScreenSize]:
    """Pixel dimensions of a captured screenshot."""
    try:
        width, height = Image.open(io.BytesIO(png)).size
    except (UnidentifiedImageError, OSError) as e:
        logger.warning("Could not read screenshot dimensions: %s", e)
        return None
    return ScreenSize(width=width, height=height)


async def run_on_simulator(
    url: str,
    udid: Optional[str] = None,
    boot_wait: float = 5.0,
    render_wait: float = 3.0,
    post_boot_wait: float = 5.0,
) -> SimulatorRunResult:
    """Open ``url`` on a simulator and screenshot it.

    Without ``udid`` a booted simulator is reused, or the first available
    iPhone is booted and given ``post_boot_wait`` more seconds to settle.
    """
    if not await is_available():
        return SimulatorRunResult(
            success=False,
            error="iOS Simulator not available. Requires macOS with Xcode installed.",
        )

    target = udid
    if not target:
        booted = await get_booted_simulators()
        if booted:
            target = booted[0].udid
        else:
            iphone = next(
                (d for d in await list_simulators() if "iPhone" in d.name and d.is_available),
                None,
            )
            if iphone is None:
                return SimulatorRunResult(
                    success=False,
                    error="No available iPhone simulator found. Please open Simulator.app first.",
                )
            if not await boot_simulator(iphone.udid, warmup_seconds=boot_wait):
                return SimulatorRunResult(
                    success=False, error=f"Failed to boot simulator: {iphone.name}",
                )
            target = iphone.udid
            # A freshly booted device lags behind simctl's reported state
            await asyncio.sleep(post_boot_wait)

    device = next((d for d in await list_simulators() if d.udid == target), None)
    if device is None:
        return SimulatorRunResult(success=False, error=f"Simulator with UDID {target} not found")

    if not device.is_booted and not await boot_simulator(target, warmup_seconds=boot_wait):
        return SimulatorRunResult(success=False, error=f"Failed to boot simulator: {device.name}")

    if not await open_url(target, url):
        return SimulatorRunResult(success=False, device=device, error="Failed to open URL in simulator")

    # CSS, images and fonts
    await asyncio.sleep(render_wait)

    screenshot = await take_screenshot(target)
    return SimulatorRunResult(
        success=True,
        device=device,
        screenshot=screenshot,
        screen_size=get_screen_size(screenshot) if screenshot else None,
    )
