"""iOS simulator data structures."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel


class SimulatorDevice(BaseModel):
    udid: str
    name: str
    state: str  # Booted, Shutdown, ...
    device_type: str = ""
    runtime: str = ""
    is_available: bool = True

    @property
    def is_booted(self) -> bool:
        return self.state == "Booted"


class ScreenSize(BaseModel):
    width: int
    height: int


class SimulatorRunResult(BaseModel):
    success: bool
    device: Optional[SimulatorDevice] = None
    screenshot: Optional[bytes] = None  # PNG
    screen_size: Optional[ScreenSize] = None
    error: Optional[str] = None
