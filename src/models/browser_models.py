"""Browser configuration models shared by the performance engine."""

from enum import Enum

from pydantic import BaseModel, Field


class BrowserType(str, Enum):
    """Browser engines Playwright can launch."""

    CHROMIUM = "chromium"
    FIREFOX = "firefox"
    WEBKIT = "webkit"


class DeviceType(str, Enum):
    """Device classes a page can be analyzed as."""

    DESKTOP = "desktop"
    MOBILE = "mobile"


class Viewport(BaseModel):
    """Browser viewport configuration."""

    width: int = Field(default=1280, gt=0, description="Viewport width")
    height: int = Field(default=720, gt=0, description="Viewport height")
    device_scale_factor: float = Field(default=1.0, gt=0, description="Device pixel ratio")
    is_mobile: bool = Field(default=False, description="Mobile viewport")
    has_touch: bool = Field(default=False, description="Touch support")

    class Config:
        frozen = True

    @property
    def device_type(self) -> DeviceType:
        return DeviceType.MOBILE if self.is_mobile else DeviceType.DESKTOP
