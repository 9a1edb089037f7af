from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

OPACITY_MIN = 0.1
OPACITY_MAX = 1.0


class Anchor(str, Enum):
    TOP_LEFT = "TopLeft"
    TOP = "Top"
    TOP_RIGHT = "TopRight"
    LEFT = "Left"
    CENTERED = "Centered"
    RIGHT = "Right"
    BOTTOM_LEFT = "BottomLeft"
    BOTTOM = "Bottom"
    BOTTOM_RIGHT = "BottomRight"

    @classmethod
    def _missing_(cls, value: object) -> Optional["Anchor"]:
        if isinstance(value, str):
            key = value.replace(" ", "").replace("-", "").replace("_", "").lower()
            if key in _ANCHOR_ALIASES:
                return cls(_ANCHOR_ALIASES[key])
            for member in cls:
                if member.value.lower() == key:
                    return member
        return None


# Labels used by older settings records.
_ANCHOR_ALIASES = {
    "customleft": "Left",
    "customright": "Right",
    "center": "Centered",
    "centre": "Centered",
}


class StyleMode(str, Enum):
    INITIAL = "initial"
    VARIANT = "variant"


class WatermarkSpec(BaseModel):
    """Watermark settings shared by preview and export."""

    model_config = ConfigDict(frozen=True)

    text: str = "CONFIDENTIAL"
    anchor: Anchor = Anchor.CENTERED
    opacity: float = Field(0.3, description="Opacity between 0.1 and 1.0.")
    rotation: int = Field(297, description="Degrees, clockwise, never normalized.")
    font_family: str = "Helvetica"
    font_size: int = Field(49, gt=0, description="Font size in preview pixels.")
    color: str = "#ff0000"
    offset_x: int = 0
    offset_y: int = 0
    page_range: Optional[str] = Field(None, description='Pages to export, e.g. "1-10, 13, 100-".')

    @field_validator("opacity", mode="before")
    @classmethod
    def _clamp_opacity(cls, value: Any) -> Any:
        try:
            return max(OPACITY_MIN, min(OPACITY_MAX, float(value)))
        except (TypeError, ValueError):
            return value

    @field_validator("rotation", mode="before")
    @classmethod
    def _whole_degrees(cls, value: Any) -> Any:
        try:
            return int(round(float(value)))
        except (TypeError, ValueError, OverflowError):
            return value

    def update(self, **changes: Any) -> "WatermarkSpec":
        """Return a validated copy with ``changes`` applied."""
        return WatermarkSpec.model_validate({**self.model_dump(), **changes})


class GeneratedStyle(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    font_family: str = Field(..., alias="fontFamily")
    font_size: int = Field(..., alias="fontSize")
    color: str
    opacity: float
    rotation: int
    offset_x: int = Field(..., alias="xOffset")
    offset_y: int = Field(..., alias="yOffset")
    seed: str
    mode: StyleMode = StyleMode.INITIAL


class PersistedWatermark(BaseModel):
    """Settings record written when a document cannot be watermarked at the pixel level."""

    model_config = ConfigDict(populate_by_name=True)

    document_id: str = Field(..., alias="documentId")
    text: str
    location: Anchor
    opacity: float
    rotation: int
    font: str
    font_size: int = Field(..., alias="fontSize")
    color: str
    page_range: Optional[str] = Field(None, alias="pageRange")
    generated_style: Optional[GeneratedStyle] = Field(None, alias="generatedStyle")
    is_locked: bool = Field(False, alias="isLocked")
    created_by: str = Field(..., alias="createdBy")
    created_at: datetime = Field(..., alias="createdAt")

    def to_record(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)
