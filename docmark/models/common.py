from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

from .watermark import Anchor


class RenderMode(str, Enum):
    VECTOR = "vector"  # percentages of the container, for the live overlay
    RASTER = "raster"  # absolute pixels, for the compositor


class HorizontalAlign(str, Enum):
    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"


class VerticalAlign(str, Enum):
    TOP = "top"
    MIDDLE = "middle"
    BOTTOM = "bottom"


@dataclass(frozen=True)
class ContainerSize:
    width: float
    height: float


@dataclass(frozen=True)
class Placement:
    x: float
    y: float
    horizontal_align: HorizontalAlign
    vertical_align: VerticalAlign
    transform_origin: str
    mode: RenderMode


@dataclass(frozen=True)
class OverlayDescription:
    visible: bool
    text: str = ""
    anchor: Optional[Anchor] = None
    placement: Optional[Placement] = None
    left_px: float = 0.0
    top_px: float = 0.0
    rotation: int = 0
    font_family: str = ""
    font_size: int = 0
    color: str = ""
    opacity: float = 0.0
    style: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def empty(cls) -> "OverlayDescription":
        return cls(visible=False)


@dataclass(frozen=True)
class ImageBytes:
    page_number: int
    data: bytes = field(repr=False)
    format: str = "PNG"
    width: int = 0
    height: int = 0

    @property
    def extension(self) -> str:
        return "jpg" if self.format == "JPEG" else self.format.lower()


class NotApplicable(Enum):
    """Marker returned for pages that cannot be composited at the pixel level."""

    NOT_APPLICABLE = "not_applicable"


NOT_APPLICABLE = NotApplicable.NOT_APPLICABLE


@dataclass(frozen=True)
class DownloadArtifact:
    filename: str
    data: bytes = field(repr=False)
    delay_ms: int = 0  # wait before triggering this download


@dataclass
class DownloadPlan:
    artifacts: List[DownloadArtifact] = field(default_factory=list)
    settings_key: Optional[str] = None  # set when the settings-only fallback was used

    @property
    def is_settings_only(self) -> bool:
        return self.settings_key is not None

    @property
    def filenames(self) -> List[str]:
        return [artifact.filename for artifact in self.artifacts]
