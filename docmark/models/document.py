from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional

from PIL import Image


class DocumentKind(str, Enum):
    PAGINATED = "paginated"
    FLOW_TEXT = "flow_text"
    FLOW_TABLE = "flow_table"
    RASTER = "raster"
    UNSUPPORTED = "unsupported"


@dataclass(frozen=True)
class UploadedBuffer:
    name: str
    data: bytes = field(repr=False)
    mime_hint: Optional[str] = None
    size_bytes: int = -1

    def __post_init__(self) -> None:
        if self.size_bytes < 0:
            object.__setattr__(self, "size_bytes", len(self.data))

    @classmethod
    def from_path(cls, path: Path, mime_hint: Optional[str] = None) -> "UploadedBuffer":
        data = Path(path).read_bytes()
        return cls(name=Path(path).name, data=data, mime_hint=mime_hint, size_bytes=len(data))

    @property
    def extension(self) -> str:
        return Path(self.name).suffix.lower().lstrip(".")

    @property
    def stem(self) -> str:
        return Path(self.name).stem


@dataclass(frozen=True)
class DocumentRef:
    """Metadata about the document being watermarked, supplied by the host application."""

    id: str
    title: str = ""
    type: str = ""


@dataclass
class RasterPage:
    number: int  # 1-indexed, source order
    image: Image.Image = field(repr=False)
    scale: float = 1.0
    source_format: str = "PNG"

    @property
    def width(self) -> int:
        return self.image.width

    @property
    def height(self) -> int:
        return self.image.height

    def release(self) -> None:
        self.image.close()


@dataclass
class MarkupPage:
    number: int
    html: str

    def release(self) -> None:
        return None
