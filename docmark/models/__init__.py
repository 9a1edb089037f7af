from .common import (
    NOT_APPLICABLE,
    ContainerSize,
    DownloadArtifact,
    DownloadPlan,
    HorizontalAlign,
    ImageBytes,
    NotApplicable,
    OverlayDescription,
    Placement,
    RenderMode,
    VerticalAlign,
)
from .document import DocumentKind, DocumentRef, MarkupPage, RasterPage, UploadedBuffer
from .watermark import Anchor, GeneratedStyle, PersistedWatermark, StyleMode, WatermarkSpec

__all__ = [
    "NOT_APPLICABLE",
    "Anchor",
    "ContainerSize",
    "DocumentKind",
    "DocumentRef",
    "DownloadArtifact",
    "DownloadPlan",
    "GeneratedStyle",
    "HorizontalAlign",
    "ImageBytes",
    "MarkupPage",
    "NotApplicable",
    "OverlayDescription",
    "PersistedWatermark",
    "Placement",
    "RasterPage",
    "RenderMode",
    "StyleMode",
    "UploadedBuffer",
    "VerticalAlign",
    "WatermarkSpec",
]
