"""
docmark
=======
Document watermark composition engine.

Decodes uploaded documents into pages, derives watermark styles from a seed,
describes the live overlay and burns the watermark into page images.

Usage:
    from docmark import WatermarkEngine, UploadedBuffer, DocumentRef
"""

__version__ = "0.1.0"

from .core.errors import (
    DecodeError,
    DocmarkError,
    EmptyInputError,
    ExportBlockedError,
    PageRangeError,
    RasterizeError,
    StyleLockedError,
)
from .models import (
    Anchor,
    ContainerSize,
    DocumentKind,
    DocumentRef,
    DownloadPlan,
    GeneratedStyle,
    RenderMode,
    UploadedBuffer,
    WatermarkSpec,
)
from .services.anchor import resolve
from .services.compositor import ExportCompositor
from .services.engine import WatermarkEngine
from .services.normalizer import FormatNormalizer
from .services.overlay import render_overlay
from .services.packager import deliver, package, persist_settings
from .services.style_generator import generate, regenerate

__all__ = [
    "__version__",
    # Errors
    "DecodeError",
    "DocmarkError",
    "EmptyInputError",
    "ExportBlockedError",
    "PageRangeError",
    "RasterizeError",
    "StyleLockedError",
    # Models
    "Anchor",
    "ContainerSize",
    "DocumentKind",
    "DocumentRef",
    "DownloadPlan",
    "GeneratedStyle",
    "RenderMode",
    "UploadedBuffer",
    "WatermarkSpec",
    # Services
    "ExportCompositor",
    "FormatNormalizer",
    "WatermarkEngine",
    "deliver",
    "generate",
    "package",
    "persist_settings",
    "regenerate",
    "render_overlay",
    "resolve",
]
