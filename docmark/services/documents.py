"""
Normalized document variants.

Each document kind is its own class exposing ``render()`` for the live
preview and ``export()`` for the compositor, so adding a format means adding
one variant here.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, ClassVar, List, Optional, Union

from docmark.core.errors import DocmarkError, RasterizeError
from docmark.core.logging import configure_logging
from docmark.models import (
    NOT_APPLICABLE,
    ContainerSize,
    DocumentKind,
    ImageBytes,
    MarkupPage,
    NotApplicable,
    OverlayDescription,
    RasterPage,
    UploadedBuffer,
    WatermarkSpec,
)
from docmark.services.compositor import ExportCompositor
from docmark.services.overlay import render_overlay
from docmark.utils.file_utils import selected_pages

logger = configure_logging("documents")

Page = Union[RasterPage, MarkupPage]
ExportResult = Union[ImageBytes, NotApplicable]
ErrorCallback = Callable[[DocmarkError], None]

# Letter-sized sheet at 96 dpi, used when markup has no intrinsic size.
DEFAULT_FLOW_CONTAINER = ContainerSize(816, 1056)


@dataclass(frozen=True)
class PagePreview:
    page: Page
    container: ContainerSize
    overlay: OverlayDescription


def _log_error(error: DocmarkError) -> None:
    logger.warning("%s", error.message)


@dataclass
class NormalizedDocument:
    kind: ClassVar[DocumentKind] = DocumentKind.UNSUPPORTED
    supports_pixels: ClassVar[bool] = False

    pages: List[Page] = field(default_factory=list)
    source: Optional[UploadedBuffer] = None
    error: Optional[DocmarkError] = None

    @property
    def page_count(self) -> int:
        return len(self.pages)

    def container_for(self, index: int, container: Optional[ContainerSize] = None) -> ContainerSize:
        page = self.pages[index]
        if isinstance(page, RasterPage):
            return ContainerSize(page.width, page.height)
        return container or DEFAULT_FLOW_CONTAINER

    def render(self, index: int, spec: WatermarkSpec, container: Optional[ContainerSize] = None) -> PagePreview:
        """Pair page ``index`` (0-based) with the overlay drawn over it."""
        if not 0 <= index < self.page_count:
            raise IndexError(f"page index {index} out of range (0..{self.page_count - 1})")
        size = self.container_for(index, container)
        return PagePreview(page=self.pages[index], container=size, overlay=render_overlay(spec, size))

    def export(
        self,
        spec: WatermarkSpec,
        compositor: ExportCompositor,
        *,
        scale: Optional[float] = None,
        on_error: Optional[ErrorCallback] = None,
    ) -> List[ExportResult]:
        return [NOT_APPLICABLE]

    def release(self) -> None:
        for page in self.pages:
            page.release()


@dataclass
class UnsupportedDocument(NormalizedDocument):
    kind: ClassVar[DocumentKind] = DocumentKind.UNSUPPORTED


@dataclass
class FlowTextDocument(NormalizedDocument):
    kind: ClassVar[DocumentKind] = DocumentKind.FLOW_TEXT

    def export(self, spec, compositor, *, scale=None, on_error=None) -> List[ExportResult]:
        return [NOT_APPLICABLE for _ in self.pages]


@dataclass
class FlowTableDocument(FlowTextDocument):
    kind: ClassVar[DocumentKind] = DocumentKind.FLOW_TABLE


@dataclass
class RasterDocument(NormalizedDocument):
    kind: ClassVar[DocumentKind] = DocumentKind.RASTER
    supports_pixels: ClassVar[bool] = True

    def _target_scale(self, scale: Optional[float]) -> Optional[float]:
        # Images are exported at their own resolution.
        return None

    def export(
        self,
        spec: WatermarkSpec,
        compositor: ExportCompositor,
        *,
        scale: Optional[float] = None,
        on_error: Optional[ErrorCallback] = None,
    ) -> List[ExportResult]:
        report = on_error or _log_error
        wanted = set(selected_pages(spec.page_range, self.page_count))
        results: List[ExportResult] = []

        for page in self.pages:
            if page.number not in wanted:
                continue
            try:
                results.append(compositor.export_page(page, spec, scale=self._target_scale(scale)))
            except RasterizeError as exc:
                report(exc)
        return results


@dataclass
class PaginatedDocument(RasterDocument):
    kind: ClassVar[DocumentKind] = DocumentKind.PAGINATED

    def _target_scale(self, scale: Optional[float]) -> Optional[float]:
        return scale


VARIANTS = {
    variant.kind: variant
    for variant in (
        UnsupportedDocument,
        FlowTextDocument,
        FlowTableDocument,
        RasterDocument,
        PaginatedDocument,
    )
}
