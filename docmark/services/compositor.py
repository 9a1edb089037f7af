"""
Export compositor.

Burns the watermark into a page's pixels with Pillow:

- the page surface is copied onto a fresh RGBA surface at the export scale
- the text is drawn on its own transparent tile, aligned per the anchor
- the tile is rotated around the anchor point (clockwise, like the overlay)
- the rotated tile is alpha-composited over the page and encoded
"""

from __future__ import annotations

import math
from io import BytesIO
from typing import Optional, Tuple, Union

from PIL import Image, ImageColor, ImageDraw

from docmark.core.errors import RasterizeError
from docmark.core.logging import configure_logging
from docmark.models import (
    NOT_APPLICABLE,
    ContainerSize,
    HorizontalAlign,
    ImageBytes,
    MarkupPage,
    NotApplicable,
    RasterPage,
    RenderMode,
    VerticalAlign,
    WatermarkSpec,
)
from docmark.services.anchor import resolve
from docmark.utils.fonts import FontResolver

logger = configure_logging("compositor")

_ANCHOR_FRACTION_X = {HorizontalAlign.LEFT: 0.0, HorizontalAlign.CENTER: 0.5, HorizontalAlign.RIGHT: 1.0}
_ANCHOR_FRACTION_Y = {VerticalAlign.TOP: 0.0, VerticalAlign.MIDDLE: 0.5, VerticalAlign.BOTTOM: 1.0}


class ExportCompositor:
    def __init__(self, fonts: Optional[FontResolver] = None) -> None:
        self.fonts = fonts or FontResolver()

    def export_page(
        self,
        page: Union[RasterPage, MarkupPage],
        spec: WatermarkSpec,
        scale: Optional[float] = None,
    ) -> Union[ImageBytes, NotApplicable]:
        """Return the encoded, watermarked page, or ``NOT_APPLICABLE`` for markup pages.

        ``scale`` is the target render scale; ``None`` keeps the page's own scale.
        """
        if not isinstance(page, RasterPage):
            return NOT_APPLICABLE

        factor = (scale / page.scale) if scale else 1.0
        try:
            surface = self._surface(page, factor)
            if spec.text:
                surface = self._burn_in(surface, spec, factor)
            return self._encode(page, surface)
        except RasterizeError:
            raise
        except (OSError, ValueError, MemoryError) as exc:
            raise RasterizeError(
                f"Could not composite page {page.number}: {exc}",
                detail={"page": page.number},
            ) from exc

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    @staticmethod
    def _surface(page: RasterPage, factor: float) -> Image.Image:
        width = max(1, round(page.width * factor))
        height = max(1, round(page.height * factor))

        source = page.image if page.image.mode == "RGBA" else page.image.convert("RGBA")
        if (width, height) != source.size:
            source = source.resize((width, height), Image.Resampling.LANCZOS)

        surface = Image.new("RGBA", (width, height), (255, 255, 255, 255))
        surface.alpha_composite(source)
        return surface

    def _text_tile(self, spec: WatermarkSpec, font_size: int, align: HorizontalAlign) -> Image.Image:
        font = self.fonts.get(spec.font_family, font_size)
        try:
            rgb = ImageColor.getrgb(spec.color)[:3]
        except ValueError as exc:
            raise RasterizeError(f"Unsupported watermark color: {spec.color}") from exc
        alpha = round(spec.opacity * 255)

        probe = ImageDraw.Draw(Image.new("RGBA", (1, 1), (0, 0, 0, 0)))
        left, top, right, bottom = probe.multiline_textbbox((0, 0), spec.text, font=font, align=align.value)
        tile = Image.new("RGBA", (max(1, right - left), max(1, bottom - top)), (0, 0, 0, 0))
        ImageDraw.Draw(tile).multiline_text(
            (-left, -top), spec.text, font=font, fill=(*rgb, alpha), align=align.value
        )
        return tile

    def _burn_in(self, surface: Image.Image, spec: WatermarkSpec, factor: float) -> Image.Image:
        placement = resolve(spec.anchor, ContainerSize(*surface.size), RenderMode.RASTER)
        font_size = max(1, round(spec.font_size * factor))
        tile = self._text_tile(spec, font_size, placement.horizontal_align)

        anchor_x = tile.width * _ANCHOR_FRACTION_X[placement.horizontal_align]
        anchor_y = tile.height * _ANCHOR_FRACTION_Y[placement.vertical_align]
        pivot = (placement.x + spec.offset_x * factor, placement.y + spec.offset_y * factor)

        rotated, radius = self._rotate_about(tile, (anchor_x, anchor_y), spec.rotation)

        layer = Image.new("RGBA", surface.size, (0, 0, 0, 0))
        layer.paste(rotated, (round(pivot[0] - radius), round(pivot[1] - radius)))
        return Image.alpha_composite(surface, layer)

    @staticmethod
    def _rotate_about(tile: Image.Image, point: Tuple[float, float], degrees: int) -> Tuple[Image.Image, int]:
        """Rotate ``tile`` clockwise about ``point``; the point ends up at the canvas centre."""
        px, py = point
        radius = math.ceil(
            max(math.hypot(cx - px, cy - py) for cx in (0, tile.width) for cy in (0, tile.height))
        ) + 1

        canvas = Image.new("RGBA", (radius * 2, radius * 2), (0, 0, 0, 0))
        canvas.paste(tile, (round(radius - px), round(radius - py)))
        if degrees % 360:
            canvas = canvas.rotate(-degrees, resample=Image.Resampling.BICUBIC, center=(radius, radius))
        return canvas, radius

    @staticmethod
    def _encode(page: RasterPage, surface: Image.Image) -> ImageBytes:
        buffer = BytesIO()
        if page.source_format == "JPEG":
            image_format = "JPEG"
            surface.convert("RGB").save(buffer, format=image_format, quality=95)
        else:
            image_format = "PNG"
            surface.save(buffer, format=image_format)

        logger.debug("Encoded page %s as %s (%sx%s)", page.number, image_format, *surface.size)
        return ImageBytes(
            page_number=page.number,
            data=buffer.getvalue(),
            format=image_format,
            width=surface.width,
            height=surface.height,
        )
