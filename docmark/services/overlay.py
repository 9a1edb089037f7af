from __future__ import annotations

from typing import Dict

from docmark.models import (
    ContainerSize,
    HorizontalAlign,
    OverlayDescription,
    Placement,
    RenderMode,
    VerticalAlign,
    WatermarkSpec,
)
from docmark.services.anchor import resolve

_SHIFT_X = {HorizontalAlign.LEFT: "0%", HorizontalAlign.CENTER: "-50%", HorizontalAlign.RIGHT: "-100%"}
_SHIFT_Y = {VerticalAlign.TOP: "0%", VerticalAlign.MIDDLE: "-50%", VerticalAlign.BOTTOM: "-100%"}


def _css(spec: WatermarkSpec, placement: Placement) -> Dict[str, str]:
    shift = f"translate({_SHIFT_X[placement.horizontal_align]}, {_SHIFT_Y[placement.vertical_align]})"
    return {
        "position": "absolute",
        "left": f"calc({placement.x:g}% + {spec.offset_x}px)",
        "top": f"calc({placement.y:g}% + {spec.offset_y}px)",
        "transform": f"{shift} rotate({spec.rotation}deg)",
        "transform-origin": placement.transform_origin,
        "text-align": placement.horizontal_align.value,
        "opacity": f"{spec.opacity:g}",
        "color": spec.color,
        "font-family": spec.font_family,
        "font-size": f"{spec.font_size}px",
        "white-space": "pre",
        "pointer-events": "none",
        "user-select": "none",
    }


def render_overlay(spec: WatermarkSpec, container: ContainerSize) -> OverlayDescription:
    """Describe the watermark layer drawn over a page preview.

    Pure: the page content is never touched, so the caller can recompute
    this on every edit.
    """
    if not spec.text:
        return OverlayDescription.empty()

    placement = resolve(spec.anchor, container, RenderMode.VECTOR)
    absolute = resolve(spec.anchor, container, RenderMode.RASTER)

    return OverlayDescription(
        visible=True,
        text=spec.text,
        anchor=spec.anchor,
        placement=placement,
        left_px=absolute.x + spec.offset_x,
        top_px=absolute.y + spec.offset_y,
        rotation=spec.rotation,
        font_family=spec.font_family,
        font_size=spec.font_size,
        color=spec.color,
        opacity=spec.opacity,
        style=_css(spec, placement),
    )
