from __future__ import annotations

from typing import Dict, Tuple, Union

from docmark.models import Anchor, ContainerSize, HorizontalAlign, Placement, RenderMode, VerticalAlign

NEAR = 0.1
MID = 0.5
FAR = 0.9

# anchor -> (x fraction, y fraction, horizontal alignment, vertical alignment)
_ANCHOR_TABLE: Dict[Anchor, Tuple[float, float, HorizontalAlign, VerticalAlign]] = {
    Anchor.TOP_LEFT: (NEAR, NEAR, HorizontalAlign.LEFT, VerticalAlign.TOP),
    Anchor.TOP: (MID, NEAR, HorizontalAlign.CENTER, VerticalAlign.TOP),
    Anchor.TOP_RIGHT: (FAR, NEAR, HorizontalAlign.RIGHT, VerticalAlign.TOP),
    Anchor.LEFT: (NEAR, MID, HorizontalAlign.LEFT, VerticalAlign.MIDDLE),
    Anchor.CENTERED: (MID, MID, HorizontalAlign.CENTER, VerticalAlign.MIDDLE),
    Anchor.RIGHT: (FAR, MID, HorizontalAlign.RIGHT, VerticalAlign.MIDDLE),
    Anchor.BOTTOM_LEFT: (NEAR, FAR, HorizontalAlign.LEFT, VerticalAlign.BOTTOM),
    Anchor.BOTTOM: (MID, FAR, HorizontalAlign.CENTER, VerticalAlign.BOTTOM),
    Anchor.BOTTOM_RIGHT: (FAR, FAR, HorizontalAlign.RIGHT, VerticalAlign.BOTTOM),
}

_CSS_VERTICAL = {
    VerticalAlign.TOP: "top",
    VerticalAlign.MIDDLE: "center",
    VerticalAlign.BOTTOM: "bottom",
}


def resolve(
    anchor: Union[Anchor, str],
    container: ContainerSize,
    mode: RenderMode = RenderMode.RASTER,
) -> Placement:
    """Locate ``anchor`` inside ``container``.

    Vector placements are percentages of the container, raster placements are
    pixels. The returned point is also the rotation pivot.
    """
    fx, fy, h_align, v_align = _ANCHOR_TABLE[Anchor(anchor)]

    if mode is RenderMode.VECTOR:
        x, y = fx * 100, fy * 100
    else:
        x, y = fx * container.width, fy * container.height

    return Placement(
        x=x,
        y=y,
        horizontal_align=h_align,
        vertical_align=v_align,
        transform_origin=f"{h_align.value} {_CSS_VERTICAL[v_align]}",
        mode=mode,
    )
