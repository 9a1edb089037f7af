from __future__ import annotations

import base64
import time
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple, Union

from docmark.models import Anchor, GeneratedStyle, StyleMode, WatermarkSpec
from docmark.models.watermark import OPACITY_MAX, OPACITY_MIN

INITIAL_FONTS = ("Helvetica", "Arial", "Times New Roman")
VARIANT_FONTS = ("Helvetica", "Arial", "Times New Roman", "Georgia", "Verdana")


@dataclass(frozen=True)
class _StyleBounds:
    fonts: Sequence[str]
    size: Tuple[int, int]  # base, span
    saturation: Tuple[int, int]
    lightness: Tuple[int, int]
    opacity: Tuple[float, int]  # base, span in hundredths
    rotation: Tuple[int, int]
    offset: Tuple[int, int]


_BOUNDS = {
    StyleMode.INITIAL: _StyleBounds(
        fonts=INITIAL_FONTS,
        size=(30, 40),
        saturation=(50, 30),
        lightness=(30, 40),
        opacity=(0.15, 45),
        rotation=(-45, 90),
        offset=(-10, 20),
    ),
    StyleMode.VARIANT: _StyleBounds(
        fonts=VARIANT_FONTS,
        size=(25, 50),
        saturation=(40, 40),
        lightness=(25, 50),
        opacity=(0.12, 48),
        rotation=(-90, 180),
        offset=(-15, 30),
    ),
}


def _to_int32(value: int) -> int:
    value &= 0xFFFFFFFF
    return value - 0x100000000 if value & 0x80000000 else value


def rolling_hash(seed: str) -> int:
    """Fold the base64 form of ``seed`` into a signed 32-bit integer.

    Each step computes ``(h << 5) - h + c`` and wraps to 32 bits, so the
    result matches other ports of the generator bit for bit.
    """
    encoded = base64.b64encode(seed.encode("utf-8")).decode("ascii")
    h = 0
    for char in encoded:
        h = _to_int32(((h << 5) - h) + ord(char))
    return h


def build_seed(
    text: str,
    anchor: Union[Anchor, str],
    document_id: str,
    user_id: str,
    nonce: Optional[Union[str, int]] = None,
) -> str:
    anchor_value = Anchor(anchor).value
    parts = [text, anchor_value, str(document_id), str(user_id)]
    if nonce is not None:
        parts.append(str(nonce))
    return "|".join(parts)


def generate(
    text: str,
    anchor: Union[Anchor, str],
    document_id: str,
    user_id: str,
    nonce: Optional[Union[str, int]] = None,
) -> GeneratedStyle:
    """Derive a watermark style from its seed.

    Without a nonce the style is the "initial" one for this text, anchor,
    document and user. Supplying a nonce switches to the wider variant
    ranges used by "regenerate variant".
    """
    seed = build_seed(text, anchor, document_id, user_id, nonce)
    mode = StyleMode.INITIAL if nonce is None else StyleMode.VARIANT
    bounds = _BOUNDS[mode]
    m = abs(rolling_hash(seed))

    hue = m % 360
    saturation = bounds.saturation[0] + m % bounds.saturation[1]
    lightness = bounds.lightness[0] + m % bounds.lightness[1]
    opacity = bounds.opacity[0] + (m % bounds.opacity[1]) / 100

    return GeneratedStyle(
        font_family=bounds.fonts[m % len(bounds.fonts)],
        font_size=bounds.size[0] + m % bounds.size[1],
        color=f"hsl({hue}, {saturation}%, {lightness}%)",
        opacity=max(OPACITY_MIN, min(OPACITY_MAX, opacity)),
        rotation=bounds.rotation[0] + m % bounds.rotation[1],
        offset_x=bounds.offset[0] + m % bounds.offset[1],
        offset_y=bounds.offset[0] + m % bounds.offset[1],
        seed=seed,
        mode=mode,
    )


def regenerate(
    text: str,
    anchor: Union[Anchor, str],
    document_id: str,
    user_id: str,
) -> GeneratedStyle:
    return generate(text, anchor, document_id, user_id, nonce=int(time.time() * 1000))


def apply_style(spec: WatermarkSpec, style: GeneratedStyle) -> WatermarkSpec:
    """Overwrite the five style fields of ``spec``.

    Text, anchor and the user's offsets are kept; the generated offsets only
    travel with the ``GeneratedStyle`` record.
    """
    return spec.update(
        font_family=style.font_family,
        font_size=style.font_size,
        color=style.color,
        opacity=style.opacity,
        rotation=style.rotation,
    )
