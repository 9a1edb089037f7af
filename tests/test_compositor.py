from io import BytesIO

import pytest
from PIL import Image, ImageChops

from docmark.core.errors import RasterizeError
from docmark.models import NOT_APPLICABLE, Anchor, MarkupPage, RasterPage, WatermarkSpec
from docmark.services.compositor import ExportCompositor


def _page(width=400, height=300, scale=1.0, fmt="PNG") -> RasterPage:
    return RasterPage(number=1, image=Image.new("RGB", (width, height), "white"), scale=scale, source_format=fmt)


def _decode(result) -> Image.Image:
    return Image.open(BytesIO(result.data)).convert("RGB")


def _spec(**changes) -> WatermarkSpec:
    base = dict(text="WATERMARK", anchor=Anchor.CENTERED, opacity=1.0, rotation=0, font_size=40, color="#000000")
    base.update(changes)
    return WatermarkSpec(**base)


def test_markup_pages_are_not_applicable():
    result = ExportCompositor().export_page(MarkupPage(number=1, html="<p>x</p>"), _spec())
    assert result is NOT_APPLICABLE


def test_watermark_is_burned_in_at_the_anchor():
    page = _page()
    result = ExportCompositor().export_page(page, _spec(anchor=Anchor.TOP_LEFT))

    assert result.format == "PNG"
    assert (result.width, result.height) == (400, 300)
    changed = ImageChops.difference(_decode(result), page.image).getbbox()
    assert changed is not None
    left, top, right, bottom = changed
    # Flush to the top-left anchor at (40, 30).
    assert 36 <= left <= 48
    assert 26 <= top <= 40
    assert right > left and bottom > top


def test_right_aligned_text_ends_at_the_anchor():
    page = _page()
    result = ExportCompositor().export_page(page, _spec(anchor=Anchor.BOTTOM_RIGHT))
    left, top, right, bottom = ImageChops.difference(_decode(result), page.image).getbbox()
    assert 352 <= right <= 364
    assert 262 <= bottom <= 274


def test_offsets_move_the_watermark():
    page = _page()
    compositor = ExportCompositor()
    plain = ImageChops.difference(_decode(compositor.export_page(page, _spec())), page.image).getbbox()
    moved = ImageChops.difference(
        _decode(compositor.export_page(page, _spec(offset_x=20, offset_y=10))), page.image
    ).getbbox()
    assert moved[0] - plain[0] == pytest.approx(20, abs=2)
    assert moved[1] - plain[1] == pytest.approx(10, abs=2)


def test_rotation_changes_the_footprint():
    page = _page()
    compositor = ExportCompositor()
    flat = ImageChops.difference(_decode(compositor.export_page(page, _spec())), page.image).getbbox()
    tilted = ImageChops.difference(_decode(compositor.export_page(page, _spec(rotation=90))), page.image).getbbox()
    flat_w, flat_h = flat[2] - flat[0], flat[3] - flat[1]
    tilted_w, tilted_h = tilted[2] - tilted[0], tilted[3] - tilted[1]
    assert flat_w > flat_h
    assert tilted_h > tilted_w


def test_export_scale_resizes_the_surface():
    page = _page(200, 100, scale=1.0)
    result = ExportCompositor().export_page(page, _spec(), scale=2.0)
    assert (result.width, result.height) == (400, 200)


def test_jpeg_sources_stay_jpeg():
    result = ExportCompositor().export_page(_page(fmt="JPEG"), _spec())
    assert result.format == "JPEG"
    assert result.extension == "jpg"
    assert Image.open(BytesIO(result.data)).format == "JPEG"


def test_empty_text_leaves_page_unchanged():
    page = _page()
    result = ExportCompositor().export_page(page, _spec(text=""))
    assert ImageChops.difference(_decode(result), page.image).getbbox() is None


def test_low_opacity_blends_with_the_page():
    page = _page()
    result = ExportCompositor().export_page(page, _spec(opacity=0.1))
    darkest = min(_decode(result).convert("L").getdata())
    assert darkest > 180


def test_bad_color_raises_rasterize_error():
    with pytest.raises(RasterizeError):
        ExportCompositor().export_page(_page(), _spec(color="not-a-color"))
