import base64
import random
import re
import string

import pytest
from PIL import ImageColor

from docmark.models import Anchor, StyleMode, WatermarkSpec
from docmark.services.style_generator import (
    INITIAL_FONTS,
    VARIANT_FONTS,
    apply_style,
    build_seed,
    generate,
    rolling_hash,
)

HSL = re.compile(r"hsl\((\d+), (\d+)%, (\d+)%\)")


def _reference_hash(seed: str) -> int:
    """Java-style String.hashCode over the base64 text, computed with big ints."""
    encoded = base64.b64encode(seed.encode("utf-8")).decode("ascii")
    n = len(encoded)
    value = sum(ord(c) * 31 ** (n - 1 - i) for i, c in enumerate(encoded)) % 2**32
    return value - 2**32 if value >= 2**31 else value


def _random_text(rng: random.Random) -> str:
    return "".join(rng.choice(string.ascii_letters + string.digits + " éü") for _ in range(rng.randint(0, 30)))


def test_seed_layout():
    assert build_seed("DRAFT", Anchor.TOP, "d1", "u1") == "DRAFT|Top|d1|u1"
    assert build_seed("DRAFT", "Centered", "d1", "u1", nonce=1700000000000) == "DRAFT|Centered|d1|u1|1700000000000"


def test_rolling_hash_matches_reference_and_stays_32_bit():
    rng = random.Random(7)
    for _ in range(200):
        seed = _random_text(rng) + "|Centered|doc|user"
        h = rolling_hash(seed)
        assert h == _reference_hash(seed)
        assert -(2**31) <= h < 2**31
    assert rolling_hash("") == 0


def test_generate_is_deterministic():
    first = generate("CONFIDENTIAL", Anchor.CENTERED, "doc-42", "user-7")
    second = generate("CONFIDENTIAL", Anchor.CENTERED, "doc-42", "user-7")
    assert first == second
    assert first.model_dump_json() == second.model_dump_json()
    assert first.mode is StyleMode.INITIAL


def test_distinct_nonces_give_distinct_variants():
    styles = {
        generate("CONFIDENTIAL", Anchor.CENTERED, "doc-42", "user-7", nonce=nonce).model_dump_json(exclude={"seed"})
        for nonce in (1700000000000, 1700000000001, 1700000000777, 1700000123456)
    }
    assert len(styles) > 1


def test_anchor_changes_the_seed():
    top = generate("CONFIDENTIAL", Anchor.TOP, "doc-42", "user-7")
    bottom = generate("CONFIDENTIAL", Anchor.BOTTOM, "doc-42", "user-7")
    assert top.seed != bottom.seed


@pytest.mark.parametrize(
    "nonce, fonts, size, opacity, rotation, offset",
    [
        (None, INITIAL_FONTS, (30, 69), (0.15, 0.59), (-45, 44), (-10, 9)),
        ("variant", VARIANT_FONTS, (25, 74), (0.12, 0.59), (-90, 89), (-15, 14)),
    ],
)
def test_generated_values_stay_within_bounds(nonce, fonts, size, opacity, rotation, offset):
    rng = random.Random(1234)
    for i in range(500):
        style = generate(
            _random_text(rng),
            rng.choice(list(Anchor)),
            f"doc-{rng.randint(0, 10**6)}",
            f"user-{rng.randint(0, 10**6)}",
            nonce=None if nonce is None else f"{nonce}-{i}",
        )
        hue, sat, light = map(int, HSL.fullmatch(style.color).groups())
        assert 0 <= hue < 360
        assert style.font_family in fonts
        assert size[0] <= style.font_size <= size[1]
        assert opacity[0] - 1e-9 <= style.opacity <= opacity[1] + 1e-9
        assert 0.1 <= style.opacity <= 1.0
        assert rotation[0] <= style.rotation <= rotation[1]
        assert offset[0] <= style.offset_x <= offset[1]
        assert style.offset_x == style.offset_y
        if nonce is None:
            assert 50 <= sat < 80 and 30 <= light < 70
        else:
            assert 40 <= sat < 80 and 25 <= light < 75


def test_generated_color_is_drawable():
    style = generate("CONFIDENTIAL", Anchor.CENTERED, "doc-42", "user-7")
    assert len(ImageColor.getrgb(style.color)) == 3


def test_apply_style_overwrites_style_fields_only():
    spec = WatermarkSpec(
        text="SECRET",
        anchor=Anchor.BOTTOM_RIGHT,
        font_family="Courier",
        page_range="2-",
        offset_x=42,
        offset_y=-33,
    )
    style = generate(spec.text, spec.anchor, "doc-42", "user-7", nonce=99)
    updated = apply_style(spec, style)

    assert updated.text == "SECRET"
    assert updated.anchor is Anchor.BOTTOM_RIGHT
    assert updated.page_range == "2-"
    assert (updated.font_family, updated.font_size, updated.color) == (style.font_family, style.font_size, style.color)
    assert (updated.opacity, updated.rotation) == (style.opacity, style.rotation)
    assert (updated.offset_x, updated.offset_y) == (42, -33)
