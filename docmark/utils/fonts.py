from pathlib import Path
from typing import Dict, Optional, Sequence, Tuple

from PIL import ImageFont

# Candidate font files per family, tried in order (Windows, macOS, Linux names).
FONT_CANDIDATES: Dict[str, Sequence[str]] = {
    "helvetica": ("Helvetica.ttc", "arial.ttf", "LiberationSans-Regular.ttf", "DejaVuSans.ttf"),
    "arial": ("arial.ttf", "Arial.ttf", "LiberationSans-Regular.ttf", "DejaVuSans.ttf"),
    "times new roman": ("times.ttf", "Times New Roman.ttf", "LiberationSerif-Regular.ttf", "DejaVuSerif.ttf"),
    "georgia": ("georgia.ttf", "Georgia.ttf", "DejaVuSerif.ttf"),
    "verdana": ("verdana.ttf", "Verdana.ttf", "DejaVuSans.ttf"),
}
FALLBACK_FONTS = ("DejaVuSans.ttf", "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf")


class FontResolver:
    """Maps a CSS-style font family name to a Pillow font, caching per size."""

    def __init__(self, font_dir: Optional[Path] = None) -> None:
        self._font_dir = Path(font_dir) if font_dir else None
        self._cached_fonts: Dict[Tuple[str, int], ImageFont.FreeTypeFont] = {}

    def get(self, family: str, size: int) -> ImageFont.FreeTypeFont:
        key = (family.lower(), size)
        if key not in self._cached_fonts:
            self._cached_fonts[key] = self._load(family, size)
        return self._cached_fonts[key]

    def _candidates(self, family: str) -> Sequence[str]:
        names = list(FONT_CANDIDATES.get(family.lower(), ()))
        names.append(f"{family}.ttf")
        if self._font_dir:
            names = [str(self._font_dir / name) for name in names] + names
        return [*names, *FALLBACK_FONTS]

    def _load(self, family: str, size: int) -> ImageFont.FreeTypeFont:
        for name in self._candidates(family):
            try:
                return ImageFont.truetype(name, size)
            except OSError:
                continue
        return ImageFont.load_default(size=size)

    def clear(self) -> None:
        self._cached_fonts.clear()
