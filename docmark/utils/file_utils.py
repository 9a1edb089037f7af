from pathlib import Path
from typing import List, Optional, Tuple

from docmark.core.errors import PageRangeError


def split_name(filename: str) -> Tuple[str, str]:
    """Return ``(stem, suffix)`` of a bare file name, suffix including the dot."""
    path = Path(filename or "document")
    return path.stem, path.suffix


def parse_page_ranges(ranges: Optional[str], total_pages: int) -> List[Tuple[int, int]]:
    """
    Turn a range string such as ``"1-3, 5, 7-"`` into ``(start, end)`` pairs.

    Open ends run to the last page, ends past the last page are clamped and
    segments starting after it are dropped.
    """
    if not ranges or not ranges.strip():
        return [(1, total_pages)] if total_pages else []

    result: List[Tuple[int, int]] = []
    segments = [segment.strip() for segment in ranges.split(",") if segment.strip()]

    for segment in segments:
        try:
            if "-" in segment:
                start_str, end_str = segment.split("-", 1)
                start = int(start_str) if start_str.strip() else 1
                end = int(end_str) if end_str.strip() else None
            else:
                start = end = int(segment)
        except ValueError as exc:
            raise PageRangeError(f"Invalid page range: {segment}") from exc

        if start < 1 or (end is not None and start > end):
            raise PageRangeError(f"Invalid page range: {segment}")
        if start > total_pages:
            continue
        result.append((start, total_pages if end is None else min(end, total_pages)))

    return result


def selected_pages(ranges: Optional[str], total_pages: int) -> List[int]:
    """Page numbers covered by ``ranges``, ascending and without duplicates."""
    pages = set()
    for start, end in parse_page_ranges(ranges, total_pages):
        pages.update(range(start, end + 1))
    return sorted(pages)
