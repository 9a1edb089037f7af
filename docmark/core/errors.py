from __future__ import annotations


class DocmarkError(Exception):
    """Base error; ``message`` is meant to be shown to the user as-is."""

    def __init__(self, message: str, *, detail: dict | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.detail = detail or {}


class DecodeError(DocmarkError):
    """The uploaded bytes could not be decoded as their detected format."""


class RasterizeError(DocmarkError):
    """A drawing surface could not be produced while compositing a page."""


class EmptyInputError(DocmarkError):
    """No file was selected, or the watermark text is empty."""


class StyleLockedError(DocmarkError):
    """Style generation was requested while the session is locked."""


class ExportBlockedError(DocmarkError):
    """Export is disabled: the session is locked and no style was generated."""


class PageRangeError(DocmarkError, ValueError):
    """A page range such as ``"1-3,7-"`` could not be parsed."""
