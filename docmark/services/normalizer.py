from __future__ import annotations

import asyncio
import html
import mimetypes
import zipfile
from io import BytesIO
from typing import Callable, List, Optional

from docx import Document as DocxDocument
from markdown import markdown
from markdown.extensions import Extension
from openpyxl import load_workbook
from PIL import Image, UnidentifiedImageError

from docmark.core.config import Settings, get_settings
from docmark.core.errors import DecodeError, DocmarkError, EmptyInputError
from docmark.core.logging import configure_logging
from docmark.models import DocumentKind, MarkupPage, RasterPage, UploadedBuffer
from docmark.services.documents import (
    FlowTableDocument,
    FlowTextDocument,
    NormalizedDocument,
    PaginatedDocument,
    RasterDocument,
    UnsupportedDocument,
)
from docmark.utils.pdf_render import count_pdf_pages, open_pdf, render_page

logger = configure_logging("normalizer")

IMAGE_EXTENSIONS = {"png", "jpg", "jpeg", "gif", "bmp", "webp", "tif", "tiff"}
RICH_TEXT_EXTENSIONS = {"docx", "txt", "md", "markdown"}
SPREADSHEET_EXTENSIONS = {"xlsx", "xlsm"}

RICH_TEXT_MIME_TYPES = {
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "text/plain",
    "text/markdown",
}
SPREADSHEET_MIME_TYPES = {
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    "application/vnd.ms-excel.sheet.macroenabled.12",
}

_MAGIC_IMAGE_PREFIXES = (b"\x89PNG\r\n\x1a\n", b"\xff\xd8\xff", b"GIF87a", b"GIF89a", b"BM")


class EscapeHtml(Extension):
    """Render raw HTML in markdown sources as text instead of passing it through."""

    def extendMarkdown(self, md):
        md.preprocessors.deregister("html_block")
        md.inlinePatterns.deregister("html")


def detect_kind(buffer: UploadedBuffer) -> DocumentKind:
    """Classify an upload by magic bytes first, then its mime hint, then its extension."""
    head = buffer.data[:16]
    if head.startswith(b"%PDF"):
        return DocumentKind.PAGINATED
    if head.startswith(_MAGIC_IMAGE_PREFIXES):
        return DocumentKind.RASTER

    mime = (buffer.mime_hint or "").lower() or (mimetypes.guess_type(buffer.name)[0] or "").lower()
    extension = buffer.extension

    if mime.endswith("pdf") or extension == "pdf":
        return DocumentKind.PAGINATED
    if mime.startswith("image/") or extension in IMAGE_EXTENSIONS:
        return DocumentKind.RASTER
    if mime in SPREADSHEET_MIME_TYPES or extension in SPREADSHEET_EXTENSIONS:
        return DocumentKind.FLOW_TABLE
    if mime in RICH_TEXT_MIME_TYPES or extension in RICH_TEXT_EXTENSIONS:
        return DocumentKind.FLOW_TEXT
    return DocumentKind.UNSUPPORTED


class FormatNormalizer:
    """Decodes uploaded buffers into page-by-page normalized documents.

    Decode failures never propagate: they go to ``on_error`` and the document
    degrades to the unsupported kind with no pages.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        on_error: Optional[Callable[[DocmarkError], None]] = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.on_error = on_error

    async def normalize(self, buffer: UploadedBuffer) -> NormalizedDocument:
        if buffer is None or not buffer.data:
            raise EmptyInputError("No file selected or the file is empty.")

        kind = detect_kind(buffer)
        logger.info("Normalizing %s (%s bytes) as %s", buffer.name, buffer.size_bytes, kind.value)

        decoders = {
            DocumentKind.PAGINATED: self._decode_pdf,
            DocumentKind.RASTER: self._decode_image,
            DocumentKind.FLOW_TEXT: self._decode_rich_text,
            DocumentKind.FLOW_TABLE: self._decode_spreadsheet,
        }
        decoder = decoders.get(kind)
        if decoder is None:
            return UnsupportedDocument(source=buffer)

        try:
            return await decoder(buffer)
        except DecodeError as exc:
            return self._degrade(buffer, exc)
        except Exception as exc:  # third-party decoders raise a wide variety of errors
            return self._degrade(buffer, DecodeError(f"Could not read {buffer.name}: {exc}"))

    def _degrade(self, buffer: UploadedBuffer, error: DecodeError) -> NormalizedDocument:
        logger.warning("Decode failed for %s: %s", buffer.name, error.message)
        if self.on_error:
            self.on_error(error)
        return UnsupportedDocument(source=buffer, error=error)

    # ------------------------------------------------------------------
    # Paginated
    # ------------------------------------------------------------------
    async def _decode_pdf(self, buffer: UploadedBuffer) -> NormalizedDocument:
        page_count = count_pdf_pages(buffer.data)
        if page_count < 1:
            raise DecodeError(f"{buffer.name} has no pages.")

        scale = self.settings.preview_scale
        pages: List[RasterPage] = []
        with open_pdf(buffer.data) as document:
            # One page at a time, in source order.
            for number in range(1, page_count + 1):
                image = await asyncio.to_thread(render_page, document, number, scale)
                pages.append(RasterPage(number=number, image=image, scale=scale, source_format="PDF"))

        return PaginatedDocument(pages=pages, source=buffer)

    # ------------------------------------------------------------------
    # Images
    # ------------------------------------------------------------------
    async def _decode_image(self, buffer: UploadedBuffer) -> NormalizedDocument:
        try:
            image = Image.open(BytesIO(buffer.data))
            image.load()
        except (UnidentifiedImageError, OSError) as exc:
            raise DecodeError(f"{buffer.name} is not a readable image.") from exc

        source_format = "JPEG" if image.format == "JPEG" else "PNG"
        return RasterDocument(
            pages=[RasterPage(number=1, image=image, scale=1.0, source_format=source_format)],
            source=buffer,
        )

    # ------------------------------------------------------------------
    # Flow formats
    # ------------------------------------------------------------------
    async def _decode_rich_text(self, buffer: UploadedBuffer) -> NormalizedDocument:
        if buffer.extension in {"md", "markdown"} or buffer.mime_hint == "text/markdown":
            text = buffer.data.decode("utf-8", errors="replace")
            fragment = markdown(text, extensions=["tables", "fenced_code", EscapeHtml()])
        elif buffer.extension == "txt" or (buffer.mime_hint or "").startswith("text/"):
            text = buffer.data.decode("utf-8", errors="replace")
            fragment = f"<pre>{html.escape(text)}</pre>"
        else:
            fragment = self._docx_to_html(buffer)

        return FlowTextDocument(
            pages=[MarkupPage(number=1, html=f'<div class="flow-text">{fragment}</div>')],
            source=buffer,
        )

    @staticmethod
    def _docx_to_html(buffer: UploadedBuffer) -> str:
        try:
            document = DocxDocument(BytesIO(buffer.data))
        except (zipfile.BadZipFile, KeyError, ValueError) as exc:
            raise DecodeError(f"{buffer.name} is not a readable Word document.") from exc

        parts: List[str] = []
        for paragraph in document.paragraphs:
            text = html.escape(paragraph.text)
            style = (paragraph.style.name if paragraph.style is not None else "") or ""
            if style.startswith("Heading") and style[-1:].isdigit():
                level = min(int(style[-1]), 6)
                parts.append(f"<h{level}>{text}</h{level}>")
            elif text.strip():
                parts.append(f"<p>{text}</p>")
        return "\n".join(parts)

    async def _decode_spreadsheet(self, buffer: UploadedBuffer) -> NormalizedDocument:
        try:
            workbook = load_workbook(BytesIO(buffer.data), read_only=True, data_only=True)
        except (zipfile.BadZipFile, KeyError, ValueError, OSError) as exc:
            raise DecodeError(f"{buffer.name} is not a readable spreadsheet.") from exc

        try:
            # Only the first sheet is shown; the others are ignored.
            sheet = workbook.worksheets[0]
            rows: List[str] = []
            for row in sheet.iter_rows(values_only=True):
                cells = "".join(
                    f"<td>{html.escape('' if value is None else str(value))}</td>" for value in row
                )
                rows.append(f"<tr>{cells}</tr>")
        finally:
            workbook.close()

        table = '<table class="flow-table">' + "".join(rows) + "</table>"
        return FlowTableDocument(pages=[MarkupPage(number=1, html=table)], source=buffer)
