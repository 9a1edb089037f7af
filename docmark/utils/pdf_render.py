from io import BytesIO

import fitz  # PyMuPDF
from PIL import Image
from pypdf import PdfReader


def count_pdf_pages(data: bytes) -> int:
    """Read the page count from the PDF trailer without rendering anything."""
    reader = PdfReader(BytesIO(data))
    return len(reader.pages)


def open_pdf(data: bytes) -> fitz.Document:
    return fitz.open(stream=data, filetype="pdf")


def render_page(document: fitz.Document, page_number: int, zoom: float = 2.0) -> Image.Image:
    """
    Rasterize one page of an open PDF to an RGB Pillow image.

    Args:
        document: PyMuPDF document opened from the uploaded bytes.
        page_number: Page number (1-indexed).
        zoom: Scale factor relative to 72 dpi.
    """
    if page_number < 1:
        raise ValueError("page_number must be >= 1")
    if page_number > document.page_count:
        raise ValueError("page_number exceeds document pages")

    page = document.load_page(page_number - 1)
    matrix = fitz.Matrix(zoom, zoom)
    pixmap = page.get_pixmap(matrix=matrix, alpha=False)

    if pixmap.n != 3:  # pragma: no cover - grey or CMYK sources
        pixmap = fitz.Pixmap(fitz.csRGB, pixmap)

    return Image.frombytes("RGB", (pixmap.width, pixmap.height), pixmap.samples)
