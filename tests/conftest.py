from io import BytesIO

import pytest
from docx import Document as DocxDocument
from openpyxl import Workbook
from PIL import Image
from reportlab.pdfgen import canvas

from docmark.core.config import Settings
from docmark.models import DocumentRef, UploadedBuffer
from docmark.storage.settings_store import MemoryStore


def make_pdf(page_widths=(210, 220, 230), height=300) -> bytes:
    """Build a PDF whose pages differ in width so their order can be checked."""
    packet = BytesIO()
    c = canvas.Canvas(packet)
    for number, width in enumerate(page_widths, start=1):
        c.setPageSize((width, height))
        c.setFont("Helvetica", 14)
        c.drawString(20, height - 40, f"Page {number}")
        c.showPage()
    c.save()
    return packet.getvalue()


def make_image(width=400, height=300, fmt="PNG", color=(255, 255, 255)) -> bytes:
    buffer = BytesIO()
    Image.new("RGB", (width, height), color).save(buffer, format=fmt)
    return buffer.getvalue()


def make_docx(*paragraphs: str) -> bytes:
    document = DocxDocument()
    document.add_heading("Report", level=1)
    for text in paragraphs:
        document.add_paragraph(text)
    buffer = BytesIO()
    document.save(buffer)
    return buffer.getvalue()


def make_xlsx() -> bytes:
    workbook = Workbook()
    first = workbook.active
    first.title = "Budget"
    first.append(["Item", "Cost"])
    first.append(["Paper", 12])
    second = workbook.create_sheet("Hidden")
    second.append(["ignored sheet"])
    buffer = BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


@pytest.fixture
def settings(tmp_path) -> Settings:
    s = Settings(
        base_dir=tmp_path,
        preview_scale=1.0,
        export_scale=1.0,
        download_delay_ms=500,
        font_dir=None,
    )
    s.configure_paths()
    return s


@pytest.fixture
def store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def document_ref() -> DocumentRef:
    return DocumentRef(id="doc-42", title="Quarterly report", type="pdf")


@pytest.fixture
def pdf_buffer() -> UploadedBuffer:
    return UploadedBuffer(name="report.pdf", data=make_pdf(), mime_hint="application/pdf")


@pytest.fixture
def png_buffer() -> UploadedBuffer:
    return UploadedBuffer(name="scan.png", data=make_image(), mime_hint="image/png")


@pytest.fixture
def docx_buffer() -> UploadedBuffer:
    return UploadedBuffer(
        name="memo.docx",
        data=make_docx("First paragraph", "Second <paragraph>"),
        mime_hint="application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    )


@pytest.fixture
def xlsx_buffer() -> UploadedBuffer:
    return UploadedBuffer(name="budget.xlsx", data=make_xlsx())


@pytest.fixture
def unknown_buffer() -> UploadedBuffer:
    return UploadedBuffer(name="archive.xyz", data=b"\x00\x01binary payload", mime_hint="application/octet-stream")
