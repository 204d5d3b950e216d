import io
from pathlib import Path

import docx
import pytest
from PIL import Image
from reportlab.lib.pagesizes import letter
from reportlab.pdfgen import canvas


@pytest.fixture()
def sample_pdf_bytes() -> bytes:
    """Generate a minimal single-page PDF with known text content."""
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=letter)
    c.setTitle("Cell Biology Notes")
    c.setAuthor("Student")
    c.drawString(72, 720, "Hello PDF World")
    c.save()
    return buf.getvalue()


@pytest.fixture()
def multi_page_pdf_bytes() -> bytes:
    """Generate a two-page PDF with known text on each page."""
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=letter)
    c.drawString(72, 720, "Page one content")
    c.showPage()
    c.drawString(72, 720, "Page two content")
    c.save()
    return buf.getvalue()


@pytest.fixture()
def empty_pdf_bytes() -> bytes:
    """Generate a valid PDF with no text content (blank page)."""
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=letter)
    c.showPage()
    c.save()
    return buf.getvalue()


@pytest.fixture()
def sample_pdf_path(tmp_path: Path, sample_pdf_bytes: bytes) -> Path:
    path = tmp_path / "notes.pdf"
    path.write_bytes(sample_pdf_bytes)
    return path


@pytest.fixture()
def multi_page_pdf_path(tmp_path: Path, multi_page_pdf_bytes: bytes) -> Path:
    path = tmp_path / "chapters.pdf"
    path.write_bytes(multi_page_pdf_bytes)
    return path


@pytest.fixture()
def empty_pdf_path(tmp_path: Path, empty_pdf_bytes: bytes) -> Path:
    path = tmp_path / "blank.pdf"
    path.write_bytes(empty_pdf_bytes)
    return path


@pytest.fixture()
def sample_png_path(tmp_path: Path) -> Path:
    """A small white PNG image."""
    path = tmp_path / "diagram.png"
    Image.new("RGB", (40, 20), color="white").save(path, format="PNG")
    return path


@pytest.fixture()
def sample_docx_path(tmp_path: Path, sample_png_path: Path) -> Path:
    """A Word document with two paragraphs, a table and one picture."""
    document = docx.Document()
    document.core_properties.title = "Photosynthesis"
    document.core_properties.author = "Student"
    document.add_paragraph("Photosynthesis converts light into chemical energy.")
    document.add_paragraph("It happens in the chloroplast.")
    table = document.add_table(rows=1, cols=2)
    table.rows[0].cells[0].text = "Input"
    table.rows[0].cells[1].text = "Sunlight"
    document.add_picture(str(sample_png_path))
    path = tmp_path / "photosynthesis.docx"
    document.save(str(path))
    return path
