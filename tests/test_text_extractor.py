"""Tests for document text extraction and the /api/parse-document endpoint."""

import io
from types import SimpleNamespace
from unittest.mock import patch

import pytest
from httpx import ASGITransport, AsyncClient
from pypdf import PdfWriter
from pypdf.errors import PdfReadError

from resume_roast.core.errors import DocumentErrorKind, DocumentExtractionError
from resume_roast.main import app
from resume_roast.services.text_extractor import extract_document_text


def _blank_pdf(pages: int = 1) -> bytes:
    writer = PdfWriter()
    for _ in range(pages):
        writer.add_blank_page(width=612, height=792)
    buf = io.BytesIO()
    writer.write(buf)
    return buf.getvalue()


def _fake_reader(*page_texts):
    pages = [SimpleNamespace(extract_text=lambda t=t: t) for t in page_texts]
    return SimpleNamespace(pages=pages)


class TestExtractDocumentText:

    def test_pdf_pages_are_joined_in_order(self):
        reader = _fake_reader("Jane   Doe\tEngineer", "Experience  at Acme", "Education")
        with patch("resume_roast.services.text_extractor.PdfReader", return_value=reader):
            doc = extract_document_text(b"%PDF-fake", "application/pdf", "cv.pdf")
        assert doc.text == "Jane Doe Engineer\nExperience at Acme\nEducation"
        assert doc.pages == 3

    def test_image_only_pdf_has_no_extractable_text(self):
        with pytest.raises(DocumentExtractionError) as exc:
            extract_document_text(_blank_pdf(2), "application/pdf", "scan.pdf")
        assert exc.value.kind is DocumentErrorKind.NO_EXTRACTABLE_TEXT
        assert exc.value.status_code == 400
        assert exc.value.stage == "document"

    def test_corrupt_pdf_is_extraction_error(self):
        with patch("resume_roast.services.text_extractor.PdfReader", side_effect=PdfReadError("EOF marker not found")):
            with pytest.raises(DocumentExtractionError) as exc:
                extract_document_text(b"garbage", "application/pdf", "cv.pdf")
        assert exc.value.kind is DocumentErrorKind.EXTRACTION_ERROR

    def test_plain_text(self):
        doc = extract_document_text("  Jane Doe\nEngineer  ".encode(), "text/plain; charset=utf-8", "cv.txt")
        assert doc.text == "Jane Doe\nEngineer"
        assert doc.pages == 1

    def test_plain_text_must_be_utf8(self):
        with pytest.raises(DocumentExtractionError) as exc:
            extract_document_text(b"\xc3\x28" * 10, "text/plain", "cv.txt")
        assert exc.value.kind is DocumentErrorKind.EXTRACTION_ERROR

    def test_empty_text_file(self):
        with pytest.raises(DocumentExtractionError) as exc:
            extract_document_text(b"   \n", "text/plain", "cv.txt")
        assert exc.value.kind is DocumentErrorKind.NO_EXTRACTABLE_TEXT

    @pytest.mark.parametrize(
        "content_type, filename",
        [
            ("image/png", "cv.png"),
            ("application/vnd.openxmlformats-officedocument.wordprocessingml.document", "cv.docx"),
            ("image/png", "cv.pdf"),
            (None, "cv.docx"),
        ],
    )
    def test_unsupported_format(self, content_type, filename):
        with pytest.raises(DocumentExtractionError) as exc:
            extract_document_text(b"data", content_type, filename)
        assert exc.value.kind is DocumentErrorKind.UNSUPPORTED_FORMAT

    def test_generic_media_type_falls_back_to_suffix(self):
        doc = extract_document_text(b"Jane Doe resume", "application/octet-stream", "cv.txt")
        assert doc.text == "Jane Doe resume"


@pytest.fixture
async def client():
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.mark.asyncio
class TestParseDocumentEndpoint:

    async def test_returns_text(self, client):
        files = {"file": ("cv.txt", b"Jane Doe\nBackend Engineer", "text/plain")}
        response = await client.post("/api/parse-document", files=files)
        assert response.status_code == 200
        assert response.json() == {"text": "Jane Doe\nBackend Engineer", "pages": 1}

    async def test_unsupported_format_is_400(self, client):
        files = {"file": ("cv.png", b"\x89PNG", "image/png")}
        response = await client.post("/api/parse-document", files=files)
        assert response.status_code == 400
        body = response.json()
        assert body["kind"] == "unsupported_format"
        assert body["error"] == "validation_failed"
        assert body["stage"] == "document"

    async def test_image_only_pdf_is_400(self, client):
        files = {"file": ("scan.pdf", _blank_pdf(), "application/pdf")}
        response = await client.post("/api/parse-document", files=files)
        assert response.status_code == 400
        assert response.json()["kind"] == "no_extractable_text"

    async def test_file_too_large_is_413(self, client):
        oversized = b"x" * (5 * 1024 * 1024 + 1)
        files = {"file": ("cv.txt", oversized, "text/plain")}
        response = await client.post("/api/parse-document", files=files)
        assert response.status_code == 413
        assert "large" in response.json()["detail"].lower()
