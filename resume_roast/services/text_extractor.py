"""Extract plain text from an uploaded resume (PDF or TXT). In-memory only."""

import io
import re
from dataclasses import dataclass
from pathlib import PurePath

from pypdf import PdfReader
from pypdf.errors import PyPdfError

from resume_roast.core.constants import SUPPORTED_DOCUMENT_SUFFIXES, SUPPORTED_DOCUMENT_TYPES
from resume_roast.core.errors import DocumentErrorKind, DocumentExtractionError
from resume_roast.core.logger import logger

_WHITESPACE = re.compile(r"[ \t\r\f\v]+")
_GENERIC_TYPES = {"application/octet-stream", "binary/octet-stream"}


@dataclass(frozen=True)
class ExtractedDocument:
    text: str
    pages: int


def _detect_format(content_type: str | None, filename: str | None) -> str | None:
    media_type = (content_type or "").split(";")[0].strip().lower()
    if media_type and media_type not in _GENERIC_TYPES:
        return SUPPORTED_DOCUMENT_TYPES.get(media_type)
    suffix = PurePath(filename or "").suffix.lower()
    return SUPPORTED_DOCUMENT_SUFFIXES.get(suffix)


def _extract_pdf(data: bytes) -> ExtractedDocument:
    try:
        reader = PdfReader(io.BytesIO(data))
        page_texts = []
        for page in reader.pages:
            page_text = page.extract_text() or ""
            page_texts.append(_WHITESPACE.sub(" ", page_text).strip())
    except (PyPdfError, ValueError, KeyError, TypeError, OSError) as e:
        logger.warning(f"PDF extraction failed: {e}")
        raise DocumentExtractionError(DocumentErrorKind.EXTRACTION_ERROR) from e

    text = "\n".join(page_texts).strip()
    if not text:
        raise DocumentExtractionError(DocumentErrorKind.NO_EXTRACTABLE_TEXT)
    return ExtractedDocument(text=text, pages=len(page_texts))


def _extract_plain(data: bytes) -> ExtractedDocument:
    try:
        text = data.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise DocumentExtractionError(
            DocumentErrorKind.EXTRACTION_ERROR, "Text files must be UTF-8 encoded"
        ) from e

    text = text.strip()
    if not text:
        raise DocumentExtractionError(DocumentErrorKind.NO_EXTRACTABLE_TEXT)
    return ExtractedDocument(text=text, pages=1)


def extract_document_text(
    data: bytes,
    content_type: str | None,
    filename: str | None = None,
) -> ExtractedDocument:
    """Turn an uploaded file into one concatenated text string.

    The declared media type wins; the filename suffix is only consulted
    when the media type is missing or generic.

    Raises:
        DocumentExtractionError: UNSUPPORTED_FORMAT, NO_EXTRACTABLE_TEXT
        (e.g. image-only PDF) or EXTRACTION_ERROR.
    """
    fmt = _detect_format(content_type, filename)
    if fmt is None:
        logger.info(f"Rejected upload: type={content_type!r} name={filename!r}")
        raise DocumentExtractionError(DocumentErrorKind.UNSUPPORTED_FORMAT)

    if fmt == "pdf":
        doc = _extract_pdf(data)
    else:
        doc = _extract_plain(data)

    logger.info(f"Extracted {len(doc.text)} chars from {doc.pages} page(s) ({fmt})")
    return doc
