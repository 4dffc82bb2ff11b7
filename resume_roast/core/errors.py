"""Pipeline error taxonomy.

Every stage fails fast with one of these. The HTTP layer maps them to a
status code and a machine-readable ``code`` so callers never have to parse
``detail`` to tell a rate limit from a broken model reply.
"""

from enum import Enum

from resume_roast.core.constants import (
    STAGE_ADMISSION,
    STAGE_DOCUMENT,
    STAGE_EXTRACTION,
    STAGE_INVOCATION,
    STAGE_VALIDATION,
)


class PipelineError(Exception):
    """Base class for tagged pipeline failures."""

    status_code: int = 500
    stage: str = ""
    code: str = ""

    def __init__(self, detail: str):
        self.detail = detail
        super().__init__(detail)

    def to_dict(self) -> dict:
        return {"detail": self.detail, "error": self.code, "stage": self.stage}


class RateLimited(PipelineError):
    status_code = 429
    stage = STAGE_ADMISSION
    code = "rate_limited"

    def __init__(self, detail: str = "Too many requests. Please wait a minute and try again."):
        super().__init__(detail)


class ValidationFailed(PipelineError):
    status_code = 400
    stage = STAGE_VALIDATION
    code = "validation_failed"

    def __init__(self, reason: str, stage: str = STAGE_VALIDATION):
        self.reason = reason
        self.stage = stage
        super().__init__(reason)


class InvocationFailed(PipelineError):
    status_code = 500
    stage = STAGE_INVOCATION
    code = "invocation_failed"

    def __init__(self, cause: str):
        self.cause = cause
        super().__init__(f"Model invocation failed: {cause}")


class ExtractionKind(str, Enum):
    NO_JSON_FOUND = "no_json_found"
    SCHEMA_VIOLATION = "schema_violation"


class ExtractionFailed(PipelineError):
    status_code = 500
    stage = STAGE_EXTRACTION

    def __init__(self, kind: ExtractionKind, field: str | None = None, schema: str = ""):
        self.kind = kind
        self.field = field
        self.schema = schema
        if kind is ExtractionKind.NO_JSON_FOUND:
            detail = "Model reply did not contain a JSON object"
        else:
            detail = f"Model reply failed {schema or 'result'} validation at '{field}'"
        super().__init__(detail)

    @property
    def code(self) -> str:
        return self.kind.value

    def to_dict(self) -> dict:
        body = super().to_dict()
        if self.field is not None:
            body["field"] = self.field
        return body


class DocumentErrorKind(str, Enum):
    UNSUPPORTED_FORMAT = "unsupported_format"
    NO_EXTRACTABLE_TEXT = "no_extractable_text"
    EXTRACTION_ERROR = "extraction_error"


_DOCUMENT_MESSAGES = {
    DocumentErrorKind.UNSUPPORTED_FORMAT: "Please upload a PDF or TXT file",
    DocumentErrorKind.NO_EXTRACTABLE_TEXT: (
        "Could not extract text from the document. It might be image-based. "
        "Try pasting text instead."
    ),
    DocumentErrorKind.EXTRACTION_ERROR: "Error reading the document. Try pasting text instead.",
}


class DocumentExtractionError(ValidationFailed):
    """Raised by the document text collaborator; surfaces as a 400."""

    def __init__(self, kind: DocumentErrorKind, detail: str | None = None):
        self.kind = kind
        super().__init__(detail or _DOCUMENT_MESSAGES[kind], stage=STAGE_DOCUMENT)

    def to_dict(self) -> dict:
        body = super().to_dict()
        body["kind"] = self.kind.value
        return body
