"""Centralized constants — no magic numbers in service code."""

SERVICE_NAME = "resume-roast"
SERVICE_VERSION = "1.0.0"

# Prompt inputs
REBUILD_SOURCE_LENGTH = 10_000  # chars of original resume embedded in the rebuild prompt
TARGET_ROLE_MAX_LENGTH = 200
DEFAULT_TARGET_ROLE = "general professional role"
REBUILD_FEEDBACK_TOP_ISSUES = 3  # roast titles quoted back to the rebuild prompt

# Result contract
SCORE_MIN = 0
SCORE_MAX = 100

# Diagnostics
RAW_REPLY_LOG_LENGTH = 500  # chars of an unusable model reply kept in the log line

# Document extraction
SUPPORTED_DOCUMENT_TYPES = {
    "application/pdf": "pdf",
    "text/plain": "text",
}
SUPPORTED_DOCUMENT_SUFFIXES = {
    ".pdf": "pdf",
    ".txt": "text",
}

# Pipeline stage labels (used in error bodies and logs)
STAGE_ADMISSION = "admission"
STAGE_VALIDATION = "validation"
STAGE_DOCUMENT = "document"
STAGE_INVOCATION = "invocation"
STAGE_EXTRACTION = "extraction"
