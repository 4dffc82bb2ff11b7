"""Pull a JSON object out of a free-text model reply and validate it.

The reply should be a bare JSON object but often isn't ("Sure! {...} Hope
this helps!"). The candidate span runs from the first ``{`` to the last
``}``. This is a heuristic: a reply holding two separate JSON fragments
will be mis-bracketed and rejected as NoJsonFound, not repaired.
"""

import json
from typing import Any

from pydantic import ValidationError

from resume_roast.core.constants import RAW_REPLY_LOG_LENGTH
from resume_roast.core.errors import ExtractionFailed, ExtractionKind
from resume_roast.core.logger import logger
from resume_roast.models import ResultSchema, ResultT


def extract_json_object(raw_reply: str) -> dict[str, Any]:
    """Return the parsed ``{...}`` span of ``raw_reply``.

    Raises:
        ExtractionFailed(NO_JSON_FOUND) when there is no brace pair or the
        span does not parse.
    """
    start = raw_reply.find("{")
    end = raw_reply.rfind("}")
    if start == -1 or end <= start:
        raise ExtractionFailed(ExtractionKind.NO_JSON_FOUND)

    try:
        parsed = json.loads(raw_reply[start:end + 1])
    except (ValueError, RecursionError) as e:
        # also int digit-limit and nesting-depth failures
        raise ExtractionFailed(ExtractionKind.NO_JSON_FOUND) from e

    if not isinstance(parsed, dict):
        raise ExtractionFailed(ExtractionKind.NO_JSON_FOUND)
    return parsed


def _error_field(error: dict) -> str:
    loc = error.get("loc") or ()
    return ".".join(str(part) for part in loc) or "<root>"


def extract_and_validate(raw_reply: str, schema: ResultSchema[ResultT]) -> ResultT:
    """Extract the JSON payload from ``raw_reply`` and validate it against ``schema``.

    Missing fields, wrong types, and out-of-range scores are hard failures;
    nothing is defaulted or coerced.

    Raises:
        ExtractionFailed(NO_JSON_FOUND | SCHEMA_VIOLATION)
    """
    try:
        data = extract_json_object(raw_reply)
    except ExtractionFailed:
        logger.warning(
            f"No JSON object in model reply for {schema.name}: "
            f"{raw_reply[:RAW_REPLY_LOG_LENGTH]!r}"
        )
        raise

    try:
        return schema.model.model_validate(data)
    except ValidationError as e:
        errors = e.errors()
        field = _error_field(errors[0]) if errors else "<root>"
        logger.warning(
            f"{schema.name} schema violation at '{field}' "
            f"({len(errors)} error(s)): {raw_reply[:RAW_REPLY_LOG_LENGTH]!r}"
        )
        raise ExtractionFailed(
            ExtractionKind.SCHEMA_VIOLATION, field=field, schema=schema.name
        ) from e
