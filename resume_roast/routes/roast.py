"""Roast, rebuild, and document-parsing endpoints."""

import json

from fastapi import APIRouter, Depends, File, HTTPException, Request, UploadFile

from resume_roast.config import load_settings
from resume_roast.core.langfuse_client import flush
from resume_roast.core.logger import logger
from resume_roast.core.rate_limit import (
    AdmissionController,
    client_id_from_request,
    get_admission_controller,
)
from resume_roast.models import (
    AnalysisRequest,
    AnalysisResult,
    ParsedDocument,
    RebuildRequest,
    RebuiltDocument,
)
from resume_roast.services.pipeline import admit, rebuild_resume, run_analysis
from resume_roast.services.text_extractor import extract_document_text

router = APIRouter(prefix="/api", tags=["Roast"])


async def _read_json_body(request: Request) -> dict:
    """Parse the body leniently; a bad body becomes an empty payload.

    Validation of the payload belongs to the pipeline, which reports a
    missing field as a 400 rather than FastAPI's 422.
    """
    try:
        body = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        return {}
    return body if isinstance(body, dict) else {}


@router.post(
    "/roast",
    response_model=AnalysisResult,
    response_model_by_alias=True,
)
async def roast_resume(
    request: Request,
    admission: AdmissionController = Depends(get_admission_controller),
):
    """Resume text in -> structured critique out."""
    client_id = client_id_from_request(request, load_settings().trust_proxy_headers)
    admit(client_id, admission)

    payload = AnalysisRequest.model_validate(await _read_json_body(request))
    try:
        return await run_analysis(payload)
    finally:
        flush()


@router.post(
    "/rebuild",
    response_model=RebuiltDocument,
    response_model_by_alias=True,
)
async def rebuild(request: Request):
    """Resume text + earlier roast in -> rewritten resume out."""
    payload = RebuildRequest.model_validate(await _read_json_body(request))

    try:
        return await rebuild_resume(payload)
    finally:
        flush()


@router.post("/parse-document", response_model=ParsedDocument)
async def parse_document(file: UploadFile = File(...)):
    """Uploaded PDF/TXT in -> plain text out, ready for /api/roast."""
    settings = load_settings()
    data = await file.read()
    if len(data) > settings.max_upload_size:
        raise HTTPException(
            status_code=413,
            detail=f"File too large (max {settings.max_upload_size // (1024 * 1024)}MB)",
        )

    logger.info(f"Parsing upload: {file.filename or 'unnamed'} ({file.content_type}, {len(data)} bytes)")
    doc = extract_document_text(data, file.content_type, file.filename)
    return ParsedDocument(text=doc.text, pages=doc.pages)
