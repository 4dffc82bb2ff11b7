"""Roast and rebuild orchestration.

Analyze:  admission -> validate -> compose -> invoke -> extract & validate
Rebuild:  check input -> compose -> invoke -> extract & validate

Each stage raises a tagged PipelineError and nothing downstream runs.
Admission is charged before any other work and is never refunded, so a
failed model call still costs the client one unit of quota.
"""

import time

from pydantic import ValidationError

from resume_roast.config import load_settings
from resume_roast.core.constants import TARGET_ROLE_MAX_LENGTH
from resume_roast.core.errors import RateLimited, ValidationFailed
from resume_roast.core.langfuse_client import observe
from resume_roast.core.llm import LLMClient, get_llm_client
from resume_roast.core.logger import logger
from resume_roast.core.rate_limit import AdmissionController
from resume_roast.models import (
    ANALYSIS_SCHEMA,
    REBUILD_SCHEMA,
    AnalysisRequest,
    AnalysisResult,
    RebuildRequest,
    RebuiltDocument,
)
from resume_roast.services.prompts import compose_analysis_prompt, compose_rebuild_prompt
from resume_roast.services.response_parser import extract_and_validate
from resume_roast.services.sanitizer import clean_target_role, strip_markup, validate_resume_text


def admit(client_id: str, admission: AdmissionController) -> None:
    """Charge one unit of quota to ``client_id`` or raise RateLimited."""
    if not admission.check_and_admit(client_id):
        logger.warning(f"Rate limited client {client_id}")
        raise RateLimited()


@observe(name="resume-roast-analyze")
async def run_analysis(
    request: AnalysisRequest,
    llm: LLMClient | None = None,
) -> AnalysisResult:
    """Validate, compose, invoke and extract for an already admitted request.

    Raises:
        ValidationFailed, InvocationFailed, ExtractionFailed.
    """
    start = time.time()

    sanitized = validate_resume_text(request.text)
    target_role = clean_target_role(request.target_role, TARGET_ROLE_MAX_LENGTH)

    prompt = compose_analysis_prompt(sanitized, target_role)

    llm = llm or await get_llm_client()
    reply = await llm.invoke(prompt, name="resume-roast")

    result = extract_and_validate(reply, ANALYSIS_SCHEMA)

    elapsed_ms = int((time.time() - start) * 1000)
    logger.info(
        f"Roast complete in {elapsed_ms}ms: score={result.overall_score} "
        f"ats={result.ats_score} roasts={len(result.roasts)}"
    )
    return result


async def analyze_resume(
    request: AnalysisRequest,
    client_id: str,
    admission: AdmissionController,
    llm: LLMClient | None = None,
) -> AnalysisResult:
    """Run the full analyze pipeline for one request.

    The HTTP route calls ``admit`` and ``run_analysis`` separately so that
    admission happens before the body is read.

    Raises:
        RateLimited, ValidationFailed, InvocationFailed, ExtractionFailed.
    """
    admit(client_id, admission)
    return await run_analysis(request, llm)


def _validate_rebuild_input(request: RebuildRequest) -> tuple[str, AnalysisResult]:
    if not isinstance(request.text, str) or not request.prior_result:
        raise ValidationFailed("Missing required data")

    # Rebuild is not rate limited; bound the text before the strip loop.
    text = request.text[:load_settings().max_resume_length]
    source = strip_markup(text).strip()
    if not source:
        raise ValidationFailed("Missing required data")

    try:
        prior = AnalysisResult.model_validate(request.prior_result)
    except ValidationError as e:
        logger.info(f"Rejected rebuild with malformed prior result: {e.error_count()} error(s)")
        raise ValidationFailed("Prior analysis result is missing or malformed") from e

    return source, prior


@observe(name="resume-roast-rebuild")
async def rebuild_resume(
    request: RebuildRequest,
    llm: LLMClient | None = None,
) -> RebuiltDocument:
    """Rewrite a resume using its earlier roast as guidance.

    Raises:
        ValidationFailed, InvocationFailed, ExtractionFailed.
    """
    start = time.time()

    source, prior = _validate_rebuild_input(request)
    prompt = compose_rebuild_prompt(source, prior)

    llm = llm or await get_llm_client()
    reply = await llm.invoke(prompt, name="resume-rebuild")

    document = extract_and_validate(reply, REBUILD_SCHEMA)

    elapsed_ms = int((time.time() - start) * 1000)
    logger.info(
        f"Rebuild complete in {elapsed_ms}ms: experience={len(document.experience)} "
        f"education={len(document.education)} skills={len(document.skills)}"
    )
    return document
