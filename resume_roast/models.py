"""Pydantic request/response models for the resume-roast API.

Result models double as the validation schemas for model replies: every
field is required and scores are strict ints, so a reply that is missing
a field or carries ``"overallScore": "high"`` fails instead of being
defaulted or coerced.
"""

from dataclasses import dataclass
from typing import Any, Generic, Literal, TypeVar

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, StrictInt, StrictStr
from pydantic.alias_generators import to_camel

from resume_roast.core.constants import SCORE_MAX, SCORE_MIN

Severity = Literal["critical", "major", "minor", "suggestion"]
Score = StrictInt


class _CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


# ---------------------------------------------------------------------------
# Analysis result
# ---------------------------------------------------------------------------


class Roast(_CamelModel):
    """One finding: what is wrong and how to fix it."""
    severity: Severity
    title: StrictStr
    issue: StrictStr
    fix: StrictStr


class RewrittenBullet(_CamelModel):
    original: StrictStr
    improved: StrictStr


class AnalysisResult(_CamelModel):
    """Structured critique returned by /api/roast."""
    overall_score: Score = Field(..., ge=SCORE_MIN, le=SCORE_MAX)
    verdict: StrictStr
    summary: StrictStr
    roasts: list[Roast] = Field(..., min_length=1)
    strengths: list[StrictStr]
    missing_keywords: list[StrictStr]
    ats_score: Score = Field(..., ge=SCORE_MIN, le=SCORE_MAX)
    ats_issues: list[StrictStr]
    rewritten_bullets: list[RewrittenBullet]


# ---------------------------------------------------------------------------
# Rebuilt document
# ---------------------------------------------------------------------------


class Contact(_CamelModel):
    email: StrictStr | None = None
    phone: StrictStr | None = None
    linkedin: StrictStr | None = None
    location: StrictStr | None = None


class ExperienceEntry(_CamelModel):
    company: StrictStr
    title: StrictStr
    dates: StrictStr
    bullets: list[StrictStr]


class EducationEntry(_CamelModel):
    school: StrictStr
    degree: StrictStr
    year: StrictStr | None = None


class RebuiltDocument(_CamelModel):
    """Structured rewrite returned by /api/rebuild."""
    name: StrictStr
    title: StrictStr
    contact: Contact
    summary: StrictStr
    experience: list[ExperienceEntry]
    education: list[EducationEntry]
    skills: list[StrictStr]


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------


class AnalysisRequest(BaseModel):
    """Raw analyze input. Validation happens in the sanitizer, not here."""
    model_config = ConfigDict(frozen=True, extra="ignore")

    text: Any = Field(default=None, validation_alias=AliasChoices("text", "resumeText"))
    target_role: Any = Field(
        default=None, validation_alias=AliasChoices("targetRole", "target_role")
    )


class RebuildRequest(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    text: Any = Field(default=None, validation_alias=AliasChoices("text", "resumeText"))
    prior_result: Any = Field(
        default=None,
        validation_alias=AliasChoices("priorResult", "roastResult", "prior_result"),
    )


class ParsedDocument(BaseModel):
    """Output of /api/parse-document."""
    text: str
    pages: int


# ---------------------------------------------------------------------------
# Schema descriptors
# ---------------------------------------------------------------------------

ResultT = TypeVar("ResultT", bound=BaseModel)


@dataclass(frozen=True)
class ResultSchema(Generic[ResultT]):
    """Names the model a reply must validate against."""
    name: str
    model: type[ResultT]


ANALYSIS_SCHEMA: ResultSchema[AnalysisResult] = ResultSchema("AnalysisResult", AnalysisResult)
REBUILD_SCHEMA: ResultSchema[RebuiltDocument] = ResultSchema("RebuiltDocument", RebuiltDocument)
