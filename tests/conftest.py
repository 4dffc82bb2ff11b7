"""Shared fixtures for resume-roast tests."""

import os
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import copy
import json
from unittest.mock import AsyncMock, patch

import pytest

from resume_roast.core.rate_limit import AdmissionController, InMemoryWindowStore, get_admission_controller
from resume_roast.main import app


class FakeClock:
    """Manually advanced monotonic clock for admission tests."""

    def __init__(self, start: float = 1_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture()
def clock():
    return FakeClock()


@pytest.fixture()
def admission(clock):
    """Fresh 10-per-60s controller on a fake clock."""
    return AdmissionController(InMemoryWindowStore(), ceiling=10, window_seconds=60, clock=clock)


@pytest.fixture(autouse=True)
def _isolated_admission(admission):
    """Give every test its own window table instead of the process-wide one."""
    app.dependency_overrides[get_admission_controller] = lambda: admission
    yield
    app.dependency_overrides.pop(get_admission_controller, None)


@pytest.fixture(autouse=True)
def _no_trace_flush():
    with patch("resume_roast.routes.roast.flush"):
        yield


# ---------------------------------------------------------------------------
# Sample payloads
# ---------------------------------------------------------------------------

SAMPLE_RESUME = (
    "Jane Doe\n"
    "jane@example.com | (555) 010-2030 | Austin, TX\n\n"
    "EXPERIENCE\n"
    "Software Engineer, Acme Corp (2019 - 2023)\n"
    "- Responsible for backend services written in Python\n"
    "- Worked on the billing system\n\n"
    "EDUCATION\n"
    "B.S. Computer Science, University of Texas, 2019\n\n"
    "SKILLS\n"
    "Python, Django, PostgreSQL, Docker"
)

SAMPLE_ANALYSIS = {
    "overallScore": 72,
    "verdict": "Solid But Forgettable",
    "summary": "The resume lists relevant experience but undersells impact. Bullets read like duties.",
    "roasts": [
        {
            "severity": "critical",
            "title": "No measurable impact",
            "issue": "Bullets describe responsibilities, not results.",
            "fix": "Add numbers: latency cut, revenue saved, users served.",
        },
        {
            "severity": "minor",
            "title": "Vague skills list",
            "issue": "Skills are listed without context.",
            "fix": "Tie each skill to a project or role.",
        },
    ],
    "strengths": ["Clear chronology", "Relevant stack"],
    "missingKeywords": ["CI/CD", "AWS", "REST APIs"],
    "atsScore": 80,
    "atsIssues": ["No summary section"],
    "rewrittenBullets": [
        {
            "original": "Worked on the billing system",
            "improved": "Rebuilt billing reconciliation in Django, cutting month-end close from 5 days to 2",
        }
    ],
}

SAMPLE_REBUILT = {
    "name": "Jane Doe",
    "title": "Backend Software Engineer",
    "contact": {
        "email": "jane@example.com",
        "phone": "(555) 010-2030",
        "linkedin": None,
        "location": "Austin, TX",
    },
    "summary": "Backend engineer with four years building Python services at Acme Corp.",
    "experience": [
        {
            "company": "Acme Corp",
            "title": "Software Engineer",
            "dates": "2019 - 2023",
            "bullets": [
                "Owned Python backend services powering core product flows",
                "Drove improvements to the billing system",
            ],
        }
    ],
    "education": [
        {"school": "University of Texas", "degree": "B.S. Computer Science", "year": "2019"}
    ],
    "skills": ["Python", "Django", "PostgreSQL", "Docker"],
}

assert len(SAMPLE_RESUME) >= 100


@pytest.fixture()
def analysis_payload():
    return copy.deepcopy(SAMPLE_ANALYSIS)


@pytest.fixture()
def rebuilt_payload():
    return copy.deepcopy(SAMPLE_REBUILT)


def mock_llm(reply: str | Exception) -> AsyncMock:
    """An LLMClient stand-in whose invoke returns ``reply`` (or raises it)."""
    llm = AsyncMock()
    if isinstance(reply, Exception):
        llm.invoke = AsyncMock(side_effect=reply)
    else:
        llm.invoke = AsyncMock(return_value=reply)
    return llm


def as_reply(payload: dict, prefix: str = "", suffix: str = "") -> str:
    return f"{prefix}{json.dumps(payload)}{suffix}"
