"""Offline resume parser used as the last resort in the resume-parse chain.

It never calls a network service: it pulls the Skills, Education,
Experience and Achievements sections out of the plain-text resume with
regular expressions and emits JSON text, so its output goes through the
same extraction and validation as a model response.
"""

import json
import re
from typing import Any, Dict, List, Mapping

from .base import BaseTextProvider, InvokeParams

# A section runs until the next "Heading:" line or the end of the text
_SECTION_END = r"(?=\n[A-Z][a-z]+:|\Z)"

SKILLS_PATTERN = re.compile(r"Skills[:\-]?[ \t]*(.+)", re.IGNORECASE)
EDUCATION_PATTERN = re.compile(
    r"Education[:\-]?\s*(.*?)" + _SECTION_END, re.IGNORECASE | re.DOTALL
)
EXPERIENCE_PATTERN = re.compile(
    r"Experience[:\-]?\s*(.*?)" + _SECTION_END, re.IGNORECASE | re.DOTALL
)
ACHIEVEMENTS_PATTERN = re.compile(
    r"Achievements[:\-]?\s*(.*?)" + _SECTION_END, re.IGNORECASE | re.DOTALL
)


def _section(pattern: re.Pattern, text: str) -> str:
    match = pattern.search(text)
    return match.group(1).strip() if match else ""


def _non_blank_lines(block: str) -> List[str]:
    return [line.strip() for line in block.splitlines() if line.strip()]


def parse_resume_sections(resume_text: str) -> Dict[str, Any]:
    """Split a plain-text resume into structured sections.

    Args:
        resume_text: Plain-text resume

    Returns:
        Dict with summary, skills, experience, education and achievements
    """
    skills_line = _section(SKILLS_PATTERN, resume_text)
    skills = [s.strip() for s in skills_line.split(",") if s.strip()]

    experience = [
        {
            "company": "",
            "role": entry.split("-")[0].strip(),
            "duration": "",
            "description": [entry],
        }
        for entry in _non_blank_lines(_section(EXPERIENCE_PATTERN, resume_text))
    ]

    return {
        "summary": "",
        "skills": skills,
        "experience": experience,
        "education": _section(EDUCATION_PATTERN, resume_text),
        "achievements": _non_blank_lines(
            _section(ACHIEVEMENTS_PATTERN, resume_text)
        ),
    }


class RegexResumeProvider(BaseTextProvider):
    """Lowest-priority resume-parse provider backed by regular expressions."""

    provider_name = "regex-resume"

    def __init__(self, model: str = "regex", timeout: float = 10.0):
        super().__init__(model, timeout)

    def invoke(self, prompt: str, params: InvokeParams) -> str:
        """Parse ``request_params["resume_text"]``; the prompt is ignored."""
        request_params: Mapping[str, Any] = params.request_params
        resume_text = request_params.get("resume_text")
        if not isinstance(resume_text, str) or not resume_text.strip():
            raise self._handle_api_error(
                ValueError("invalid request: no resume_text to parse")
            )
        return json.dumps(parse_resume_sections(resume_text))
