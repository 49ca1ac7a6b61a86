"""Tests for the offline regex resume parser."""

import json
from types import MappingProxyType

import pytest

from interview_gen.error_classifier import ErrorCategory
from interview_gen.errors import ProviderCallFailure
from interview_gen.providers.base import InvokeParams
from interview_gen.providers.regex_resume import (
    RegexResumeProvider,
    parse_resume_sections,
)

RESUME = """John Smith
john@example.com
Skills: Python, Go , Kubernetes,
Experience:
Platform Engineer - Globex 2021-2024

SRE - Hooli 2018-2021
Education:
MSc Distributed Systems
Achievements:
Cut deploy time by 60%
Speaker at PyCon
"""


class TestParseResumeSections:
    """Tests for parse_resume_sections."""

    def test_sections(self):
        """Test each labelled section is extracted."""
        parsed = parse_resume_sections(RESUME)

        assert parsed["skills"] == ["Python", "Go", "Kubernetes"]
        assert parsed["education"] == "MSc Distributed Systems"
        assert parsed["achievements"] == ["Cut deploy time by 60%", "Speaker at PyCon"]
        assert parsed["summary"] == ""

    def test_experience_entries(self):
        """Test each non-blank experience line becomes an entry."""
        experience = parse_resume_sections(RESUME)["experience"]

        assert [entry["role"] for entry in experience] == ["Platform Engineer", "SRE"]
        assert experience[1]["description"] == ["SRE - Hooli 2018-2021"]
        assert experience[0]["company"] == ""

    def test_missing_sections(self):
        """Test a resume without headings yields empty sections."""
        parsed = parse_resume_sections("Just a name\nand some prose")

        assert parsed == {
            "summary": "",
            "skills": [],
            "experience": [],
            "education": "",
            "achievements": [],
        }


class TestRegexResumeProvider:
    """Test suite for RegexResumeProvider."""

    def test_invoke_reads_request_params(self):
        """Test the resume text comes from the request, not the prompt."""
        provider = RegexResumeProvider()
        params = InvokeParams(request_params=MappingProxyType({"resume_text": RESUME}))

        result = json.loads(provider.invoke("ignored prompt", params))

        assert result["skills"] == ["Python", "Go", "Kubernetes"]
        assert provider.get_provider_name() == "regex-resume"

    def test_invoke_without_resume_text(self):
        """Test a missing resume is a non-retryable invalid request."""
        provider = RegexResumeProvider()

        with pytest.raises(ProviderCallFailure) as exc_info:
            provider.invoke("prompt", InvokeParams())

        assert exc_info.value.classified_error.category == ErrorCategory.INVALID_REQUEST
        assert exc_info.value.is_retryable is False
