"""Public facade of the generation core.

``GenerationService`` is what request handlers call. It validates the
caller's parameters, hands the request to the fallback orchestrator and
returns a ``GenerationResult``. Only ``RequestValidationError`` and
``ExhaustedError`` escape from it.
"""

import logging
import re
from typing import Any, Dict, List, Mapping, Optional, Union

from .errors import RequestValidationError
from .models import (
    GenerationResult,
    PersonalInfo,
    ResumeOptimization,
    StructuredResume,
    UseCase,
)
from .orchestrator import FallbackOrchestrator
from .request import GenerationRequest

logger = logging.getLogger(__name__)

PLACEHOLDER_NAME = "Your Name"
PLACEHOLDER_EMAIL = "your.email@example.com"
PLACEHOLDER_PHONE = "Your Phone Number"

EMAIL_PATTERN = re.compile(r"[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}")
PHONE_PATTERN = re.compile(
    r"(\+?\d{1,4}[\s.-]?)?(\(?\d{3,4}\)?[\s.-]?)?\d{3,4}[\s.-]?\d{4}"
)

OUTPUT_FORMATS = ("json", "text")


def extract_personal_info(text: str) -> PersonalInfo:
    """Pull name, email and phone number from the top of a plain-text resume.

    The first line is taken as the name. Missing values are replaced with
    placeholders the user is expected to edit.
    """
    first_line = text.strip().splitlines()[0].strip() if text.strip() else ""
    email = EMAIL_PATTERN.search(text)
    phone = PHONE_PATTERN.search(text)
    return PersonalInfo(
        name=first_line or PLACEHOLDER_NAME,
        email=email.group(0) if email else PLACEHOLDER_EMAIL,
        mobile=phone.group(0).strip() if phone else PLACEHOLDER_PHONE,
    )


def _personal_info_from_structured(resume: Mapping[str, Any]) -> PersonalInfo:
    info = resume.get("personal_info") or resume.get("personalInfo")
    if isinstance(info, Mapping):
        return PersonalInfo(
            name=info.get("name") or PLACEHOLDER_NAME,
            email=info.get("email") or PLACEHOLDER_EMAIL,
            mobile=info.get("mobile") or info.get("phone") or PLACEHOLDER_PHONE,
        )
    return PersonalInfo(
        name=PLACEHOLDER_NAME, email=PLACEHOLDER_EMAIL, mobile=PLACEHOLDER_PHONE
    )


class GenerationService:
    """Entry point for interview-prep generation and transcription."""

    def __init__(self, orchestrator: FallbackOrchestrator):
        self.orchestrator = orchestrator

    def generate(
        self, use_case: Union[UseCase, str], params: Mapping[str, Any]
    ) -> GenerationResult:
        """Validate parameters and generate content for a use case.

        Args:
            use_case: Use case (enum member or string value)
            params: Caller parameters

        Returns:
            GenerationResult with the typed value

        Raises:
            RequestValidationError: If parameters are invalid
            ExhaustedError: If every provider failed and no stub exists
        """
        request = GenerationRequest.create(use_case, params)
        return self.orchestrator.generate(request)

    def transcribe(self, audio: bytes) -> GenerationResult:
        """Transcribe a recorded answer.

        Raises:
            RequestValidationError: If the audio is empty
            ExhaustedError: If every transcription provider failed
        """
        if not isinstance(audio, (bytes, bytearray)) or not audio:
            raise RequestValidationError(
                UseCase.TRANSCRIPTION.value, ["audio must be non-empty bytes"]
            )
        return self.orchestrator.transcribe(bytes(audio))

    def generate_questions(
        self,
        mock_type: str,
        role_or_subject: str,
        subjects_or_topics: List[str],
        duration: float,
        companies: Optional[List[str]] = None,
    ) -> GenerationResult:
        return self.generate(
            UseCase.QUESTIONS,
            {
                "mock_type": mock_type,
                "role_or_subject": role_or_subject,
                "subjects_or_topics": subjects_or_topics,
                "companies": companies or [],
                "duration": duration,
            },
        )

    def generate_quiz(
        self,
        topic: str,
        num_questions: int = 5,
        difficulty: str = "medium",
        language: str = "en",
    ) -> GenerationResult:
        return self.generate(
            UseCase.QUIZ,
            {
                "topic": topic,
                "num_questions": num_questions,
                "difficulty": difficulty,
                "language": language,
            },
        )

    def generate_feedback(
        self, answer: str, question: str, job_role: str
    ) -> GenerationResult:
        return self.generate(
            UseCase.FEEDBACK,
            {"answer": answer, "question": question, "job_role": job_role},
        )

    def generate_follow_up(
        self, last_question: str, user_answer: str
    ) -> GenerationResult:
        return self.generate(
            UseCase.FOLLOW_UP,
            {"last_question": last_question, "user_answer": user_answer},
        )

    def generate_study_plan(
        self,
        goal: str,
        hours_per_day: float,
        days_per_week: int,
        skill_level: str,
        total_duration_weeks: int,
    ) -> GenerationResult:
        return self.generate(
            UseCase.STUDY_PLAN,
            {
                "goal": goal,
                "hours_per_day": hours_per_day,
                "days_per_week": days_per_week,
                "skill_level": skill_level,
                "total_duration_weeks": total_duration_weeks,
            },
        )

    def parse_job_description(self, job_description: str) -> GenerationResult:
        return self.generate(
            UseCase.JOB_DESCRIPTION, {"job_description": job_description}
        )

    def parse_resume_text(self, resume_text: str) -> GenerationResult:
        return self.generate(UseCase.RESUME_PARSE, {"resume_text": resume_text})

    def optimize_resume(
        self, job_description: str, resume: Mapping[str, Any]
    ) -> GenerationResult:
        return self.generate(
            UseCase.RESUME,
            {"job_description": job_description, "resume": dict(resume)},
        )

    def rewrite_resume(self, job_description: str, resume_text: str) -> GenerationResult:
        return self.generate(
            UseCase.RESUME_REWRITE,
            {"job_description": job_description, "resume_text": resume_text},
        )

    def process_resume(
        self,
        job_description: str,
        resume: Union[str, Mapping[str, Any]],
        output_format: str = "json",
    ) -> ResumeOptimization:
        """Tailor a resume to a job description.

        With ``output_format="json"`` a plain-text resume is first parsed
        into structured form, then optimized. With ``"text"`` the plain
        text is rewritten directly.

        Args:
            job_description: Target job description
            resume: Plain-text resume or structured resume mapping
            output_format: "json" or "text"

        Returns:
            ResumeOptimization with contact details and the tailored resume

        Raises:
            RequestValidationError: On missing input, an unsupported format,
                or structured input with the text format
            ExhaustedError: If a required provider chain is exhausted
        """
        use_case = UseCase.RESUME.value
        if output_format not in OUTPUT_FORMATS:
            raise RequestValidationError(
                use_case,
                [f"output_format must be one of {list(OUTPUT_FORMATS)}, got '{output_format}'"],
            )
        if not job_description or not resume:
            raise RequestValidationError(
                use_case, ["both job_description and resume are required"]
            )

        if isinstance(resume, str):
            personal_info = extract_personal_info(resume)
        elif isinstance(resume, Mapping):
            personal_info = _personal_info_from_structured(resume)
        else:
            raise RequestValidationError(
                use_case, ["resume must be plain text or a mapping"]
            )

        if output_format == "text":
            if not isinstance(resume, str):
                raise RequestValidationError(
                    use_case, ["text output requires a plain-text resume"]
                )
            rewritten = self.rewrite_resume(job_description, resume)
            logger.info(f"Rewrote resume as text via {rewritten.provider}")
            return ResumeOptimization(personal_info=personal_info, text=rewritten.value)

        structured: Dict[str, Any]
        if isinstance(resume, str):
            parsed = self.parse_resume_text(resume)
            logger.info(f"Parsed plain-text resume via {parsed.provider}")
            structured = parsed.value.model_dump()
        else:
            structured = {
                key: value
                for key, value in resume.items()
                if key not in ("personal_info", "personalInfo")
            }

        optimized = self.optimize_resume(job_description, structured)
        logger.info(f"Optimized resume via {optimized.provider}")
        result: StructuredResume = optimized.value
        return ResumeOptimization(personal_info=personal_info, resume=result)
