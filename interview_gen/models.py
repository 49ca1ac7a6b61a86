"""Data models for the generation core.

Request parameter models validate what callers send in; result models
describe the typed values extracted from provider responses.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Literal, Optional, Type

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)

from .errors import ProviderFailure


class UseCase(str, Enum):
    """Generation use cases served by the core."""

    QUESTIONS = "questions"
    QUIZ = "quiz"
    STUDY_PLAN = "study-plan"
    FEEDBACK = "feedback"
    FOLLOW_UP = "follow-up"
    RESUME = "resume"
    RESUME_PARSE = "resume-parse"
    RESUME_REWRITE = "resume-rewrite"
    JOB_DESCRIPTION = "job-description"
    TRANSCRIPTION = "transcription"


# ---------------------------------------------------------------------------
# Request parameters
# ---------------------------------------------------------------------------


class _Params(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True, extra="ignore", frozen=True)


class QuestionsParams(_Params):
    """Parameters for mock-interview question generation."""

    mock_type: str = Field(..., min_length=1)
    role_or_subject: str = Field(..., min_length=1)
    subjects_or_topics: List[str] = Field(..., min_length=1)
    companies: List[str] = Field(default_factory=list)
    duration: float = Field(..., ge=2, description="Interview length in minutes")


class QuizParams(_Params):
    """Parameters for multiple-choice quiz generation."""

    topic: str = Field(..., min_length=1)
    num_questions: int = Field(5, ge=1, le=50)
    difficulty: str = "medium"
    language: str = "en"


class FeedbackParams(_Params):
    """Parameters for scoring a spoken or written interview answer."""

    answer: str = Field(..., min_length=1)
    question: str = Field(..., min_length=1)
    job_role: str = Field(..., min_length=1)


class FollowUpParams(_Params):
    """Parameters for generating a follow-up interview question."""

    last_question: str = Field(..., min_length=5)
    user_answer: str = Field(..., min_length=5)


class StudyPlanParams(_Params):
    """Parameters for week-by-week study plan generation."""

    goal: str = Field(..., min_length=1)
    hours_per_day: float = Field(..., gt=0, le=24)
    days_per_week: int = Field(..., ge=1, le=7)
    skill_level: str = Field(..., min_length=1)
    total_duration_weeks: int = Field(..., ge=1, le=52)


class ResumeOptimizeParams(_Params):
    """Parameters for improving a structured resume against a job description."""

    job_description: str = Field(..., min_length=1)
    resume: Dict[str, Any]


class ResumeParseParams(_Params):
    """Parameters for converting a plain-text resume into structured form."""

    resume_text: str = Field(..., min_length=1)


class ResumeRewriteParams(_Params):
    """Parameters for rewriting a plain-text resume for a job description."""

    job_description: str = Field(..., min_length=1)
    resume_text: str = Field(..., min_length=1)


class JobDescriptionParams(_Params):
    """Parameters for extracting structured details from a job description."""

    job_description: str = Field(..., min_length=1)


PARAMS_MODELS: Dict[UseCase, Type[_Params]] = {
    UseCase.QUESTIONS: QuestionsParams,
    UseCase.QUIZ: QuizParams,
    UseCase.FEEDBACK: FeedbackParams,
    UseCase.FOLLOW_UP: FollowUpParams,
    UseCase.STUDY_PLAN: StudyPlanParams,
    UseCase.RESUME: ResumeOptimizeParams,
    UseCase.RESUME_PARSE: ResumeParseParams,
    UseCase.RESUME_REWRITE: ResumeRewriteParams,
    UseCase.JOB_DESCRIPTION: JobDescriptionParams,
}


# ---------------------------------------------------------------------------
# Parsed results
# ---------------------------------------------------------------------------


class QuizOptions(BaseModel):
    """The four labeled answer options of a quiz question."""

    A: str
    B: str
    C: str
    D: str


class QuizItem(BaseModel):
    """A single multiple-choice quiz question."""

    question: str = Field(..., min_length=1)
    options: QuizOptions
    answer: Literal["A", "B", "C", "D"]
    explanation: str

    @field_validator("answer", mode="before")
    @classmethod
    def normalize_answer(cls, v: Any) -> Any:
        """Accept answer keys like ' a ' or 'B)'."""
        if isinstance(v, str):
            return v.strip().rstrip(").").upper()
        return v


class SoftSkillComments(BaseModel):
    """Reviewer comments on the five soft skills judged in an answer."""

    confidence: str
    clarity: str
    filler_words: str
    tone: str
    pace: str


SCORE_MIN = 0.0
SCORE_MAX = 10.0


class Feedback(BaseModel):
    """Structured feedback on an interview answer."""

    strengths: str
    improvements: str
    overall: str
    score: float
    soft_skills: SoftSkillComments

    @field_validator("score")
    @classmethod
    def clamp_score(cls, v: float) -> float:
        """Clamp out-of-range scores into [0, 10] instead of rejecting them."""
        return min(SCORE_MAX, max(SCORE_MIN, v))


class StudyPlanWeek(BaseModel):
    """One week of a study plan."""

    week: int = Field(..., ge=1)
    topics: List[str]
    projects: List[str] = Field(default_factory=list)
    resources: List[str] = Field(default_factory=list)
    summary: str


class ResumeExperience(BaseModel):
    """One position in a structured resume."""

    company: str = ""
    role: str = ""
    duration: str = ""
    description: List[str] = Field(default_factory=list)

    @field_validator("description", mode="before")
    @classmethod
    def wrap_description(cls, v: Any) -> Any:
        if isinstance(v, str):
            return [v] if v.strip() else []
        return v


class StructuredResume(BaseModel):
    """A resume broken into the sections the optimizer works with."""

    summary: str = ""
    skills: List[str] = Field(default_factory=list)
    experience: List[ResumeExperience] = Field(default_factory=list)
    education: str = ""
    achievements: List[str] = Field(default_factory=list)

    @field_validator("education", mode="before")
    @classmethod
    def join_education(cls, v: Any) -> Any:
        """Models sometimes return education as a list of entries."""
        if isinstance(v, list) and all(isinstance(item, str) for item in v):
            return "\n".join(v)
        return v

    @model_validator(mode="after")
    def require_content(self) -> "StructuredResume":
        """Reject objects with no resume section filled in (e.g. wrong keys)."""
        if not (
            self.summary.strip()
            or self.skills
            or self.experience
            or self.education.strip()
            or self.achievements
        ):
            raise ValueError("resume has no filled-in sections")
        return self


class JobDescriptionDetails(BaseModel):
    """Key components extracted from a job description."""

    model_config = ConfigDict(populate_by_name=True)

    hard_skills: List[str] = Field(..., alias="hardSkills")
    soft_skills: List[str] = Field(..., alias="softSkills")
    responsibilities: List[str]
    tone: str
    summary: str


class SoftSkillMetrics(BaseModel):
    """Delivery metrics computed from word-level transcription tokens."""

    filler_word_count: int = Field(..., ge=0)
    average_word_confidence: Optional[float] = Field(None, ge=0.0, le=1.0)
    speaking_rate: Optional[float] = Field(
        None, ge=0.0, description="Words per second"
    )


class TranscriptResult(BaseModel):
    """Result of transcribing a spoken answer."""

    text: str
    soft_skills: Optional[SoftSkillMetrics] = None


class PersonalInfo(BaseModel):
    """Contact details pulled from the top of a resume."""

    name: str
    email: str
    mobile: str


class ResumeOptimization(BaseModel):
    """Outcome of the resume pipeline: structured resume or rewritten text."""

    personal_info: PersonalInfo
    resume: Optional[StructuredResume] = None
    text: Optional[str] = None


# ---------------------------------------------------------------------------
# Output shapes and results
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class OutputSchema:
    """Describes the shape a provider response must be extracted into.

    Attributes:
        kind: "object", "array", "lines" (numbered list) or "text"
        model: Pydantic model for each object or array element
        non_empty: Reject empty arrays
        single_line: For text, keep only the first non-blank line
    """

    kind: Literal["object", "array", "lines", "text"]
    model: Optional[Type[BaseModel]] = None
    non_empty: bool = False
    single_line: bool = False


OUTPUT_SCHEMAS: Dict[UseCase, OutputSchema] = {
    UseCase.QUESTIONS: OutputSchema(kind="lines"),
    UseCase.QUIZ: OutputSchema(kind="array", model=QuizItem, non_empty=True),
    UseCase.STUDY_PLAN: OutputSchema(
        kind="array", model=StudyPlanWeek, non_empty=True
    ),
    UseCase.FEEDBACK: OutputSchema(kind="object", model=Feedback),
    UseCase.FOLLOW_UP: OutputSchema(kind="text", single_line=True),
    UseCase.RESUME: OutputSchema(kind="object", model=StructuredResume),
    UseCase.RESUME_PARSE: OutputSchema(kind="object", model=StructuredResume),
    UseCase.RESUME_REWRITE: OutputSchema(kind="text"),
    UseCase.JOB_DESCRIPTION: OutputSchema(kind="object", model=JobDescriptionDetails),
    UseCase.TRANSCRIPTION: OutputSchema(kind="object", model=TranscriptResult),
}


@dataclass
class GenerationResult:
    """Value returned by the orchestrator for one request.

    Attributes:
        use_case: Use case that was served
        value: The parsed, typed result
        provider: Provider that produced the value ("stub" for degraded results)
        degraded: True when the value is placeholder content, not a real generation
        failures: Providers that failed before the value was produced, in order
    """

    use_case: UseCase
    value: Any
    provider: str
    degraded: bool = False
    failures: List[ProviderFailure] = field(default_factory=list)
