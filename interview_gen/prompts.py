"""Prompt templates for interview-prep generation.

Every builder is a pure function of its (already validated) parameters:
the same inputs always produce the same prompt. The output-format
sections are strict enough that the extractor's assumptions (numbered
list, JSON array or JSON object) hold for well-behaved models.
"""

import json
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, Dict, Mapping

from .models import UseCase

if TYPE_CHECKING:
    from .request import GenerationRequest

# Percent of questions per difficulty bucket; hard takes whatever is left
EASY_PERCENT = 30
MEDIUM_PERCENT = 40

# One question per two minutes of interview
MINUTES_PER_QUESTION = 2

# Input limits that keep feedback prompts inside provider context windows
MAX_ANSWER_CHARS = 4000
MAX_QUESTION_CHARS = 500


@dataclass(frozen=True)
class DifficultySplit:
    """Number of questions per difficulty bucket."""

    easy: int
    medium: int
    hard: int

    @property
    def total(self) -> int:
        return self.easy + self.medium + self.hard


def question_count(duration: float) -> int:
    """Number of questions that fit an interview of ``duration`` minutes."""
    return int(duration // MINUTES_PER_QUESTION)


def _percent_half_up(total: int, percent: int) -> int:
    # Integer form of floor(total * percent / 100 + 0.5)
    return (total * percent + 50) // 100


def partition_difficulty(total: int) -> DifficultySplit:
    """Split ``total`` questions 30/40/30 into easy, medium and hard.

    Easy and medium are rounded half-up; the hard bucket absorbs the
    rounding remainder so the three counts always sum to ``total``.

    Args:
        total: Total number of questions

    Returns:
        DifficultySplit whose counts sum exactly to total
    """
    easy = _percent_half_up(total, EASY_PERCENT)
    medium = _percent_half_up(total, MEDIUM_PERCENT)
    return DifficultySplit(easy=easy, medium=medium, hard=total - easy - medium)


SUBJECT_FORMAT_EXAMPLES = """6. Format each question like:
   - "What is a hash table? (Data Structures)"
   - "Explain BFS. (Graph Algorithms - Amazon, 2022)\""""

MIXED_FORMAT_EXAMPLES = """6. Mix types:
   - "Tell me about a time you failed. (Behavioral)"
   - "What is a race condition? (Concurrency - Microsoft, 2021)\""""


def build_questions_prompt(params: Mapping[str, Any]) -> str:
    """Build the mock-interview question generation prompt.

    Args:
        params: Validated QuestionsParams fields

    Returns:
        Prompt asking for a plain numbered list of questions
    """
    duration = params["duration"]
    total = question_count(duration)
    split = partition_difficulty(total)
    mock_type = params["mock_type"]
    is_subject_mock = "subject" in mock_type.lower()
    companies = params.get("companies") or []

    return f"""You are a professional mock interview question generator.

Generate exactly {total} interview questions based on:
- Mock Type: {mock_type}
- Role/Subject: {params["role_or_subject"]}
- Topics: {", ".join(params["subjects_or_topics"])}
- Target Companies: {", ".join(companies) if companies else "None"}
- Interview Duration: {duration:g} minutes

### Difficulty Distribution:
- {split.easy} Easy (Fundamental concepts)
- {split.medium} Medium (Practical application)
- {split.hard} Hard (Complex problem-solving)

### Rules:
1. Start with basics, build toward complex
2. Mix technical and behavioral ({"mostly technical" if is_subject_mock else "tech + behavioral"})
3. Use short, clear questions (max 15 words)
4. Reflect realistic interview timing
5. Include company name/year if known
{SUBJECT_FORMAT_EXAMPLES if is_subject_mock else MIXED_FORMAT_EXAMPLES}

### Format Output:
- Numbered list (1. to {total})
- One question per line
- No extra text (no greetings, intros, or explanations)

Example:
1. What is OOP? (OOP - Amazon, 2022)
2. What is normalization? (DBMS - Flipkart)
3. Describe a leadership challenge. (Behavioral)

Do NOT include anything except the question list."""


QUIZ_JSON_SHAPE = [
    {
        "question": "string",
        "options": {"A": "string", "B": "string", "C": "string", "D": "string"},
        "answer": "A",
        "explanation": "string",
    }
]


def build_quiz_prompt(params: Mapping[str, Any]) -> str:
    """Build the multiple-choice quiz prompt."""
    return f"""You are a helpful quiz-generating assistant.

Generate a {params["num_questions"]}-question multiple-choice quiz about "{params["topic"]}"
(difficulty: {params["difficulty"]}) in {params["language"]}.
Return ONLY valid JSON in this exact shape:
{json.dumps(QUIZ_JSON_SHAPE, indent=2)}

Each "answer" must be one of "A", "B", "C" or "D". No markdown, no extra text."""


FEEDBACK_JSON_SHAPE = {
    "strengths": "string",
    "improvements": "string",
    "overall": "string",
    "score": "number from 0 to 10",
    "soft_skills": {
        "confidence": "string",
        "clarity": "string",
        "filler_words": "string",
        "tone": "string",
        "pace": "string",
    },
}


def build_feedback_prompt(params: Mapping[str, Any]) -> str:
    """Build the answer-feedback prompt.

    The candidate answer and the question are truncated so a long answer
    cannot blow the provider's context window.
    """
    answer = params["answer"][:MAX_ANSWER_CHARS]
    question = params["question"][:MAX_QUESTION_CHARS]

    return f"""You are an expert interview feedback assistant.

Return ONLY valid minified JSON in the exact schema below, no markdown:
{json.dumps(FEEDBACK_JSON_SHAPE)}

Role: {params["job_role"]}

Interview Question:
"{question}"

Candidate Answer:
"{answer}\""""


def build_follow_up_prompt(params: Mapping[str, Any]) -> str:
    """Build the single follow-up question prompt."""
    return f"""You are a professional technical interviewer.

You asked: "{params["last_question"]}"
The candidate answered: "{params["user_answer"]}"

Generate ONE smart, short follow-up question that:
- Probes deeper into the candidate's response
- Tests specific technical or behavioral knowledge
- Maintains a natural conversational tone
- Should be max 15 words

Return ONLY the follow-up question. No formatting. No explanations."""


STUDY_PLAN_JSON_SHAPE = [
    {
        "week": 1,
        "topics": ["string"],
        "projects": ["string"],
        "resources": ["string"],
        "summary": "string",
    }
]


def build_study_plan_prompt(params: Mapping[str, Any]) -> str:
    """Build the week-by-week study plan prompt."""
    weeks = params["total_duration_weeks"]
    return f"""You are an expert career coach. Create a {weeks}-week study plan for someone who wants to become a "{params["goal"]}".

Details:
- Skill Level: {params["skill_level"]}
- Daily Time: {params["hours_per_day"]} hours
- Days per Week: {params["days_per_week"]}

Format:
Return ONLY a pure JSON array with one entry per week (weeks 1 to {weeks}) like:
{json.dumps(STUDY_PLAN_JSON_SHAPE, indent=2)}
No markdown, no explanations."""


STRUCTURED_RESUME_SHAPE = {
    "summary": "...",
    "skills": ["..."],
    "experience": [
        {
            "company": "...",
            "role": "...",
            "duration": "...",
            "description": ["..."],
        }
    ],
    "education": "...",
    "achievements": ["..."],
}

JOB_DESCRIPTION_SHAPE = {
    "hardSkills": ["..."],
    "softSkills": ["..."],
    "responsibilities": ["..."],
    "tone": "...",
    "summary": "...",
}


def build_job_description_prompt(params: Mapping[str, Any]) -> str:
    """Build the job-description extraction prompt."""
    return f'''Extract structured details from the job description and return ONLY JSON:
{json.dumps(JOB_DESCRIPTION_SHAPE, indent=2)}

Job Description:
"""{params["job_description"]}"""'''


def build_resume_parse_prompt(params: Mapping[str, Any]) -> str:
    """Build the plain-text resume to JSON conversion prompt."""
    return f'''Convert the following resume text into JSON:
{json.dumps(STRUCTURED_RESUME_SHAPE, indent=2)}

Return ONLY the JSON object.

Resume:
"""{params["resume_text"]}"""'''


def build_resume_optimize_prompt(params: Mapping[str, Any]) -> str:
    """Build the structured resume optimization prompt."""
    resume_json = json.dumps(params["resume"], indent=2, sort_keys=True)
    return f'''You're an expert resume coach. Improve the user's resume for this job:
- Use better tone and relevant phrasing
- Keep structure: summary, skills, experience, education, achievements
- Do NOT invent experiences

Job Description:
"""{params["job_description"]}"""

User Resume:
{resume_json}

Return ONLY the improved resume in JSON with this shape:
{json.dumps(STRUCTURED_RESUME_SHAPE)}'''


def build_resume_rewrite_prompt(params: Mapping[str, Any]) -> str:
    """Build the plain-text resume rewriting prompt."""
    return f'''You are an expert resume writer.

Revise this resume to perfectly match the job description:
- Ensure ATS compatibility
- Use keywords and skills from JD
- Keep formatting clean and concise
- Remove irrelevant info
- Keep to 1-2 pages

Job Description:
"""{params["job_description"]}"""

Resume:
"""{params["resume_text"]}"""

Return ONLY the improved resume in plain text.'''


PROMPT_BUILDERS: Dict[UseCase, Callable[[Mapping[str, Any]], str]] = {
    UseCase.QUESTIONS: build_questions_prompt,
    UseCase.QUIZ: build_quiz_prompt,
    UseCase.FEEDBACK: build_feedback_prompt,
    UseCase.FOLLOW_UP: build_follow_up_prompt,
    UseCase.STUDY_PLAN: build_study_plan_prompt,
    UseCase.RESUME: build_resume_optimize_prompt,
    UseCase.RESUME_PARSE: build_resume_parse_prompt,
    UseCase.RESUME_REWRITE: build_resume_rewrite_prompt,
    UseCase.JOB_DESCRIPTION: build_job_description_prompt,
}


def build_prompt(request: "GenerationRequest") -> str:
    """Build the prompt for a validated request.

    Args:
        request: Request whose use case selects the template

    Returns:
        Provider-agnostic prompt string

    Raises:
        KeyError: If the use case has no prompt (transcription)
    """
    return PROMPT_BUILDERS[request.use_case](request.params)
