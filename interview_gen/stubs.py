"""Placeholder content for use cases allowed to degrade.

Only low-stakes use cases get a stub. Feedback, study plans and resume
output are never faked; when their providers are exhausted the caller
gets an ExhaustedError instead.
"""

from typing import Any, Callable, Dict, List

from .models import QuizItem, QuizOptions, UseCase
from .request import GenerationRequest

STUB_PROVIDER_NAME = "stub"

STUB_FOLLOW_UP_QUESTION = "Can you explain that further or give a real-world example?"
STUB_EXPLANATION = "Placeholder explanation."

DegradedResponder = Callable[[GenerationRequest], Any]


def quiz_stub(request: GenerationRequest) -> List[QuizItem]:
    """Build ``num_questions`` placeholder quiz items about the topic."""
    topic = request.params["topic"]
    return [
        QuizItem(
            question=f"Stub Q{index}: What is {topic}?",
            options=QuizOptions(
                A="Option A", B="Option B", C="Option C", D="Option D"
            ),
            answer="A",
            explanation=STUB_EXPLANATION,
        )
        for index in range(1, request.params["num_questions"] + 1)
    ]


def follow_up_stub(request: GenerationRequest) -> str:
    return STUB_FOLLOW_UP_QUESTION


DEGRADED_RESPONDERS: Dict[UseCase, DegradedResponder] = {
    UseCase.QUIZ: quiz_stub,
    UseCase.FOLLOW_UP: follow_up_stub,
}
