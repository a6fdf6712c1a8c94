"""Quiz tool: validates a quiz question and hands it to the client."""

from __future__ import annotations

from mathtutor.tools.models import QuizOutput, QuizSpec
from mathtutor.tools.registry import RegisteredTool

GENERATE_QUIZ = "generate_quiz"


def _generate_quiz(args: QuizSpec) -> QuizOutput:
    return QuizOutput(quiz=args)


QUIZ_TOOL = RegisteredTool(
    name=GENERATE_QUIZ,
    description=(
        "Generates a quiz question that tests understanding of the topic. "
        "Use mcq with options for multiple choice, or fillInBlank."
    ),
    args_model=QuizSpec,
    handler=_generate_quiz,
)
