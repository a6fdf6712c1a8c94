"""
mathtutor Tool System Models

Pydantic models for tool declarations, invocations, argument schemas
and tool outputs. Argument models are the single source of truth for a
tool's input: the JSON schema sent to the model service is generated
from them, and invocations are validated against them before dispatch.
"""

from __future__ import annotations

import json
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

ChartType = Literal["bar", "line", "pie"]
DiagramType = Literal["flowchart", "sequence", "class", "state", "er", "gantt"]
QuizType = Literal["mcq", "fillInBlank"]


class ToolDefinition(BaseModel):
    """A tool as declared to the model service."""
    name: str
    description: str
    input_schema: dict[str, Any] = Field(default_factory=dict)

    def to_schema(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "input_schema": self.input_schema,
        }


class ToolInvocation(BaseModel):
    """A tool call requested by the model service.

    Created from a tool_use block of a model response. The arguments are
    untrusted until the registry validates them against the tool's schema.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    arguments: dict[str, Any] = Field(default_factory=dict)
    tool_use_id: str = ""


# ─── Argument Models ────────────────────────────────────────


class _ToolArgs(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True, populate_by_name=True)


class RunPythonArgs(_ToolArgs):
    code: str = Field(description="Python code for a mathematical calculation. Print the result.")


class ChartArgs(_ToolArgs):
    type: ChartType = Field(description="Type of chart.")
    data: list[float] = Field(description="Data points for the chart.")
    labels: list[str] = Field(description="Labels for the chart data, one per data point.")

    @model_validator(mode="after")
    def _labels_match_data(self) -> ChartArgs:
        if len(self.labels) != len(self.data):
            raise ValueError(
                f"got {len(self.data)} data points but {len(self.labels)} labels"
            )
        return self


class DiagramArgs(_ToolArgs):
    code: str = Field(description="Mermaid diagram code.")
    type: DiagramType = Field(description="Type of diagram.")


class QuizSpec(_ToolArgs):
    """A quiz question, passed through to the client once validated."""
    type: QuizType = Field(description="Type of quiz: multiple choice or fill in the blank.")
    question: str = Field(min_length=1, description="The quiz question text.")
    options: list[str] | None = Field(
        default=None,
        description="Answer options. Required for mcq.",
    )
    correct_answer: str = Field(min_length=1, alias="correctAnswer", description="The correct answer.")

    @model_validator(mode="after")
    def _mcq_needs_options(self) -> QuizSpec:
        if self.type == "mcq" and not self.options:
            raise ValueError("mcq quizzes require options")
        return self


# ─── Tool Outputs ───────────────────────────────────────────


class TextOutput(BaseModel):
    """Plain text from the code runner, or a textual error from any tool."""
    kind: Literal["text"] = "text"
    text: str
    is_error: bool = False

    def to_model_content(self) -> str:
        return self.text or "(no output)"

    def to_client_payload(self) -> str:
        return self.text


class ChartOutput(BaseModel):
    """A chart configuration for the client-side renderer."""
    kind: Literal["chart"] = "chart"
    chart: dict[str, Any]

    def to_model_content(self) -> str:
        return json.dumps(self.to_client_payload())

    def to_client_payload(self) -> dict[str, Any]:
        return {"chart": self.chart}


class DiagramOutput(BaseModel):
    """Normalized Mermaid diagram text."""
    kind: Literal["diagram"] = "diagram"
    diagram: str

    def to_model_content(self) -> str:
        return json.dumps(self.to_client_payload())

    def to_client_payload(self) -> dict[str, Any]:
        return {"mermaid": self.diagram}


class QuizOutput(BaseModel):
    """A validated quiz question."""
    kind: Literal["quiz"] = "quiz"
    quiz: QuizSpec

    def to_model_content(self) -> str:
        return json.dumps(self.to_client_payload())

    def to_client_payload(self) -> dict[str, Any]:
        return {"quiz": self.quiz.model_dump(by_alias=True, exclude_none=True)}


ToolOutput = Annotated[
    Union[TextOutput, ChartOutput, DiagramOutput, QuizOutput],
    Field(discriminator="kind"),
]
