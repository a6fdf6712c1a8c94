"""Tests for the built-in tools: chart, diagram, quiz and run_python."""

import json

import pytest
from pydantic import ValidationError

from mathtutor.tools.builtin import CHART_TOOL, DIAGRAM_TOOL, QUIZ_TOOL, build_chart, create_default_registry
from mathtutor.tools.builtin.code_exec import RUN_PYTHON, create_code_exec_tool
from mathtutor.tools.models import (
    ChartArgs,
    ChartOutput,
    DiagramOutput,
    QuizOutput,
    QuizSpec,
    TextOutput,
    ToolInvocation,
)

# ─── Chart ───────────────────────────────────────────────────


class TestChart:
    def test_build_chart_config(self):
        chart = build_chart("bar", [1.0, 4.0, 9.0], ["a", "b", "c"])
        assert chart["type"] == "bar"
        assert chart["data"]["labels"] == ["a", "b", "c"]
        dataset = chart["data"]["datasets"][0]
        assert dataset["label"] == "Generated Chart"
        assert dataset["data"] == [1.0, 4.0, 9.0]
        assert dataset["borderWidth"] == 1
        assert chart["options"]["responsive"] is True
        assert chart["options"]["plugins"]["legend"]["display"] is True

    def test_labels_must_match_data(self):
        with pytest.raises(ValidationError):
            ChartArgs(type="line", data=[1, 2], labels=["only one"])

    def test_unknown_chart_type_rejected(self):
        with pytest.raises(ValidationError):
            ChartArgs(type="radar", data=[1], labels=["a"])

    def test_handler_output(self):
        output = CHART_TOOL.handler(ChartArgs(type="pie", data=[1, 2], labels=["x", "y"]))
        assert isinstance(output, ChartOutput)
        assert json.loads(output.to_model_content())["chart"]["type"] == "pie"
        assert output.to_client_payload() == {"chart": output.chart}


# ─── Diagram ─────────────────────────────────────────────────


class TestDiagramTool:
    def test_handler_normalizes(self):
        args = DIAGRAM_TOOL.parse_arguments({"code": "A-->B", "type": "flowchart"})
        output = DIAGRAM_TOOL.handler(args)
        assert isinstance(output, DiagramOutput)
        assert output.diagram == "flowchart TD\nA-->B"
        assert output.to_client_payload() == {"mermaid": "flowchart TD\nA-->B"}


# ─── Quiz ────────────────────────────────────────────────────


class TestQuiz:
    def test_mcq_with_options(self):
        quiz = QuizSpec.model_validate({
            "type": "mcq",
            "question": "What is 2 + 2?",
            "options": ["3", "4", "5"],
            "correctAnswer": "4",
        })
        assert quiz.correct_answer == "4"

    def test_mcq_requires_options(self):
        with pytest.raises(ValidationError):
            QuizSpec.model_validate({"type": "mcq", "question": "2 + 2?", "correctAnswer": "4"})

    def test_fill_in_blank_without_options(self):
        quiz = QuizSpec.model_validate({
            "type": "fillInBlank",
            "question": "The derivative of x^2 is ___",
            "correctAnswer": "2x",
        })
        assert quiz.options is None

    def test_payload_uses_wire_names(self):
        quiz = QuizSpec.model_validate({"type": "fillInBlank", "question": "q", "correctAnswer": "a"})
        output = QUIZ_TOOL.handler(quiz)
        assert isinstance(output, QuizOutput)
        assert output.to_client_payload() == {
            "quiz": {"type": "fillInBlank", "question": "q", "correctAnswer": "a"},
        }

    def test_schema_declares_wire_names(self):
        schema = QUIZ_TOOL.definition.input_schema
        assert "correctAnswer" in schema["properties"]
        assert "correctAnswer" in schema["required"]


# ─── run_python ──────────────────────────────────────────────


class TestRunPython:
    async def test_success(self, executor):
        tool = create_code_exec_tool(executor)
        output = await tool.handler(tool.parse_arguments({"code": "print(6 * 7)"}))
        assert output == TextOutput(text="42")

    async def test_rejection_is_error_text(self, executor):
        tool = create_code_exec_tool(executor)
        output = await tool.handler(tool.parse_arguments({"code": "import os"}))
        assert output.is_error is True
        assert output.text == "Invalid or unauthorized Python code"

    def test_description_mentions_limits(self, executor):
        tool = create_code_exec_tool(executor)
        assert "numpy" in tool.definition.description
        assert "5 seconds" in tool.definition.description


# ─── Default Registry ────────────────────────────────────────


class TestDefaultRegistry:
    def test_registers_four_tools(self, executor):
        registry = create_default_registry(executor)
        assert registry.tool_names == [RUN_PYTHON, "get_chart", "generate_diagram", "generate_quiz"]

    async def test_dispatch_chart(self, registry):
        output = await registry.dispatch(ToolInvocation(
            name="get_chart",
            arguments={"type": "line", "data": [0, 1, 4], "labels": ["0", "1", "2"]},
        ))
        assert isinstance(output, ChartOutput)
