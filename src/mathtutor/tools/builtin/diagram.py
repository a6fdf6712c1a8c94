"""Diagram tool: canonicalizes model-written Mermaid code.

Models tend to send escaped newlines, blank lines, stray `TD` lines and
doubled `graph TD` headers. normalize_diagram() cleans those up and
guarantees the text starts with the canonical header for its type.
"""

from __future__ import annotations

import re

from mathtutor.tools.models import DiagramArgs, DiagramOutput
from mathtutor.tools.registry import RegisteredTool

GENERATE_DIAGRAM = "generate_diagram"

DIAGRAM_HEADERS = {
    "flowchart": "flowchart TD",
    "sequence": "sequenceDiagram",
    "class": "classDiagram",
    "state": "stateDiagram-v2",
    "er": "erDiagram",
    "gantt": "gantt",
}

_BLANK_RUNS = re.compile(r"\n{2,}")
_TD_PREFIX = re.compile(r"^TD;", re.MULTILINE)
_TD_LINE = re.compile(r"^\s*TD\s*$", re.MULTILINE)
_DOUBLED_HEADER = re.compile(r"^(?:graph|flowchart)\s+TD\s+(?:graph|flowchart)\s+TD", re.MULTILINE)
_DOUBLED_TD = re.compile(r"^(?:graph|flowchart)\s+TD\s+TD", re.MULTILINE)


def _normalize_once(code: str, diagram_type: str, header: str) -> str:
    text = code.strip()
    text = text.replace("\\n", "\n").replace("\\\\", "\\")
    text = _BLANK_RUNS.sub("\n", text)
    text = _TD_PREFIX.sub("", text)
    text = _TD_LINE.sub("", text)

    if diagram_type == "flowchart":
        text = _DOUBLED_HEADER.sub(header, text)
        text = _DOUBLED_TD.sub(header, text)

    if not text.startswith(header):
        text = f"{header}\n{text}"
    return text


def normalize_diagram(code: str, diagram_type: str) -> str:
    """Return code with the canonical header for diagram_type.

    The cleanup pass is repeated until the text stops changing, which
    makes the function idempotent. Once the header is in place no pass
    removes it, and every later pass only shortens the text.

    Raises KeyError for an unknown diagram type.
    """
    header = DIAGRAM_HEADERS[diagram_type]
    text = _normalize_once(code, diagram_type, header)
    while True:
        again = _normalize_once(text, diagram_type, header)
        if again == text:
            return text
        text = again


def _generate_diagram(args: DiagramArgs) -> DiagramOutput:
    return DiagramOutput(diagram=normalize_diagram(args.code, args.type))


DIAGRAM_TOOL = RegisteredTool(
    name=GENERATE_DIAGRAM,
    description=(
        "Generates a Mermaid diagram: flowcharts for mathematical processes, "
        "sequence diagrams for step-by-step solutions, class diagrams for "
        "relationships between concepts."
    ),
    args_model=DiagramArgs,
    handler=_generate_diagram,
)
