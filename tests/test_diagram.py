"""Tests for Mermaid diagram normalization."""

import pytest

from mathtutor.tools.builtin.diagram import DIAGRAM_HEADERS, normalize_diagram

SAMPLES = [
    "A-->B",
    "flowchart TD\nA-->B",
    "graph TD\nA-->B",
    "graph TD graph TD\nA-->B",
    "flowchart TD TD\nA-->B",
    "TD;A-->B",
    "A-->B\n\n\nB-->C",
    "A-->B\\nB-->C",
    "A-->B\\\\\\\\nB-->C",
    "  \n TD \nA-->B\n",
    "",
    "sequenceDiagram\nAlice->>Bob: hi",
    "participant A\\n\\nA->>A: self",
]


class TestHeaders:
    @pytest.mark.parametrize("diagram_type,header", list(DIAGRAM_HEADERS.items()))
    def test_header_prefixed(self, diagram_type, header):
        assert normalize_diagram("A-->B", diagram_type).startswith(header)

    def test_existing_header_kept_once(self):
        assert normalize_diagram("flowchart TD\nA-->B", "flowchart") == "flowchart TD\nA-->B"

    def test_doubled_header_collapsed(self):
        assert normalize_diagram("flowchart TD TD\nA-->B", "flowchart") == "flowchart TD\nA-->B"

    def test_unknown_type(self):
        with pytest.raises(KeyError):
            normalize_diagram("A-->B", "mindmap")


class TestCleanup:
    def test_escaped_newlines_unescaped(self):
        assert normalize_diagram("A-->B\\nB-->C", "flowchart") == "flowchart TD\nA-->B\nB-->C"

    def test_blank_lines_collapsed(self):
        assert normalize_diagram("A-->B\n\n\nB-->C", "flowchart") == "flowchart TD\nA-->B\nB-->C"

    def test_stray_td_removed(self):
        result = normalize_diagram("TD;A-->B", "flowchart")
        assert result == "flowchart TD\nA-->B"


class TestIdempotence:
    @pytest.mark.parametrize("diagram_type", list(DIAGRAM_HEADERS))
    @pytest.mark.parametrize("code", SAMPLES)
    def test_normalize_twice_is_normalize_once(self, code, diagram_type):
        once = normalize_diagram(code, diagram_type)
        assert normalize_diagram(once, diagram_type) == once
        assert once.startswith(DIAGRAM_HEADERS[diagram_type])
