"""Chart tool: turns labelled data points into a chart configuration."""

from __future__ import annotations

from typing import Any

from mathtutor.tools.models import ChartArgs, ChartOutput
from mathtutor.tools.registry import RegisteredTool

GET_CHART = "get_chart"


def build_chart(chart_type: str, data: list[float], labels: list[str]) -> dict[str, Any]:
    """Chart.js-style configuration with a single dataset."""
    return {
        "type": chart_type,
        "data": {
            "labels": list(labels),
            "datasets": [
                {
                    "label": "Generated Chart",
                    "data": list(data),
                    "backgroundColor": "rgba(75, 192, 192, 0.2)",
                    "borderColor": "rgba(75, 192, 192, 1)",
                    "borderWidth": 1,
                },
            ],
        },
        "options": {
            "responsive": True,
            "plugins": {
                "legend": {
                    "display": True,
                },
            },
        },
    }


def _get_chart(args: ChartArgs) -> ChartOutput:
    return ChartOutput(chart=build_chart(args.type, args.data, args.labels))


CHART_TOOL = RegisteredTool(
    name=GET_CHART,
    description=(
        "Generates a chart for mathematical visualizations: function plots, "
        "statistical distributions, numerical comparisons."
    ),
    args_model=ChartArgs,
    handler=_get_chart,
)
