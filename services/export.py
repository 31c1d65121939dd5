from __future__ import annotations

import csv
import dataclasses
import io
import json

from models.analysis import AnalysisResult, GraphPoint

GRAPH_COLUMNS = [f.name for f in dataclasses.fields(GraphPoint)]


def to_json(result: AnalysisResult, indent: int | None = 2) -> str:
    """Full analysis as a JSON document."""
    return json.dumps(result.to_dict(), indent=indent, default=str)


def graph_to_csv(points: list[GraphPoint]) -> str:
    """Graph series as CSV, one row per day offset; missing values left blank."""
    buf = io.StringIO()
    writer = csv.DictWriter(buf, fieldnames=GRAPH_COLUMNS, lineterminator="\n")
    writer.writeheader()
    for point in points:
        row = dataclasses.asdict(point)
        writer.writerow({k: "" if v is None else v for k, v in row.items()})
    return buf.getvalue()
