"""Rendering of command results."""

from __future__ import annotations

import json
from collections.abc import Sequence
from typing import Any

from rich.console import Console
from rich.table import Table

from hfsnext.services.models import ExamSummary


def render_exam_table(exams: Sequence[ExamSummary], console: Console) -> None:
    """Print exams as a table, newest first."""
    table = Table(title="Exams")
    table.add_column("Name", style="bold")
    table.add_column("Score", justify="right")
    table.add_column("Released")
    table.add_column("Exam ID", style="dim")

    for exam in exams:
        table.add_row(
            exam.name,
            exam.score if exam.has_score else "[dim]-[/dim]",
            exam.released,
            exam.exam_id,
        )

    console.print(table)


def to_json(data: Any) -> str:
    return json.dumps(data, indent=2, ensure_ascii=False, default=str)
