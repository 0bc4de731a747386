"""HFS response models.

Pydantic models for the response envelope and the payloads the data layer
reads fields from. Payloads that are handed through untouched stay plain
dicts.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from hfsnext.shared.constants import DisplayConfig


class ApiEnvelope(BaseModel):
    """Uniform ``{ok, payload, errMsg}`` wrapper of every backend response.

    ``payload`` is meaningful only when ``ok`` is true.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    ok: bool
    payload: Any = None
    err_msg: str | None = Field(default=None, alias="errMsg")


class ExamRecord(BaseModel):
    """One exam as listed under a subject."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    exam_id: str = Field(alias="examId")
    exam_name: str = Field(default="", alias="examName")
    exam_time: int = Field(default=0, alias="examTime")

    @field_validator("exam_id", mode="before")
    @classmethod
    def coerce_exam_id(cls, value: Any) -> Any:
        # The backend sends numeric ids in some payloads
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value


class SubjectExamList(BaseModel):
    """Exams of one academic subject. Several subjects may list the same exam."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    exam_list: list[ExamRecord] = Field(default_factory=list, alias="examList")


class ExamDetail(BaseModel):
    """Score fields of an exam overview payload."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    score: float | int | str
    manfen: float | int | str

    def score_text(self) -> str:
        """Render as ``earned/possible``."""
        return DisplayConfig.SCORE_FORMAT.format(
            earned=_format_number(self.score),
            possible=_format_number(self.manfen),
        )


class ExamSummary(BaseModel):
    """Aggregated view of one exam: identity, display name, time and score."""

    exam_id: str
    name: str
    released: str
    exam_time: int
    score: str = DisplayConfig.SENTINEL_SCORE

    @property
    def has_score(self) -> bool:
        return self.score != DisplayConfig.SENTINEL_SCORE

    def to_display_dict(self) -> dict[str, str]:
        """The ``{name, score, released, examId}`` shape shown to users."""
        return {
            "name": self.name,
            "score": self.score,
            "released": self.released,
            "examId": self.exam_id,
        }


def _format_number(value: float | int | str) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)
