"""Exam list aggregation.

Merges the per-subject exam lists into one list of exams, newest first,
and attaches each exam's score. Score lookups run concurrently and are
joined all-settled: a failed lookup leaves the sentinel score on its exam
and never affects the others.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable, Iterable
from datetime import datetime, timedelta, timezone

from hfsnext.config.models.app_settings import DisplaySettings
from hfsnext.services.hfs_api import HFSApi
from hfsnext.services.models import ExamRecord, ExamSummary, SubjectExamList
from hfsnext.shared.constants import APIConfig, BASE_MILLISECOND, DisplayConfig
from hfsnext.shared.errors import ErrorCode, ErrorContext, HFSError
from hfsnext.shared.logging import log_operation_error, log_operation_success

logger = logging.getLogger(__name__)

TimestampFormatter = Callable[[int], str]


def make_timestamp_formatter(display: DisplaySettings | None = None) -> TimestampFormatter:
    """Build a formatter for epoch-millisecond exam times."""
    display = display or DisplaySettings()
    tz = timezone(timedelta(hours=display.utc_offset_hours))

    def format_timestamp(epoch_ms: int) -> str:
        return datetime.fromtimestamp(epoch_ms / BASE_MILLISECOND, tz=tz).strftime(display.time_format)

    return format_timestamp


def merge_subject_exams(
    subjects: Iterable[SubjectExamList],
    formatter: TimestampFormatter,
) -> list[ExamSummary]:
    """Deduplicate exams across subjects and sort them newest first.

    The first subject listing an exam supplies its name and time; later
    copies are dropped. Exams with equal times keep their first-seen order.
    """
    seen: dict[str, ExamRecord] = {}
    for subject in subjects:
        for exam in subject.exam_list:
            if exam.exam_id not in seen:
                seen[exam.exam_id] = exam

    ordered = sorted(seen.values(), key=lambda exam: exam.exam_time, reverse=True)
    return [
        ExamSummary(
            exam_id=exam.exam_id,
            name=exam.exam_name,
            released=formatter(exam.exam_time),
            exam_time=exam.exam_time,
        )
        for exam in ordered
    ]


class ExamListAggregator:
    """Builds the scored exam list.

    Args:
        api: Backend API used for the list and the per-exam details
        concurrency: Maximum number of detail fetches in flight at once
        formatter: Renders ``examTime`` into the ``released`` text
    """

    def __init__(
        self,
        api: HFSApi,
        concurrency: int = APIConfig.DEFAULT_CONCURRENT_REQUESTS,
        formatter: TimestampFormatter | None = None,
    ) -> None:
        if concurrency < 1:
            msg = f"concurrency must be at least 1, got {concurrency}"
            raise ValueError(msg)

        self.api = api
        self._concurrency = concurrency
        self._formatter = formatter or make_timestamp_formatter()

    async def aggregate(self, token: str) -> list[ExamSummary]:
        """Fetch, merge and score every exam of the user.

        Raises:
            HFSError: Only when the subject-list request itself fails
        """
        start = time.perf_counter()
        subjects = await self.api.fetch_exam_subjects(token)
        exams = merge_subject_exams(subjects, self._formatter)

        scored = await self._attach_scores(token, exams)

        log_operation_success(
            logger,
            operation="aggregate_exam_list",
            duration_ms=(time.perf_counter() - start) * BASE_MILLISECOND,
            result_info={
                "subjects": len(subjects),
                "exams": len(scored),
                "scored": sum(1 for exam in scored if exam.has_score),
            },
        )
        return scored

    async def _attach_scores(self, token: str, exams: list[ExamSummary]) -> list[ExamSummary]:
        if not exams:
            return []

        semaphore = asyncio.Semaphore(self._concurrency)

        async def score_of(exam: ExamSummary) -> str:
            async with semaphore:
                detail = await self.api.fetch_exam_detail(token, exam.exam_id)
            return detail.score_text()

        results = await asyncio.gather(
            *(score_of(exam) for exam in exams),
            return_exceptions=True,
        )

        scored: list[ExamSummary] = []
        for exam, result in zip(exams, results):
            if isinstance(result, BaseException):
                self._log_detail_failure(exam, result)
                scored.append(exam.model_copy(update={"score": DisplayConfig.SENTINEL_SCORE}))
            else:
                scored.append(exam.model_copy(update={"score": result}))
        return scored

    def _log_detail_failure(self, exam: ExamSummary, error: BaseException) -> None:
        if isinstance(error, HFSError):
            hfs_error = error
        else:
            hfs_error = HFSError(
                ErrorCode.NETWORK_ERROR,
                f"Score lookup failed: {error!r}",
                ErrorContext(operation="examOverview"),
                original_error=error if isinstance(error, Exception) else None,
            )
        log_operation_error(
            logger,
            hfs_error,
            operation="aggregate_exam_score",
            additional_context={"exam_id": exam.exam_id},
            level=logging.WARNING,
        )
