"""Tests for exam list aggregation."""

import asyncio
import logging
from unittest.mock import MagicMock

import pytest

from hfsnext.config.models.app_settings import DisplaySettings
from hfsnext.services.aggregator import (
    ExamListAggregator,
    make_timestamp_formatter,
    merge_subject_exams,
)
from hfsnext.services.models import ExamDetail, SubjectExamList
from hfsnext.shared.constants import FallbackMessages
from hfsnext.shared.errors import ErrorCode, HFSApiError, HFSNetworkError

EXAM_LIST_PATH = "/v2/wrong-items/overview"

# 2024-03-01 08:00 and 2024-03-15 08:00 at UTC+8
MARCH_1 = 1709251200000
MARCH_15 = 1710460800000


def overview_path(exam_id: str) -> str:
    return f"/v3/exam/{exam_id}/overview"


def subjects(*exam_lists):
    return [{"examList": exams} for exams in exam_lists]


@pytest.fixture
def aggregator(api) -> ExamListAggregator:
    return ExamListAggregator(api)


class TestTimestampFormatter:
    def test_default_is_beijing_time(self) -> None:
        format_timestamp = make_timestamp_formatter()

        assert format_timestamp(0) == "1970-01-01 08:00"
        assert format_timestamp(MARCH_15) == "2024-03-15 08:00"

    def test_custom_offset_and_format(self) -> None:
        format_timestamp = make_timestamp_formatter(
            DisplaySettings(utc_offset_hours=0, time_format="%d/%m/%Y"),
        )

        assert format_timestamp(MARCH_15) == "15/03/2024"


class TestMergeSubjectExams:
    def test_first_occurrence_wins(self) -> None:
        lists = [
            SubjectExamList.model_validate(item)
            for item in subjects(
                [{"examId": "1", "examName": "Midterm", "examTime": MARCH_1}],
                [{"examId": "1", "examName": "Midterm (math)", "examTime": MARCH_15}],
            )
        ]

        merged = merge_subject_exams(lists, str)

        assert len(merged) == 1
        assert merged[0].name == "Midterm"
        assert merged[0].exam_time == MARCH_1

    def test_sorted_newest_first_with_stable_ties(self) -> None:
        lists = [
            SubjectExamList.model_validate(item)
            for item in subjects(
                [
                    {"examId": "a", "examName": "A", "examTime": MARCH_1},
                    {"examId": "b", "examName": "B", "examTime": MARCH_15},
                ],
                [{"examId": "c", "examName": "C", "examTime": MARCH_1}],
            )
        ]

        merged = merge_subject_exams(lists, str)

        assert [exam.exam_id for exam in merged] == ["b", "a", "c"]

    def test_released_uses_formatter(self) -> None:
        lists = [
            SubjectExamList.model_validate(item)
            for item in subjects([{"examId": 9, "examName": "N", "examTime": MARCH_15}])
        ]

        merged = merge_subject_exams(lists, lambda ms: f"t{ms}")

        assert merged[0].exam_id == "9"
        assert merged[0].released == f"t{MARCH_15}"
        assert merged[0].score == "-"


class TestExamListAggregator:
    @pytest.mark.asyncio
    async def test_merges_sorts_and_scores(self, aggregator, backend, ok) -> None:
        backend.route(
            EXAM_LIST_PATH,
            ok(
                subjects(
                    [
                        {"examId": "1", "examName": "First", "examTime": MARCH_1},
                        {"examId": "2", "examName": "Second", "examTime": MARCH_15},
                    ],
                    [{"examId": "1", "examName": "First", "examTime": MARCH_1}],
                )
            ),
        )
        backend.route(overview_path("1"), ok({"score": 88, "manfen": 100}))
        backend.route(overview_path("2"), ok({"score": 92.5, "manfen": 150.0}))

        exams = await aggregator.aggregate("tok")

        assert [exam.exam_id for exam in exams] == ["2", "1"]
        assert exams[0].to_display_dict() == {
            "name": "Second",
            "score": "92.5/150",
            "released": "2024-03-15 08:00",
            "examId": "2",
        }
        assert exams[1].score == "88/100"
        # one list request plus one detail request per distinct exam
        assert len(backend.calls) == 3
        assert all(token == "tok" for _, token in backend.calls)

    @pytest.mark.asyncio
    async def test_failed_detail_gets_sentinel_score(
        self, aggregator, backend, ok, failed, monkeypatch, caplog
    ) -> None:
        monkeypatch.setattr(logging.getLogger("hfsnext"), "propagate", True)
        backend.route(
            EXAM_LIST_PATH,
            ok(
                subjects(
                    [
                        {"examId": "1", "examName": "A", "examTime": MARCH_1},
                        {"examId": "2", "examName": "B", "examTime": MARCH_15},
                        {"examId": "3", "examName": "C", "examTime": MARCH_1 - 1},
                    ]
                )
            ),
        )
        backend.route(overview_path("1"), ok({"score": 50, "manfen": 100}))
        backend.route(overview_path("2"), failed("考试未发布"))
        backend.route(
            overview_path("3"),
            HFSNetworkError(ErrorCode.NETWORK_ERROR, "connection reset"),
        )

        with caplog.at_level(logging.WARNING, logger="hfsnext"):
            exams = await aggregator.aggregate("tok")

        assert [(exam.exam_id, exam.score) for exam in exams] == [
            ("2", "-"),
            ("1", "50/100"),
            ("3", "-"),
        ]
        warnings = [record for record in caplog.records if record.levelno == logging.WARNING]
        assert len(warnings) == 2

    @pytest.mark.asyncio
    async def test_detail_without_score_fields_gets_sentinel(self, aggregator, backend, ok) -> None:
        backend.route(
            EXAM_LIST_PATH,
            ok(subjects([{"examId": "1", "examName": "A", "examTime": MARCH_1}])),
        )
        backend.route(overview_path("1"), ok({"rank": 3}))

        exams = await aggregator.aggregate("tok")

        assert exams[0].score == "-"
        assert not exams[0].has_score

    @pytest.mark.asyncio
    async def test_list_failure_uses_backend_message(self, aggregator, backend, failed) -> None:
        backend.route(EXAM_LIST_PATH, failed("登录已过期"))

        with pytest.raises(HFSApiError) as exc_info:
            await aggregator.aggregate("tok")

        assert exc_info.value.message == "登录已过期"
        assert len(backend.calls) == 1

    @pytest.mark.asyncio
    async def test_list_failure_falls_back_to_default_message(
        self, aggregator, backend, failed
    ) -> None:
        backend.route(EXAM_LIST_PATH, failed())

        with pytest.raises(HFSApiError) as exc_info:
            await aggregator.aggregate("tok")

        assert exc_info.value.message == FallbackMessages.EXAM_LIST
        assert exc_info.value.err_msg is None

    @pytest.mark.asyncio
    async def test_empty_list_makes_no_detail_requests(self, aggregator, backend, ok) -> None:
        backend.route(EXAM_LIST_PATH, ok([]))

        assert await aggregator.aggregate("tok") == []
        assert len(backend.calls) == 1

    @pytest.mark.asyncio
    async def test_detail_fetches_are_bounded(self) -> None:
        in_flight = 0
        peak = 0

        async def fetch_detail(token, exam_id):
            nonlocal in_flight, peak
            in_flight += 1
            peak = max(peak, in_flight)
            await asyncio.sleep(0.01)
            in_flight -= 1
            return ExamDetail(score=1, manfen=2)

        async def fetch_subjects(token):
            return [
                SubjectExamList.model_validate(item)
                for item in subjects(
                    [{"examId": str(i), "examName": str(i), "examTime": i} for i in range(8)]
                )
            ]

        api = MagicMock()
        api.fetch_exam_subjects = fetch_subjects
        api.fetch_exam_detail = fetch_detail
        aggregator = ExamListAggregator(api, concurrency=3)

        exams = await aggregator.aggregate("tok")

        assert len(exams) == 8
        assert all(exam.score == "1/2" for exam in exams)
        assert peak == 3

    def test_invalid_concurrency(self, api) -> None:
        with pytest.raises(ValueError):
            ExamListAggregator(api, concurrency=0)
