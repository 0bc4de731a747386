"""
User-facing Message Constants

Fallback messages raised when the backend rejects a request without an
``errMsg`` of its own, and display sentinels.
"""


class FallbackMessages:
    """Per-operation fallback error messages."""

    EXAM_LIST = "获取考试列表失败"
    USER_SNAPSHOT = "获取用户信息失败"
    EXAM_OVERVIEW = "获取考试详情失败"
    EXAM_OVERVIEW_V4 = "获取年级排名失败"
    LAST_EXAM_OVERVIEW = "获取最近考试详情失败"
    EXAM_RANK_INFO = "获取考试排名失败"
    PAPER_RANK_INFO = "获取科目排名失败"
    ANSWER_PICTURE = "获取答题卡图片失败"


class DisplayConfig:
    """Presentation of aggregated exam summaries."""

    SENTINEL_SCORE = "-"
    SCORE_FORMAT = "{earned}/{possible}"
    TIME_FORMAT = "%Y-%m-%d %H:%M"
    # Backend timestamps are Beijing time
    UTC_OFFSET_HOURS = 8
