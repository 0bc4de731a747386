"""
HFS API Constants

Base URL, transport defaults and the URL templates of every backend
operation.
"""

from typing import ClassVar


class APIConfig:
    """Transport defaults for the HFS backend."""

    BASE_URL = "https://hfs-be.yunxiao.com"

    # Timeouts (seconds)
    DEFAULT_TIMEOUT = 15.0
    CONNECT_TIMEOUT = 5.0

    # Per-exam detail fetches allowed in flight at once
    DEFAULT_CONCURRENT_REQUESTS = 10

    USER_AGENT = "hfsnext/0.1.0"
    ACCEPT_JSON = "application/json"
    AUTH_HEADER = "Authorization"
    AUTH_SCHEME = "Bearer"


class EndpointTemplates:
    """URL templates keyed by operation name, relative to APIConfig.BASE_URL."""

    TEMPLATES: ClassVar[dict[str, str]] = {
        "login": "/v2/users/sessions",
        "userSnapshot": "/v2/user-center/user-snapshot",
        "examList": "/v2/wrong-items/overview",
        "examOverview": "/v3/exam/${examId}/overview",
        "examRankInfo": "/v3/exam/${examId}/rank-info",
        "answerPicture": "/v3/exam/${examId}/papers/${paperId}/answer-picture?pid=${pid}",
        "paperRankInfo": "/v3/exam/${examId}/papers/${paperId}/rank-info",
        "lastExamOverview": "/v2/students/last-exam-overview",
        "examOverviewV4": "/v4/exam/overview",
    }


class EnvelopeFields:
    """Payload fields the API reshapes."""

    PICTURE_URLS = "url"
