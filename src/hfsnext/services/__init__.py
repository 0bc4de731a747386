"""
hfsnext Services Module

The data layer: endpoint registry, HTTP transport, backend API, exam list
aggregation, query cache and the gated queries built on them.
"""

from .aggregator import ExamListAggregator, merge_subject_exams
from .cache import QueryCache, QueryKeys, QueryResult, QueryStatus
from .client import HFSClient, create_hfs_client
from .endpoints import EndpointRegistry, Operation
from .hfs_api import HFSApi
from .models import ApiEnvelope, ExamDetail, ExamRecord, ExamSummary, SubjectExamList
from .queries import HFSQueries
from .transport import HFSTransport

__all__ = [
    "ApiEnvelope",
    "EndpointRegistry",
    "ExamDetail",
    "ExamListAggregator",
    "ExamRecord",
    "ExamSummary",
    "HFSApi",
    "HFSClient",
    "HFSQueries",
    "HFSTransport",
    "Operation",
    "QueryCache",
    "QueryKeys",
    "QueryResult",
    "QueryStatus",
    "SubjectExamList",
    "create_hfs_client",
    "merge_subject_exams",
]
