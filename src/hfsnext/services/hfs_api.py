"""HFS backend API.

One coroutine per backend operation. Each resolves its endpoint, issues a
single GET through the transport, checks the envelope and returns the
payload (reshaped where the operation calls for it). Transport and
envelope failures propagate to the caller.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from pydantic import TypeAdapter, ValidationError

from hfsnext.services.endpoints import EndpointRegistry, Operation
from hfsnext.services.models import ApiEnvelope, ExamDetail, SubjectExamList
from hfsnext.services.transport import HFSTransport
from hfsnext.shared.constants import EnvelopeFields, FallbackMessages
from hfsnext.shared.errors import (
    ErrorCode,
    ErrorContext,
    HFSParsingError,
    create_api_error,
)
from hfsnext.shared.logging import log_operation_start

logger = logging.getLogger(__name__)

_SUBJECT_LISTS = TypeAdapter(list[SubjectExamList])
_URL_LIST = TypeAdapter(list[str])


class HFSApi:
    """Typed access to every HFS backend operation.

    Args:
        transport: HTTP transport issuing the requests
        registry: Endpoint registry resolving operation URLs
    """

    def __init__(
        self,
        transport: HFSTransport,
        registry: EndpointRegistry | None = None,
    ) -> None:
        self.transport = transport
        self.registry = registry or EndpointRegistry(transport.settings.base_url)

    async def request(
        self,
        operation: Operation,
        token: str,
        fallback_message: str,
        params: Mapping[str, Any] | None = None,
    ) -> Any:
        """Fetch one operation and return its envelope payload.

        Raises:
            EndpointResolutionError: If the URL cannot be built
            HFSNetworkError: On transport failure
            HFSParsingError: If the body is not an envelope
            HFSApiError: If the envelope has ``ok: false``
        """
        url = self.registry.resolve(operation, params)
        log_operation_start(logger, operation.value, {"url": url})

        envelope: ApiEnvelope = await self.transport.get_envelope(
            url,
            token,
            operation=operation.value,
        )
        if not envelope.ok:
            raise create_api_error(envelope.err_msg, fallback_message, operation.value)
        return envelope.payload

    async def fetch_exam_subjects(self, token: str) -> list[SubjectExamList]:
        """Per-subject exam lists, as returned by the backend."""
        payload = await self.request(Operation.EXAM_LIST, token, FallbackMessages.EXAM_LIST)
        return _validate(_SUBJECT_LISTS, payload, Operation.EXAM_LIST)

    async def fetch_user_snapshot(self, token: str) -> Any:
        return await self.request(
            Operation.USER_SNAPSHOT,
            token,
            FallbackMessages.USER_SNAPSHOT,
        )

    async def fetch_exam_overview(self, token: str, exam_id: str | int) -> Any:
        return await self.request(
            Operation.EXAM_OVERVIEW,
            token,
            FallbackMessages.EXAM_OVERVIEW,
            {"examId": exam_id},
        )

    async def fetch_exam_detail(self, token: str, exam_id: str | int) -> ExamDetail:
        """Exam overview narrowed to its score fields."""
        payload = await self.fetch_exam_overview(token, exam_id)
        return _validate(ExamDetail, payload, Operation.EXAM_OVERVIEW)

    async def fetch_exam_overview_v4(self, token: str, exam_id: str | int) -> Any:
        return await self.request(
            Operation.EXAM_OVERVIEW_V4,
            token,
            FallbackMessages.EXAM_OVERVIEW_V4,
            {"examId": exam_id},
        )

    async def fetch_last_exam_overview(self, token: str) -> Any:
        return await self.request(
            Operation.LAST_EXAM_OVERVIEW,
            token,
            FallbackMessages.LAST_EXAM_OVERVIEW,
        )

    async def fetch_exam_rank_info(self, token: str, exam_id: str | int) -> Any:
        return await self.request(
            Operation.EXAM_RANK_INFO,
            token,
            FallbackMessages.EXAM_RANK_INFO,
            {"examId": exam_id},
        )

    async def fetch_paper_rank_info(
        self,
        token: str,
        exam_id: str | int,
        paper_id: str,
    ) -> Any:
        return await self.request(
            Operation.PAPER_RANK_INFO,
            token,
            FallbackMessages.PAPER_RANK_INFO,
            {"examId": exam_id, "paperId": paper_id},
        )

    async def fetch_answer_pictures(
        self,
        token: str,
        exam_id: str | int,
        paper_id: str,
        pid: str,
    ) -> list[str]:
        """Answer-sheet picture URLs of one paper (the payload's ``url`` array)."""
        payload = await self.request(
            Operation.ANSWER_PICTURE,
            token,
            FallbackMessages.ANSWER_PICTURE,
            {"examId": exam_id, "paperId": paper_id, "pid": pid},
        )
        if not isinstance(payload, dict):
            raise HFSParsingError(
                ErrorCode.INVALID_RESPONSE,
                "Answer picture payload is not an object",
                ErrorContext(operation=Operation.ANSWER_PICTURE.value),
            )
        return _validate(_URL_LIST, payload.get(EnvelopeFields.PICTURE_URLS), Operation.ANSWER_PICTURE)


def _validate(schema: Any, payload: Any, operation: Operation) -> Any:
    """Validate a payload against a model or TypeAdapter."""
    try:
        if isinstance(schema, TypeAdapter):
            return schema.validate_python(payload)
        return schema.model_validate(payload)
    except ValidationError as e:
        raise HFSParsingError(
            ErrorCode.INVALID_RESPONSE,
            f"Unexpected {operation.value} payload: {e.error_count()} validation error(s)",
            ErrorContext(operation=operation.value),
            original_error=e,
        ) from e
