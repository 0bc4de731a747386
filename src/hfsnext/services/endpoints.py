"""Endpoint registry for the HFS backend.

Maps logical operation names to URL templates with ``${name}``
placeholders and resolves them into absolute URLs.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from enum import Enum
from typing import Any
from urllib.parse import parse_qsl, quote, urlencode, urlsplit, urlunsplit

from hfsnext.shared.constants import APIConfig, EndpointTemplates
from hfsnext.shared.errors import EndpointResolutionError, ErrorCode, ErrorContext

_PLACEHOLDER = re.compile(r"\$\{(\w+)\}")


class Operation(str, Enum):
    """Logical backend operations."""

    LOGIN = "login"
    USER_SNAPSHOT = "userSnapshot"
    EXAM_LIST = "examList"
    EXAM_OVERVIEW = "examOverview"
    EXAM_RANK_INFO = "examRankInfo"
    ANSWER_PICTURE = "answerPicture"
    PAPER_RANK_INFO = "paperRankInfo"
    LAST_EXAM_OVERVIEW = "lastExamOverview"
    EXAM_OVERVIEW_V4 = "examOverviewV4"


def placeholders(template: str) -> list[str]:
    """Return the placeholder names of a template in order of appearance."""
    return _PLACEHOLDER.findall(template)


class EndpointRegistry:
    """Resolves operations to absolute URLs.

    Parameters that match a placeholder are substituted (URL-quoted);
    the remaining ones are appended to the query string. A placeholder
    left without a value is an error, never passed through.

    Example:
        >>> registry = EndpointRegistry("https://hfs-be.yunxiao.com")
        >>> registry.resolve(Operation.EXAM_OVERVIEW, {"examId": 12345})
        'https://hfs-be.yunxiao.com/v3/exam/12345/overview'
    """

    def __init__(
        self,
        base_url: str = APIConfig.BASE_URL,
        templates: Mapping[str, str] | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._templates = dict(templates if templates is not None else EndpointTemplates.TEMPLATES)

    def operations(self) -> list[str]:
        return list(self._templates)

    def template(self, operation: Operation | str) -> str:
        """Return the absolute, unsubstituted template of an operation.

        Raises:
            EndpointResolutionError: If the operation is not registered
        """
        name = operation.value if isinstance(operation, Operation) else operation
        try:
            return self.base_url + self._templates[name]
        except KeyError:
            raise EndpointResolutionError(
                ErrorCode.UNKNOWN_OPERATION,
                f"Unknown operation: {name}",
                ErrorContext(
                    operation=name,
                    additional_data={"known": ",".join(self._templates)},
                ),
            ) from None

    def resolve(
        self,
        operation: Operation | str,
        params: Mapping[str, Any] | None = None,
    ) -> str:
        """Build the URL of an operation.

        Args:
            operation: Operation name
            params: Placeholder and query values; None and empty strings count as missing

        Returns:
            Fully substituted absolute URL

        Raises:
            EndpointResolutionError: On an unknown operation or an unresolved placeholder
        """
        template = self.template(operation)
        values = {
            key: value
            for key, value in (params or {}).items()
            if value is not None and value != ""
        }

        missing = [name for name in placeholders(template) if name not in values]
        if missing:
            name = operation.value if isinstance(operation, Operation) else operation
            raise EndpointResolutionError(
                ErrorCode.UNRESOLVED_PLACEHOLDER,
                f"Missing value for placeholder(s) {', '.join(missing)} in {name}",
                ErrorContext(
                    operation=name,
                    url=template,
                    additional_data={"missing": ",".join(missing)},
                ),
            )

        used: set[str] = set()

        def substitute(match: re.Match[str]) -> str:
            used.add(match.group(1))
            return quote(str(values[match.group(1)]), safe="")

        url = _PLACEHOLDER.sub(substitute, template)

        extra = [(key, str(value)) for key, value in values.items() if key not in used]
        if not extra:
            return url

        parts = urlsplit(url)
        query = parse_qsl(parts.query, keep_blank_values=True) + extra
        return urlunsplit(parts._replace(query=urlencode(query)))
