"""Tests for the error hierarchy."""

from enum import Enum

import pytest

from hfsnext.shared.errors import (
    ApplicationError,
    CliError,
    DomainError,
    EndpointResolutionError,
    ErrorCode,
    ErrorContext,
    HFSApiError,
    HFSError,
    HFSNetworkError,
    HFSParsingError,
    InfrastructureError,
    create_api_error,
    create_cli_error,
    create_config_error,
)


class Color(Enum):
    RED = "red"


class TestErrorContext:
    """Test ErrorContext validation and masking."""

    def test_enum_values_are_coerced(self) -> None:
        context = ErrorContext(additional_data={"color": Color.RED, "count": 2})

        assert context.additional_data == {"color": "red", "count": 2}

    def test_non_primitive_values_rejected(self) -> None:
        with pytest.raises(TypeError):
            ErrorContext(additional_data={"items": [1, 2]})

    def test_additional_data_must_be_dict(self) -> None:
        with pytest.raises(TypeError):
            ErrorContext(additional_data=["token"])  # type: ignore[arg-type]

    def test_safe_dict_masks_token(self) -> None:
        context = ErrorContext(
            operation="examList",
            url="https://hfs.test/v2/wrong-items/overview",
            additional_data={"token": "secret", "exam_id": "1"},
        )

        assert context.safe_dict() == {
            "operation": "examList",
            "url": "https://hfs.test/v2/wrong-items/overview",
            "additional_data": {"exam_id": "1"},
        }

    def test_safe_dict_always_has_additional_data(self) -> None:
        assert ErrorContext().safe_dict() == {"additional_data": {}}


class TestHFSError:
    def test_str_includes_code(self) -> None:
        error = HFSError(ErrorCode.NETWORK_ERROR, "connection reset")

        assert str(error) == "NETWORK_ERROR: connection reset"
        assert error.context == ErrorContext()

    def test_to_dict(self) -> None:
        cause = ValueError("bad json")
        error = HFSParsingError(
            ErrorCode.INVALID_RESPONSE,
            "Response body is not valid JSON",
            ErrorContext(operation="examList", additional_data={"token": "x"}),
            original_error=cause,
        )

        assert error.to_dict() == {
            "code": "INVALID_RESPONSE",
            "message": "Response body is not valid JSON",
            "context": {"operation": "examList", "additional_data": {}},
            "original_error": "bad json",
        }

    def test_hierarchy(self) -> None:
        assert issubclass(HFSNetworkError, InfrastructureError)
        assert issubclass(HFSApiError, InfrastructureError)
        assert issubclass(HFSParsingError, DomainError)
        assert issubclass(EndpointResolutionError, DomainError)
        assert issubclass(CliError, ApplicationError)

    def test_network_error_status(self) -> None:
        error = HFSNetworkError(ErrorCode.API_SERVER_ERROR, "HTTP 503", status=503)

        assert error.status == 503
        assert HFSNetworkError(ErrorCode.NETWORK_ERROR, "down").status is None


class TestFactories:
    def test_api_error_prefers_backend_message(self) -> None:
        error = create_api_error("登录已过期", "获取考试列表失败", "examList")

        assert error.code == ErrorCode.API_ENVELOPE_FAILED
        assert error.message == "登录已过期"
        assert error.err_msg == "登录已过期"
        assert error.context.operation == "examList"

    @pytest.mark.parametrize("err_msg", [None, ""])
    def test_api_error_fallback(self, err_msg) -> None:
        error = create_api_error(err_msg, "获取考试列表失败")

        assert error.message == "获取考试列表失败"

    def test_config_error(self) -> None:
        cause = OSError("denied")
        error = create_config_error("cannot read", operation="load", original_error=cause)

        assert isinstance(error, ApplicationError)
        assert error.code == ErrorCode.CONFIG_ERROR
        assert error.original_error is cause

    def test_cli_error(self) -> None:
        error = create_cli_error("bad input", command="url", exit_code=2)

        assert error.exit_code == 2
        assert error.command == "url"
        assert error.code == ErrorCode.CLI_UNEXPECTED_ERROR
        assert error.context.additional_data == {"command": "url"}
