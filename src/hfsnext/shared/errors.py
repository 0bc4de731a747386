"""hfsnext Error Handling Module

This module defines the error handling system for hfsnext, providing
structured error classes with context information and user-friendly messages.

The error hierarchy follows these principles:
- One Source of Truth: All error codes are defined in ErrorCode enum
- Structured Context: ErrorContext provides additional information
- Proper Exception Chaining: Original exceptions are preserved

Failure taxonomy used by the data layer:
- Transport failures (network, DNS, timeout) -> HFSNetworkError
- Envelope failures (``ok: false``) -> HFSApiError
- Malformed responses -> HFSParsingError
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Union

# Type alias for primitive context values (str, int, float, bool only)
PrimitiveContextValue = Union[str, int, float, bool]

# Keys masked in safe_dict so credentials never reach the logs
SAFE_DICT_MASK_KEYS: tuple[str, ...] = ("token",)


class ErrorCode(str, Enum):
    """Error codes for hfsnext.

    This enum serves as the single source of truth for all error codes
    used throughout the package.
    """

    # Network and API Errors
    NETWORK_ERROR = "NETWORK_ERROR"
    API_TIMEOUT = "API_TIMEOUT"
    API_SERVER_ERROR = "API_SERVER_ERROR"
    API_ENVELOPE_FAILED = "API_ENVELOPE_FAILED"
    INVALID_RESPONSE = "INVALID_RESPONSE"

    # Endpoint Registry Errors
    UNKNOWN_OPERATION = "UNKNOWN_OPERATION"
    UNRESOLVED_PLACEHOLDER = "UNRESOLVED_PLACEHOLDER"

    # Authentication
    MISSING_TOKEN = "MISSING_TOKEN"  # noqa: S105  # nosec B105 - Error code constant

    # Configuration Errors
    CONFIG_ERROR = "CONFIG_ERROR"

    # CLI Errors
    CLI_INVALID_ARGUMENTS = "CLI_INVALID_ARGUMENTS"
    CLI_UNEXPECTED_ERROR = "CLI_UNEXPECTED_ERROR"


def _coerce_primitives(value: Any | None) -> dict[str, PrimitiveContextValue] | None:
    """Coerce additional_data values to primitives.

    Enum members become their value. Anything else that is not a primitive
    raises TypeError.

    Args:
        value: Input dictionary or None

    Returns:
        Dictionary with primitive values only, or None

    Raises:
        TypeError: If value is not a dict or contains unconvertible types
    """
    if value is None:
        return None

    if not isinstance(value, dict):
        error_msg = f"additional_data must be dict, got {type(value).__name__}"
        raise TypeError(error_msg)

    coerced: dict[str, PrimitiveContextValue] = {}
    for key, val in value.items():
        if isinstance(val, Enum):
            coerced[key] = val.value
        elif isinstance(val, (str, int, float, bool)):
            coerced[key] = val
        else:
            error_msg = (
                f"Cannot coerce {type(val).__name__} to primitive type. "
                f"Only str, int, float, bool, Enum are allowed."
            )
            raise TypeError(error_msg)

    return coerced


@dataclass(frozen=True)
class ErrorContext:
    """Context information for errors.

    Only primitive types (str, int, float, bool) are allowed in
    additional_data to ensure safe serialization.

    Attributes:
        operation: Optional operation name that caused the error
        url: Optional request URL associated with the error
        additional_data: Optional dict with primitive values only
    """

    operation: str | None = None
    url: str | None = None
    additional_data: dict[str, PrimitiveContextValue] | None = None

    def __post_init__(self) -> None:
        """Post-initialization validation and coercion."""
        if self.additional_data is not None:
            coerced = _coerce_primitives(self.additional_data)
            object.__setattr__(self, "additional_data", coerced)

    def safe_dict(self, *, mask_keys: tuple[str, ...] | None = None) -> dict[str, Any]:
        """Export context as dict with credential masking.

        Args:
            mask_keys: Keys removed from additional_data. Defaults to SAFE_DICT_MASK_KEYS.

        Returns:
            Dictionary with masked fields and a guaranteed additional_data key.

        Example:
            >>> context = ErrorContext(operation="examList", additional_data={"token": "abc"})
            >>> context.safe_dict()
            {'operation': 'examList', 'additional_data': {}}
        """
        if mask_keys is None:
            mask_keys = SAFE_DICT_MASK_KEYS

        data: dict[str, Any] = {}
        if self.operation is not None:
            data["operation"] = self.operation
        if self.url is not None:
            data["url"] = self.url

        data["additional_data"] = {
            key: val
            for key, val in (self.additional_data or {}).items()
            if key not in mask_keys
        }
        return data


class HFSError(Exception):
    """Base exception class for all hfsnext errors."""

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        context: ErrorContext | None = None,
        original_error: Exception | None = None,
    ) -> None:
        """Initialize HFSError.

        Args:
            code: Error code from ErrorCode enum
            message: Human-readable error message
            context: Additional context information
            original_error: Original exception that caused this error
        """
        self.code = code
        self.message = message
        self.context = context or ErrorContext()
        self.original_error = original_error

        super().__init__(f"{code.value}: {message}")

    def __str__(self) -> str:
        """Return string representation of the error."""
        return f"{self.code.value}: {self.message}"

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging with credential masking."""
        return {
            "code": self.code.value,
            "message": self.message,
            "context": self.context.safe_dict(),
            "original_error": str(self.original_error) if self.original_error else None,
        }


class DomainError(HFSError):
    """Domain-specific errors.

    Raised when a request cannot be formed or a response violates the
    expected data contract.
    """


class InfrastructureError(HFSError):
    """Infrastructure-related errors.

    These errors occur when interacting with the backend over the network.
    """


class ApplicationError(HFSError):
    """Application-level errors (configuration, command handling)."""


class HFSNetworkError(InfrastructureError):
    """Transport failure: connection errors, DNS failures, timeouts.

    Carries no payload. The HTTP status is recorded when one was received.
    """

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        context: ErrorContext | None = None,
        original_error: Exception | None = None,
        status: int | None = None,
    ) -> None:
        super().__init__(code, message, context, original_error)
        self.status = status


class HFSApiError(InfrastructureError):
    """Envelope failure: the backend answered with ``ok: false``.

    ``err_msg`` is the backend-supplied message (may be None); ``message``
    is that message or the operation's fallback text.
    """

    def __init__(
        self,
        message: str,
        context: ErrorContext | None = None,
        err_msg: str | None = None,
    ) -> None:
        super().__init__(ErrorCode.API_ENVELOPE_FAILED, message, context)
        self.err_msg = err_msg


class HFSParsingError(DomainError):
    """The response body is not valid JSON or not a valid envelope/payload."""


class EndpointResolutionError(DomainError):
    """A URL could not be built from the endpoint registry."""


class CliError(ApplicationError):
    """CLI-specific error with an exit code."""

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        context: ErrorContext | None = None,
        original_error: Exception | None = None,
        command: str | None = None,
        exit_code: int = 1,
    ):
        super().__init__(code, message, context, original_error)
        self.command = command
        self.exit_code = exit_code


# Convenience functions for common error scenarios
def create_api_error(
    err_msg: str | None,
    fallback: str,
    operation: str | None = None,
) -> HFSApiError:
    """Create an envelope error, preferring the backend message over the fallback."""
    context = ErrorContext(operation=operation)
    return HFSApiError(err_msg or fallback, context, err_msg=err_msg)


def create_config_error(
    message: str,
    operation: str | None = None,
    original_error: Exception | None = None,
) -> ApplicationError:
    """Create a configuration error with context."""
    context = ErrorContext(operation=operation)
    return ApplicationError(
        ErrorCode.CONFIG_ERROR,
        message,
        context,
        original_error,
    )


def create_cli_error(
    message: str,
    command: str | None = None,
    original_error: Exception | None = None,
    exit_code: int = 1,
    code: ErrorCode = ErrorCode.CLI_UNEXPECTED_ERROR,
) -> CliError:
    """Create a CLI error with context."""
    additional_data: dict[str, PrimitiveContextValue] | None = (
        {"command": command} if command else None
    )
    context = ErrorContext(
        operation="cli",
        additional_data=additional_data,
    )
    return CliError(
        code,
        message,
        context,
        original_error,
        command,
        exit_code,
    )
