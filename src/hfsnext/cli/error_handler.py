"""
CLI Error Handling Utilities

Consistent error output and exit codes for every command.
"""

from __future__ import annotations

import json
import logging
import sys
from typing import Any

from hfsnext.shared.errors import (
    ApplicationError,
    CliError,
    DomainError,
    HFSError,
    InfrastructureError,
    create_cli_error,
)

logger = logging.getLogger(__name__)


def format_json_output(
    command: str,
    *,
    success: bool,
    errors: list[str] | None = None,
    data: Any = None,
) -> str:
    """Format a command result or error as a JSON document."""
    output: dict[str, Any] = {
        "success": success,
        "command": command,
    }

    if errors:
        output["errors"] = errors

    if data is not None:
        output["data"] = data

    return json.dumps(output, indent=2, ensure_ascii=False, default=str)


def handle_cli_error(
    error: Exception,
    command: str,
    *,
    json_output: bool = False,
) -> int:
    """Log and print an error, returning the exit code for the command."""
    cli_error = _map_error_to_cli_error(error, command)

    if isinstance(error, CliError):
        logger.debug("Command %s stopped: %s", command, cli_error.message)
    else:
        logger.error(
            "CLI error in %s: %s",
            command,
            cli_error.message,
            extra={"context": {"command": command, "error_type": type(error).__name__}},
        )

    if json_output:
        sys.stdout.write(
            format_json_output(
                command,
                success=False,
                errors=[cli_error.message],
                data={
                    "error_code": _code_of(error, cli_error),
                    "error_type": type(error).__name__,
                    "exit_code": cli_error.exit_code,
                },
            )
            + "\n"
        )
    else:
        sys.stderr.write(f"Error: {cli_error.message}\n")

    return cli_error.exit_code


def _code_of(error: Exception, cli_error: CliError) -> str:
    if isinstance(error, HFSError):
        return error.code.value
    return cli_error.code.value


def _map_error_to_cli_error(error: Exception, command: str) -> CliError:
    """Map exception types to CLI errors."""
    if isinstance(error, CliError):
        return error

    if isinstance(error, ApplicationError):
        return create_cli_error(
            message=f"Application error: {error.message}",
            command=command,
            original_error=error,
        )

    if isinstance(error, InfrastructureError):
        return create_cli_error(
            message=f"Backend error: {error.message}",
            command=command,
            original_error=error,
        )

    if isinstance(error, DomainError):
        return create_cli_error(
            message=f"Request error: {error.message}",
            command=command,
            original_error=error,
        )

    if isinstance(error, KeyboardInterrupt):
        return create_cli_error(
            message="Command interrupted by user",
            command=command,
            original_error=error,
            exit_code=130,
        )

    return create_cli_error(
        message=f"Unexpected error: {error}",
        command=command,
        original_error=error,
    )
