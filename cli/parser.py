"""Command parser for CLI input."""

import shlex

from cli.models import (
    CommandRequest,
    ConfigCommand,
    MergeCommand,
    RetryCommand,
    RetryFailedCommand,
    StatusCommand,
    UploadCommand,
)


class ParseError(Exception):
    """Raised when command parsing fails."""

    pass


def parse_command(input_line: str) -> CommandRequest:
    """Parse user input into a CommandRequest object.

    Args:
        input_line: Raw user input from REPL

    Returns:
        CommandRequest object (one of Upload/Status/Retry/RetryFailed/Merge/Config)

    Raises:
        ParseError: If command syntax is invalid
    """
    if not input_line.strip():
        raise ParseError("Empty command")

    try:
        tokens = shlex.split(input_line)
    except ValueError as e:
        raise ParseError(f"Invalid syntax: {e}")

    if not tokens:
        raise ParseError("Empty command")

    command_name = tokens[0]

    if command_name == "upload":
        return _parse_upload(tokens[1:])
    elif command_name == "status":
        return _parse_no_args(tokens[1:], "status", StatusCommand)
    elif command_name == "retry":
        return _parse_retry(tokens[1:])
    elif command_name == "retry-failed":
        return _parse_no_args(tokens[1:], "retry-failed", RetryFailedCommand)
    elif command_name == "merge":
        return _parse_merge(tokens[1:])
    elif command_name == "config":
        return _parse_config(tokens[1:])
    else:
        raise ParseError(f"Unknown command: {command_name}")


def _parse_upload(args: list[str]) -> UploadCommand:
    """Parse 'upload <path> [file-id]' command."""
    if not 1 <= len(args) <= 2:
        raise ParseError("upload requires 1 or 2 arguments: <path> [file-id]")

    path = args[0]
    file_id = args[1] if len(args) > 1 else None
    return UploadCommand(path=path, file_id=file_id)


def _parse_retry(args: list[str]) -> RetryCommand:
    """Parse 'retry <index>' command."""
    if len(args) != 1:
        raise ParseError("retry requires exactly 1 argument: <index>")

    try:
        index = int(args[0])
    except ValueError:
        raise ParseError(f"retry index must be an integer, got '{args[0]}'")
    if index < 0:
        raise ParseError("retry index must be >= 0")

    return RetryCommand(index=index)


def _parse_merge(args: list[str]) -> MergeCommand:
    """Parse 'merge [file-id]' command."""
    if len(args) > 1:
        raise ParseError("merge takes at most 1 argument: [file-id]")
    return MergeCommand(file_id=args[0] if args else None)


def _parse_config(args: list[str]) -> ConfigCommand:
    """Parse 'config [key value]' command."""
    if not args:
        return ConfigCommand()
    if len(args) != 2:
        raise ParseError("config takes no arguments or exactly 2: <key> <value>")
    return ConfigCommand(key=args[0], value=args[1])


def _parse_no_args(args: list[str], name: str, command_type):
    if args:
        raise ParseError(f"{name} takes no arguments")
    return command_type()
