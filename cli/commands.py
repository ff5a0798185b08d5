"""Command handler functions for CLI operations."""

import sys
from pathlib import Path
from typing import Optional

from common.exceptions import SPFEException
from common.logging_config import get_logger
from common.types import DONE, ChunkState
from cli.byte_sources import FileByteSource
from cli.config import Config
from cli.constants import GREEN, RED, RESET
from cli.models import (
    ConfigCommand,
    MergeCommand,
    RetryCommand,
    RetryFailedCommand,
    StatusCommand,
    UploadCommand,
)
from cli.orchestrator import UploadOrchestrator
from cli.store_client import StoreClient
from cli.utils import format_chunk_table, format_file_size, format_manifest, summarize_states

logger = get_logger(__name__)

CONFIG_PATH = Path.home() / '.spfe' / 'config.json'

_config: Optional[Config] = None
_client: Optional[StoreClient] = None
_orchestrator: Optional[UploadOrchestrator] = None


def get_config() -> Config:
    global _config
    if _config is None:
        _config = Config(CONFIG_PATH)
    return _config


def get_client() -> StoreClient:
    """
    Get or create global StoreClient instance.

    Returns:
        StoreClient instance
    """
    global _client
    if _client is None:
        logger.debug("Creating new StoreClient instance")
        _client = StoreClient(get_config())
    return _client


def get_orchestrator() -> UploadOrchestrator:
    """
    Get or create the global UploadOrchestrator, sending through the StoreClient.

    Returns:
        UploadOrchestrator instance
    """
    global _orchestrator
    if _orchestrator is None:
        _orchestrator = UploadOrchestrator(get_client(), on_state_change=print_chunk_progress)
    return _orchestrator


def reset_client() -> None:
    """Drop the cached client and orchestrator so the next command picks up new config."""
    global _client, _orchestrator
    if _client is not None:
        _client.close()
    _client = None
    _orchestrator = None


def print_chunk_progress(state: ChunkState) -> None:
    """Print one line whenever a chunk reaches done or error."""
    if not state.is_terminal:
        return
    if state.status == DONE:
        line = f"  chunk {state.index}: {GREEN}done{RESET} {state.partial.hash[:16]}"
    else:
        line = f"  chunk {state.index}: {RED}error{RESET} {state.error}"
    sys.stdout.write(line + "\n")
    sys.stdout.flush()


def handle_upload(
    cmd: UploadCommand,
    orchestrator: Optional[UploadOrchestrator] = None,
    config: Optional[Config] = None
) -> str:
    """
    Handle 'upload' command.

    Args:
        cmd: UploadCommand with path and optional file id
        orchestrator: Optional UploadOrchestrator for dependency injection (testing)
        config: Optional Config for dependency injection (testing)

    Returns:
        Upload summary or error message
    """
    path = Path(cmd.path)
    if not path.is_file():
        return f"Error: file not found: {cmd.path}"

    if config is None:
        config = get_config()
    if orchestrator is None:
        orchestrator = get_orchestrator()

    file_id = cmd.file_id or path.name
    source = FileByteSource(path)
    size = source.size()
    logger.info(f"Executing upload command: path={path} file_id={file_id} size={size}")
    print(f"Uploading {path.name} as '{file_id}' ({format_file_size(size)})")

    try:
        states = orchestrator.run(file_id, source, config.get_chunk_size(), config.get_concurrency())
    except (SPFEException, ValueError, OSError) as e:
        logger.error(f"Upload command failed: {e}")
        return f"Error: {e}"

    result = summarize_states(states)
    if any(s.status != DONE for s in states):
        result += "\nUse 'status' to inspect failures and 'retry <index>' or 'retry-failed' to resend."
    return result


def handle_status(cmd: StatusCommand, orchestrator: Optional[UploadOrchestrator] = None) -> str:
    """
    Handle 'status' command.

    Returns:
        Per-chunk table of the last upload
    """
    if orchestrator is None:
        orchestrator = get_orchestrator()
    session = orchestrator.session
    if session is None:
        return "No upload in progress."
    header = f"File '{session.file_id}', {session.total_chunks} chunk(s)"
    return header + "\n" + format_chunk_table(orchestrator.states(), session.descriptors)


def handle_retry(cmd: RetryCommand, orchestrator: Optional[UploadOrchestrator] = None) -> str:
    """
    Handle 'retry' command.

    Args:
        cmd: RetryCommand with the chunk index
        orchestrator: Optional UploadOrchestrator for dependency injection (testing)

    Returns:
        New state of the chunk or error message
    """
    if orchestrator is None:
        orchestrator = get_orchestrator()
    logger.info(f"Executing retry command: index={cmd.index}")
    try:
        state = orchestrator.retry(cmd.index)
    except SPFEException as e:
        return f"Error: {e}"
    if state.status == DONE:
        return f"Chunk {state.index} stored."
    return f"Chunk {state.index} failed again: {state.error}"


def handle_retry_failed(cmd: RetryFailedCommand, orchestrator: Optional[UploadOrchestrator] = None) -> str:
    """
    Handle 'retry-failed' command.

    Returns:
        Summary of the retried chunks or error message
    """
    if orchestrator is None:
        orchestrator = get_orchestrator()
    try:
        retried = orchestrator.retry_failed()
    except SPFEException as e:
        return f"Error: {e}"
    if not retried:
        return "No failed chunks to retry."
    return "Retried " + summarize_states(retried)


def handle_merge(
    cmd: MergeCommand,
    client: Optional[StoreClient] = None,
    orchestrator: Optional[UploadOrchestrator] = None
) -> str:
    """
    Handle 'merge' command.

    Args:
        cmd: MergeCommand with optional file id (defaults to the last upload)
        client: Optional StoreClient for dependency injection (testing)
        orchestrator: Optional UploadOrchestrator for dependency injection (testing)

    Returns:
        Formatted manifest or error message
    """
    file_id = cmd.file_id
    if file_id is None:
        if orchestrator is None:
            orchestrator = get_orchestrator()
        if orchestrator.session is None:
            return "Error: merge requires a file id when nothing has been uploaded yet"
        file_id = orchestrator.session.file_id

    if client is None:
        client = get_client()
    logger.info(f"Executing merge command: file_id={file_id}")
    try:
        manifest = client.merge(file_id)
    except SPFEException as e:
        return f"Error: {e}"
    return format_manifest(manifest)


def handle_config(cmd: ConfigCommand, config: Optional[Config] = None) -> str:
    """
    Handle 'config' command.

    Without arguments shows every key; with a key and value sets and saves it.

    Returns:
        Configuration listing, confirmation or error message
    """
    injected = config is not None
    if config is None:
        config = get_config()

    if cmd.key is None:
        lines = [f"Config file: {config.config_path}"]
        lines.extend(f"  {key} = {value}" for key, value in sorted(config.data.items()))
        return "\n".join(lines)

    try:
        config.set_value(cmd.key, cmd.value)
    except KeyError:
        return f"Error: unknown config key '{cmd.key}'"
    except ValueError:
        return f"Error: invalid value for {cmd.key}: {cmd.value}"

    if not injected:
        reset_client()
    return f"{cmd.key} = {config.data[cmd.key]}"
