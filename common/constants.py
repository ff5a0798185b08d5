"""Project-wide constants (chunk sizing, key scheme, defaults)."""

import os
import tempfile

CHUNK_SIZE_BYTES: int = 2 * 1024 * 1024  # 2 MiB default chunk size
DEFAULT_CONCURRENCY: int = 4

PARTIALS_ROOT = "partials"
CHUNK_KEY_TEMPLATE = "chunk_{index}.json"

HASH_ALGORITHM = "sha256"

DEFAULT_PRIMARY_DB_PATH = os.path.join("data", "partials.db")
DEFAULT_FALLBACK_DIR = os.path.join(tempfile.gettempdir(), "local_partials")

SERVER_PORT = 8000

# Longest base64 payload fragment kept when a chunk body reaches a log line
LOG_PAYLOAD_PREVIEW_CHARS = 16
