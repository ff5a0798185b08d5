"""Configuration settings for the partial store server."""

import os
from common.constants import DEFAULT_FALLBACK_DIR, DEFAULT_PRIMARY_DB_PATH, SERVER_PORT


PRIMARY_ENABLED = os.environ.get("SPFE_PRIMARY_ENABLED", "1").strip().lower() not in ("0", "false", "no", "off")

PRIMARY_DB_PATH = os.environ.get("SPFE_PRIMARY_DB_PATH", DEFAULT_PRIMARY_DB_PATH)

FALLBACK_DIR = os.environ.get("SPFE_FALLBACK_DIR", DEFAULT_FALLBACK_DIR)

SERVER_HOST = os.environ.get("SPFE_SERVER_HOST", "0.0.0.0")

SERVER_PORT = int(os.environ.get("SPFE_SERVER_PORT", str(SERVER_PORT)))
