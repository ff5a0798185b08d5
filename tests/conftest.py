"""Shared pytest fixtures for all tests."""

from typing import List, Optional

import pytest

from cli.config import Config
from common.exceptions import BackendError
from store.backends import FilesystemBackend, InMemoryBackend, SQLiteBackend
from store.partial_store import PartialStore


class FailingBackend:
    """
    Backend double whose operations raise BackendError on demand.

    Each flag turns one operation into a failure; everything else behaves
    like an in-memory backend.
    """

    name = "failing"

    def __init__(self, fail_put=False, fail_list=False, fail_get=False, fail_get_keys=None):
        self.fail_put = fail_put
        self.fail_list = fail_list
        self.fail_get = fail_get
        self.fail_get_keys = set(fail_get_keys or ())
        self.inner = InMemoryBackend()
        self.put_calls = 0

    def put(self, key: str, body: bytes) -> None:
        self.put_calls += 1
        if self.fail_put:
            raise BackendError("put unavailable")
        self.inner.put(key, body)

    def list(self, prefix: str) -> List[str]:
        if self.fail_list:
            raise BackendError("list unavailable")
        return self.inner.list(prefix)

    def get(self, key: str) -> Optional[bytes]:
        if self.fail_get or key in self.fail_get_keys:
            raise BackendError("get unavailable")
        return self.inner.get(key)


@pytest.fixture
def sqlite_backend(tmp_path):
    """SQLite backend on a temp database file."""
    return SQLiteBackend(str(tmp_path / 'data' / 'partials.db'))


@pytest.fixture
def fs_backend(tmp_path):
    """Filesystem backend rooted in a temp directory."""
    return FilesystemBackend(str(tmp_path / 'local_partials'))


@pytest.fixture
def memory_backend():
    return InMemoryBackend()


@pytest.fixture
def partial_store(sqlite_backend, fs_backend):
    """
    Store with the production backend pair.

    Returns:
        PartialStore with an SQLite primary and a filesystem fallback
    """
    return PartialStore(primary=sqlite_backend, fallback=fs_backend)


@pytest.fixture
def temp_config_dir(tmp_path):
    """
    Create temporary config directory.

    Args:
        tmp_path: pytest tmp_path fixture

    Returns:
        Path to temporary .spfe directory
    """
    config_dir = tmp_path / '.spfe'
    config_dir.mkdir()
    return config_dir


@pytest.fixture
def temp_config(temp_config_dir):
    """
    Create temporary config instance.

    Args:
        temp_config_dir: Temporary config directory fixture

    Returns:
        Config instance with temp config file
    """
    return Config(temp_config_dir / 'config.json')


@pytest.fixture
def sample_file(tmp_path):
    """
    Create a sample file spanning several small chunks.

    Returns:
        Path to a 10000-byte binary file
    """
    file_path = tmp_path / 'sample.bin'
    file_path.write_bytes(bytes(i % 251 for i in range(10000)))
    return file_path
