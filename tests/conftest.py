# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
Test fixtures for snapxfer tests.

Provides an in-memory bucket backend with failure injection, handle
fixtures, and fake Kubernetes API objects.
"""

import tempfile
from pathlib import Path
from types import SimpleNamespace
from typing import Dict, Generator, List
from unittest.mock import MagicMock

import pytest
import structlog

from snapxfer.config import CloudProvider, ProviderConfig
from snapxfer.connector import BucketHandle
from snapxfer.providers.base import BucketBackend, ObjectReader, ObjectWriter


class InMemoryWriter(ObjectWriter):
    """Buffers writes; the object appears in the backend only on close."""

    def __init__(self, backend: "InMemoryBackend", key: str):
        self.backend = backend
        self.key = key
        self.buffer = bytearray()
        self.aborted = False

    async def write(self, data: bytes) -> None:
        if self.backend.fail_write_after is not None and (
            len(self.buffer) + len(data) > self.backend.fail_write_after
        ):
            raise IOError("injected write failure")
        self.buffer.extend(data)

    async def close(self) -> None:
        if self.backend.fail_close:
            raise IOError("injected close failure")
        self.backend.objects[self.key] = bytes(self.buffer)

    async def abort(self) -> None:
        self.aborted = True
        self.buffer.clear()


class InMemoryReader(ObjectReader):
    def __init__(self, data: bytes):
        self.data = data
        self.offset = 0
        self.closed = False

    async def read(self, size: int) -> bytes:
        chunk = self.data[self.offset : self.offset + size]
        self.offset += len(chunk)
        return chunk

    async def close(self) -> None:
        self.closed = True


class InMemoryBackend(BucketBackend):
    """Dict-backed bucket honouring atomic writer close."""

    def __init__(self) -> None:
        self.objects: Dict[str, bytes] = {}
        self.writers: List[InMemoryWriter] = []
        self.readers: List[InMemoryReader] = []
        self.deleted: List[str] = []
        self.fail_write_after: int | None = None
        self.fail_close = False
        self.fail_delete = False
        self.closed = False

    async def new_writer(self, key: str) -> ObjectWriter:
        writer = InMemoryWriter(self, key)
        self.writers.append(writer)
        return writer

    async def new_reader(self, key: str) -> ObjectReader:
        if key not in self.objects:
            raise KeyError(key)
        reader = InMemoryReader(self.objects[key])
        self.readers.append(reader)
        return reader

    async def delete(self, key: str) -> None:
        if self.fail_delete:
            raise IOError("injected delete failure")
        self.deleted.append(key)
        if key not in self.objects:
            raise KeyError(key)
        del self.objects[key]

    async def read_all(self, key: str) -> bytes:
        return self.objects[key]

    async def exists(self, key: str) -> bool:
        return key in self.objects

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def memory_backend() -> InMemoryBackend:
    return InMemoryBackend()


@pytest.fixture
def test_config() -> ProviderConfig:
    return ProviderConfig(
        provider=CloudProvider.AWS,
        bucket="test-bucket",
        region="us-east-1",
        prefix="backups/cluster-a",
    )


@pytest.fixture
def memory_handle(test_config: ProviderConfig, memory_backend: InMemoryBackend) -> BucketHandle:
    return BucketHandle(
        config=test_config,
        backend=memory_backend,
        logger=structlog.get_logger("snapxfer"),
    )


@pytest.fixture
def core_v1() -> MagicMock:
    """Fake CoreV1Api with no config maps and every node present."""
    api = MagicMock()
    api.list_namespaced_config_map.return_value = SimpleNamespace(items=[])
    api.read_node.return_value = SimpleNamespace(metadata=SimpleNamespace(name="node"))
    return api
