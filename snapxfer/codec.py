# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
Stock snapshot sources and sinks.

The snapshot format itself belongs to the block-storage engine; these
adapters only move opaque bytes between a stream and memory or a file.
"""

import os
from pathlib import Path
from typing import AsyncIterable, Iterable, List

import aiofiles

from snapxfer.streams import DEFAULT_CHUNK_SIZE, ReadStream, WriteStream
from snapxfer.transfer import SnapshotSink, SnapshotSource


def chunks_source(chunks: Iterable[bytes] | AsyncIterable[bytes]) -> SnapshotSource:
    """Source that writes each chunk from a sync or async iterable."""

    async def _send(stream: WriteStream) -> None:
        if hasattr(chunks, "__aiter__"):
            async for chunk in chunks:  # type: ignore[union-attr]
                await stream.write(chunk)
        else:
            for chunk in chunks:  # type: ignore[union-attr]
                await stream.write(chunk)

    return _send


def file_source(path: Path, chunk_size: int = DEFAULT_CHUNK_SIZE) -> SnapshotSource:
    """Source that streams a local file."""

    async def _send(stream: WriteStream) -> None:
        async with aiofiles.open(path, "rb") as f:
            while True:
                chunk = await f.read(chunk_size)
                if not chunk:
                    break
                await stream.write(chunk)

    return _send


def file_sink(path: Path) -> SnapshotSink:
    """
    Sink that writes the object to a local file.

    The file is written atomically (write to temp, then rename) so that an
    interrupted download never leaves a truncated file at path.
    """

    async def _receive(stream: ReadStream) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        temp_path = path.with_name(path.name + ".tmp")
        try:
            async with aiofiles.open(temp_path, "wb") as f:
                async for chunk in stream:
                    await f.write(chunk)
            os.replace(temp_path, path)
        except BaseException:
            temp_path.unlink(missing_ok=True)
            raise

    return _receive


class BytesSink:
    """Sink collecting the object in memory."""

    def __init__(self) -> None:
        self._chunks: List[bytes] = []

    async def __call__(self, stream: ReadStream) -> None:
        async for chunk in stream:
            self._chunks.append(chunk)

    def getvalue(self) -> bytes:
        return b"".join(self._chunks)
