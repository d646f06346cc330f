# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
Streaming Connection Factory - directional, single-use streams.

A WriteStream or ReadStream is bound to exactly one object key. It is
closed exactly once; closing again or using it after close raises
InvalidStateError.
"""

from typing import AsyncIterator

from snapxfer.config import TransferDirection
from snapxfer.connector import BucketHandle
from snapxfer.exceptions import InvalidStateError
from snapxfer.providers.base import ObjectReader, ObjectWriter

DEFAULT_CHUNK_SIZE = 1024 * 1024


class WriteStream:
    """Write-only stream for one object."""

    def __init__(self, key: str, writer: ObjectWriter):
        self.key = key
        self.bytes_written = 0
        self._writer = writer
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def _check_open(self, operation: str) -> None:
        if self._closed:
            raise InvalidStateError(
                f"Cannot {operation} a closed write stream",
                details={"key": self.key},
            )

    async def write(self, data: bytes) -> int:
        """Append data to the object; returns the number of bytes taken."""
        self._check_open("write to")
        await self._writer.write(data)
        self.bytes_written += len(data)
        return len(data)

    async def close(self) -> None:
        """Finalize the object. After a successful close it is fully visible."""
        self._check_open("close")
        self._closed = True
        await self._writer.close()

    async def abort(self) -> None:
        """Discard the unfinished object and release the stream."""
        self._check_open("abort")
        self._closed = True
        await self._writer.abort()


class ReadStream:
    """Read-only stream for one object."""

    def __init__(self, key: str, reader: ObjectReader, chunk_size: int = DEFAULT_CHUNK_SIZE):
        self.key = key
        self.bytes_read = 0
        self.chunk_size = chunk_size
        self._reader = reader
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def _check_open(self, operation: str) -> None:
        if self._closed:
            raise InvalidStateError(
                f"Cannot {operation} a closed read stream",
                details={"key": self.key},
            )

    async def read(self, size: int = -1) -> bytes:
        """
        Read up to size bytes (chunk_size when size < 0).

        Returns b"" once the object is exhausted.
        """
        self._check_open("read from")
        data = await self._reader.read(size if size > 0 else self.chunk_size)
        self.bytes_read += len(data)
        return data

    async def __aiter__(self) -> AsyncIterator[bytes]:
        while True:
            chunk = await self.read()
            if not chunk:
                return
            yield chunk

    async def close(self) -> None:
        self._check_open("close")
        self._closed = True
        await self._reader.close()


async def open_write_stream(handle: BucketHandle, key: str) -> WriteStream:
    """Open a write stream for key (already scoped by the caller)."""
    writer = await handle.backend.new_writer(key)
    return WriteStream(key, writer)


async def open_read_stream(
    handle: BucketHandle,
    key: str,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> ReadStream:
    """Open a read stream for key (already scoped by the caller)."""
    reader = await handle.backend.new_reader(key)
    return ReadStream(key, reader, chunk_size=chunk_size)


async def open_stream(
    handle: BucketHandle,
    key: str,
    direction: TransferDirection,
) -> WriteStream | ReadStream:
    """Open the stream type matching direction."""
    if direction == TransferDirection.BACKUP:
        return await open_write_stream(handle, key)
    if direction == TransferDirection.RESTORE:
        return await open_read_stream(handle, key)
    raise ValueError(f"Unknown transfer direction: {direction!r}")
