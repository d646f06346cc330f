# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
Snapshot Transfer Engine - whole-object upload and download.

The engine drives an external codec against a stream and guarantees:
1. A successfully uploaded object is complete
2. A failed upload never leaves a retrievable object behind
3. Every stream is released on every exit path

Callers must not run two transfers for the same key at the same time.
"""

from typing import Any, Awaitable, Callable

from ulid import ULID

from snapxfer.connector import BucketHandle
from snapxfer.exceptions import (
    DownloadFailed,
    RemoveFailed,
    UploadFailed,
)
from snapxfer.streams import (
    ReadStream,
    WriteStream,
    open_read_stream,
    open_write_stream,
)

# Pushes every byte of a snapshot into the stream
SnapshotSource = Callable[[WriteStream], Awaitable[None]]

# Pulls every byte of a snapshot out of the stream
SnapshotSink = Callable[[ReadStream], Awaitable[None]]


def _bind(handle: BucketHandle, logger: Any, key: str) -> Any:
    return (logger or handle.logger).bind(
        **handle.log_context(),
        key=key,
        transfer_id=str(ULID()),
    )


async def _discard_partial_object(handle: BucketHandle, key: str, log: Any) -> None:
    """Best-effort delete after a failed upload; failures are only logged."""
    try:
        await handle.backend.delete(key)
        log.info("partial_object_removed")
    except Exception as e:
        log.warning("partial_object_remove_failed", error=str(e))


async def upload(
    handle: BucketHandle,
    name: str,
    source: SnapshotSource,
    logger: Any = None,
) -> int:
    """
    Upload a snapshot object.

    Args:
        handle: Opened bucket
        name: Object name, scoped under the handle's prefix
        source: Codec coroutine writing the snapshot into the stream
        logger: Logger for this operation (defaults to the handle's)

    Returns:
        Number of bytes written

    Raises:
        UploadFailed: the stream could not be opened, the source failed, or
            the object could not be finalized
    """
    key = handle.object_key(name)
    log = _bind(handle, logger, key)
    log.info("snapshot_upload_started")

    try:
        stream = await open_write_stream(handle, key)
    except Exception as e:
        log.error("write_stream_open_failed", error=str(e))
        raise UploadFailed(
            f"Failed to obtain writer: {e}",
            details={"key": key, **handle.log_context()},
        ) from e

    try:
        await source(stream)
    except Exception as e:
        log.error("snapshot_source_failed", error=str(e), bytes_written=stream.bytes_written)
        if not stream.closed:
            try:
                await stream.abort()
            except Exception as abort_error:
                log.warning("write_stream_abort_failed", error=str(abort_error))
        await _discard_partial_object(handle, key, log)
        raise UploadFailed(
            f"Failed to upload snapshot: {e}",
            details={"key": key, **handle.log_context()},
        ) from e

    try:
        await stream.close()
    except Exception as e:
        log.error("write_stream_close_failed", error=str(e))
        await _discard_partial_object(handle, key, log)
        raise UploadFailed(
            f"Failed to finalize snapshot: {e}",
            details={"key": key, **handle.log_context()},
        ) from e

    log.info("snapshot_upload_completed", size=stream.bytes_written)
    return stream.bytes_written


async def download(
    handle: BucketHandle,
    name: str,
    sink: SnapshotSink,
    logger: Any = None,
) -> int:
    """
    Download a snapshot object into sink.

    The object in the bucket is never modified, even on failure.

    Returns:
        Number of bytes read

    Raises:
        DownloadFailed: the stream could not be opened or the sink failed
    """
    key = handle.object_key(name)
    log = _bind(handle, logger, key)
    log.info("snapshot_download_started")

    try:
        stream = await open_read_stream(handle, key)
    except Exception as e:
        log.error("read_stream_open_failed", error=str(e))
        raise DownloadFailed(
            f"Failed to obtain reader: {e}",
            details={"key": key, **handle.log_context()},
        ) from e

    try:
        await sink(stream)
    except Exception as e:
        log.error("snapshot_sink_failed", error=str(e), bytes_read=stream.bytes_read)
        raise DownloadFailed(
            f"Failed to receive snapshot: {e}",
            details={"key": key, **handle.log_context()},
        ) from e
    finally:
        if not stream.closed:
            try:
                await stream.close()
            except Exception as e:
                log.warning("read_stream_close_failed", error=str(e))

    log.info("snapshot_download_completed", size=stream.bytes_read)
    return stream.bytes_read


async def remove(handle: BucketHandle, name: str, logger: Any = None) -> None:
    """
    Delete a snapshot object.

    Whether a missing object counts as success is up to the caller; the
    provider's error is surfaced unchanged as the cause of RemoveFailed.
    """
    key = handle.object_key(name)
    log = _bind(handle, logger, key)
    log.info("snapshot_remove_started")

    try:
        await handle.backend.delete(key)
    except Exception as e:
        log.error("snapshot_remove_failed", error=str(e))
        raise RemoveFailed(
            f"Failed to remove object: {e}",
            details={"key": key, **handle.log_context()},
        ) from e

    log.info("snapshot_removed")


async def exists(handle: BucketHandle, name: str, logger: Any = None) -> bool:
    """
    Check whether an object is stored under name.

    Raises:
        DownloadFailed: the provider could not answer the check
    """
    key = handle.object_key(name)
    log = _bind(handle, logger, key)

    try:
        found = await handle.backend.exists(key)
    except Exception as e:
        log.error("object_exists_check_failed", error=str(e))
        raise DownloadFailed(
            f"Failed to check object existence: {e}",
            details={"key": key, **handle.log_context()},
        ) from e

    log.debug("object_exists_checked", exists=found)
    return found


async def read_whole(handle: BucketHandle, name: str, logger: Any = None) -> bytes:
    """Read a small auxiliary object in one call."""
    key = handle.object_key(name)
    log = _bind(handle, logger, key)

    try:
        data = await handle.backend.read_all(key)
    except Exception as e:
        log.error("object_read_failed", error=str(e))
        raise DownloadFailed(
            f"Failed to read object: {e}",
            details={"key": key, **handle.log_context()},
        ) from e

    log.info("object_read", size=len(data))
    return data


async def write_whole(
    handle: BucketHandle,
    name: str,
    data: bytes,
    logger: Any = None,
) -> None:
    """
    Write a small auxiliary object in one call.

    Uses the same path as upload(), so a failed write is cleaned up.
    """

    async def _write(stream: WriteStream) -> None:
        await stream.write(data)

    await upload(handle, name, _write, logger=logger)
