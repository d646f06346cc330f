# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
snapxfer Core - success/failure surface used by the snapshot plugin.

Callers above this layer only see True/False (or None for reads); the
structured errors from the transfer engine are logged here with their
operation context and go no further.
"""

from dataclasses import asdict
from typing import Any, Mapping

from snapxfer.connector import BucketHandle, initialize
from snapxfer.exceptions import TransferError
from snapxfer.transfer import (
    SnapshotSink,
    SnapshotSource,
    download,
    read_whole,
    remove,
    upload,
    write_whole,
)


async def init_cloud_conn(config: Mapping[str, str], logger: Any = None) -> BucketHandle:
    """
    Open the bucket for a backup location.

    Setup errors are raised, since without a bucket the plugin cannot start.
    """
    return await initialize(config, logger=logger)


def _record_failure(handle: BucketHandle, error: Exception) -> None:
    handle.stats.failures += 1
    handle.stats.last_error = str(error)


async def upload_snapshot(
    handle: BucketHandle,
    name: str,
    source: SnapshotSource,
    logger: Any = None,
) -> bool:
    """Upload a snapshot; on failure the partial object is removed."""
    try:
        size = await upload(handle, name, source, logger=logger)
    except TransferError as e:
        _record_failure(handle, e)
        return False

    handle.stats.uploads += 1
    handle.stats.bytes_uploaded += size
    return True


async def restore_snapshot(
    handle: BucketHandle,
    name: str,
    sink: SnapshotSink,
    logger: Any = None,
) -> bool:
    """Download a snapshot into sink."""
    try:
        size = await download(handle, name, sink, logger=logger)
    except TransferError as e:
        _record_failure(handle, e)
        return False

    handle.stats.downloads += 1
    handle.stats.bytes_downloaded += size
    return True


async def remove_snapshot(handle: BucketHandle, name: str, logger: Any = None) -> bool:
    try:
        await remove(handle, name, logger=logger)
    except TransferError as e:
        _record_failure(handle, e)
        return False

    handle.stats.removals += 1
    return True


async def write_to_file(
    handle: BucketHandle,
    name: str,
    data: bytes,
    logger: Any = None,
) -> bool:
    """Write a small auxiliary object such as a metadata sidecar."""
    try:
        await write_whole(handle, name, data, logger=logger)
    except TransferError as e:
        _record_failure(handle, e)
        return False

    handle.stats.bytes_uploaded += len(data)
    return True


async def read_from_file(
    handle: BucketHandle,
    name: str,
    logger: Any = None,
) -> bytes | None:
    """Read a small auxiliary object; None when it cannot be read."""
    try:
        data = await read_whole(handle, name, logger=logger)
    except TransferError as e:
        _record_failure(handle, e)
        return None

    handle.stats.bytes_downloaded += len(data)
    return data


def get_stats(handle: BucketHandle) -> dict:
    """Return the handle's transfer counters as a plain dict."""
    stats = asdict(handle.stats)
    stats["opened_at"] = handle.stats.opened_at.isoformat()
    return stats
