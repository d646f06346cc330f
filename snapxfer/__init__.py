# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
snapxfer - Snapshot transfer and restore helpers for block-storage backups.

Moves point-in-time snapshot data between a block-storage engine and a cloud
bucket (AWS S3 or Google Cloud Storage) with all-or-nothing object
visibility, and remaps the selected node of restored local-storage PVCs.
"""

__version__ = "0.1.0"

# Configuration
from snapxfer.config import (
    CloudProvider,
    ProviderConfig,
    TransferDirection,
    parse_provider_config,
)

# Bucket connection
from snapxfer.connector import BucketHandle, initialize, shutdown

# Streams and transfers
from snapxfer.streams import ReadStream, WriteStream, open_stream
from snapxfer.transfer import download, exists, read_whole, remove, upload, write_whole

# Success/failure surface
from snapxfer.core import (
    get_stats,
    init_cloud_conn,
    read_from_file,
    remove_snapshot,
    restore_snapshot,
    upload_snapshot,
    write_to_file,
)

# Restore action
from snapxfer.remap import RestoreNodeRemapper

__all__ = [
    # Version
    "__version__",
    # Configuration
    "CloudProvider",
    "ProviderConfig",
    "TransferDirection",
    "parse_provider_config",
    # Bucket connection
    "BucketHandle",
    "initialize",
    "shutdown",
    # Streams and transfers
    "ReadStream",
    "WriteStream",
    "open_stream",
    "upload",
    "download",
    "remove",
    "exists",
    "read_whole",
    "write_whole",
    # Success/failure surface
    "init_cloud_conn",
    "upload_snapshot",
    "restore_snapshot",
    "remove_snapshot",
    "write_to_file",
    "read_from_file",
    "get_stats",
    # Restore action
    "RestoreNodeRemapper",
]
