# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
Google Cloud Storage provider.

Credentials are discovered through application default credentials. The
storage SDK is blocking, so every call runs in a worker thread. Writers use
a resumable upload which is only finalized when the writer is closed.
"""

import asyncio
from typing import Any

import google.auth
from google.api_core.exceptions import GoogleAPIError, NotFound
from google.auth.exceptions import DefaultCredentialsError, GoogleAuthError
from google.cloud import storage

from snapxfer.config import ProviderConfig
from snapxfer.errors import explain_missing_gcp_credentials
from snapxfer.exceptions import BucketConnectionError, CredentialError
from snapxfer.providers.base import (
    BucketBackend,
    BucketProvider,
    ObjectReader,
    ObjectWriter,
)


class GCSObjectWriter(ObjectWriter):
    """Wraps a BlobWriter opened in binary write mode."""

    def __init__(self, blob_writer: Any):
        self._writer = blob_writer

    async def write(self, data: bytes) -> None:
        await asyncio.to_thread(self._writer.write, data)

    async def close(self) -> None:
        await asyncio.to_thread(self._writer.close)

    async def abort(self) -> None:
        # An unfinalized resumable session never becomes an object; GCS
        # expires it on its own.
        self._writer = None


class GCSObjectReader(ObjectReader):
    """Wraps a BlobReader opened in binary read mode."""

    def __init__(self, blob_reader: Any):
        self._reader = blob_reader

    async def read(self, size: int) -> bytes:
        return await asyncio.to_thread(self._reader.read, size)

    async def close(self) -> None:
        await asyncio.to_thread(self._reader.close)


class GCSBackend(BucketBackend):
    """An opened GCS bucket."""

    def __init__(self, client: Any, bucket: Any):
        self._client = client
        self._bucket = bucket

    async def new_writer(self, key: str) -> ObjectWriter:
        blob = self._bucket.blob(key)
        writer = await asyncio.to_thread(blob.open, "wb", ignore_flush=True)
        return GCSObjectWriter(writer)

    async def new_reader(self, key: str) -> ObjectReader:
        blob = self._bucket.blob(key)
        reader = await asyncio.to_thread(blob.open, "rb")
        return GCSObjectReader(reader)

    async def delete(self, key: str) -> None:
        await asyncio.to_thread(self._bucket.blob(key).delete)

    async def read_all(self, key: str) -> bytes:
        return await asyncio.to_thread(self._bucket.blob(key).download_as_bytes)

    async def exists(self, key: str) -> bool:
        try:
            return await asyncio.to_thread(self._bucket.blob(key).exists)
        except NotFound:
            return False

    async def close(self) -> None:
        await asyncio.to_thread(self._client.close)


class GCPProvider(BucketProvider):
    """Opens GCS buckets with google-cloud-storage."""

    async def open(self, config: ProviderConfig, logger: Any) -> BucketBackend:
        try:
            credentials, project = await asyncio.to_thread(google.auth.default)
        except DefaultCredentialsError as e:
            raise CredentialError(explain_missing_gcp_credentials()) from e

        client = storage.Client(project=project, credentials=credentials)
        try:
            bucket = await asyncio.to_thread(client.get_bucket, config.bucket)
        except (GoogleAPIError, GoogleAuthError, OSError) as e:
            await asyncio.to_thread(client.close)
            raise BucketConnectionError(
                f"Failed to open bucket: {e}",
                details={"bucket": config.bucket, "region": config.effective_region},
            ) from e

        logger.debug("gcs_bucket_opened", bucket=config.bucket, project=project)
        return GCSBackend(client, bucket)
