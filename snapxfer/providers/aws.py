# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
AWS S3 provider.

Credentials come exclusively from the shared credentials file named by
AWS_SHARED_CREDENTIALS_FILE. Writers buffer into parts and switch to a
multipart upload once the first part is full; the object only appears when
the upload is completed on close.
"""

from contextlib import AsyncExitStack
from typing import Any, Dict, List

from aiobotocore.session import get_session
from botocore.exceptions import BotoCoreError, ClientError, ProfileNotFound

from snapxfer.config import ProviderConfig
from snapxfer.env import aws_shared_credentials_file
from snapxfer.exceptions import BucketConnectionError, CredentialError
from snapxfer.providers.base import (
    BucketBackend,
    BucketProvider,
    ObjectReader,
    ObjectWriter,
)

# S3 rejects non-final multipart parts smaller than 5 MiB
PART_SIZE = 5 * 1024 * 1024


class S3ObjectWriter(ObjectWriter):
    """Buffered writer that uses a multipart upload for large objects."""

    def __init__(self, client: Any, bucket: str, key: str, part_size: int = PART_SIZE):
        self._client = client
        self._bucket = bucket
        self._key = key
        self._part_size = part_size
        self._buffer = bytearray()
        self._upload_id: str | None = None
        self._parts: List[Dict[str, Any]] = []

    async def write(self, data: bytes) -> None:
        self._buffer.extend(data)
        while len(self._buffer) >= self._part_size:
            chunk = bytes(self._buffer[: self._part_size])
            del self._buffer[: self._part_size]
            await self._upload_part(chunk)

    async def _upload_part(self, chunk: bytes) -> None:
        if self._upload_id is None:
            response = await self._client.create_multipart_upload(
                Bucket=self._bucket, Key=self._key
            )
            self._upload_id = response["UploadId"]

        part_number = len(self._parts) + 1
        response = await self._client.upload_part(
            Bucket=self._bucket,
            Key=self._key,
            PartNumber=part_number,
            UploadId=self._upload_id,
            Body=chunk,
        )
        self._parts.append({"ETag": response["ETag"], "PartNumber": part_number})

    async def close(self) -> None:
        try:
            if self._upload_id is None:
                await self._client.put_object(
                    Bucket=self._bucket, Key=self._key, Body=bytes(self._buffer)
                )
            else:
                if self._buffer:
                    await self._upload_part(bytes(self._buffer))
                await self._client.complete_multipart_upload(
                    Bucket=self._bucket,
                    Key=self._key,
                    UploadId=self._upload_id,
                    MultipartUpload={"Parts": self._parts},
                )
                self._upload_id = None
        except Exception:
            await self.abort()
            raise
        finally:
            self._buffer.clear()

    async def abort(self) -> None:
        self._buffer.clear()
        if self._upload_id is not None:
            upload_id, self._upload_id = self._upload_id, None
            await self._client.abort_multipart_upload(
                Bucket=self._bucket, Key=self._key, UploadId=upload_id
            )


class S3ObjectReader(ObjectReader):
    """Reads an object through the streaming body of get_object."""

    def __init__(self, body: Any):
        self._body = body

    async def read(self, size: int) -> bytes:
        return await self._body.read(size)

    async def close(self) -> None:
        self._body.close()


class S3Backend(BucketBackend):
    """An opened S3 bucket bound to one client."""

    def __init__(self, client: Any, bucket: str, exit_stack: AsyncExitStack | None = None):
        self._client = client
        self._bucket = bucket
        self._exit_stack = exit_stack

    async def new_writer(self, key: str) -> ObjectWriter:
        return S3ObjectWriter(self._client, self._bucket, key)

    async def new_reader(self, key: str) -> ObjectReader:
        response = await self._client.get_object(Bucket=self._bucket, Key=key)
        return S3ObjectReader(response["Body"])

    async def delete(self, key: str) -> None:
        await self._client.delete_object(Bucket=self._bucket, Key=key)

    async def read_all(self, key: str) -> bytes:
        response = await self._client.get_object(Bucket=self._bucket, Key=key)
        async with response["Body"] as stream:
            return await stream.read()

    async def exists(self, key: str) -> bool:
        try:
            await self._client.head_object(Bucket=self._bucket, Key=key)
            return True
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") in ("404", "NoSuchKey", "NotFound"):
                return False
            raise

    async def close(self) -> None:
        if self._exit_stack is not None:
            exit_stack, self._exit_stack = self._exit_stack, None
            await exit_stack.aclose()


class AWSProvider(BucketProvider):
    """Opens S3 buckets with aiobotocore."""

    async def open(self, config: ProviderConfig, logger: Any) -> BucketBackend:
        credentials_file = aws_shared_credentials_file()
        region = config.effective_region

        session = get_session()
        session.set_config_variable("credentials_file", credentials_file)
        session.set_config_variable("profile", config.profile)

        try:
            credentials = await session.get_credentials()
        except (ProfileNotFound, BotoCoreError) as e:
            raise CredentialError(
                f"Failed to load AWS credentials: {e}",
                details={"path": credentials_file, "profile": config.profile},
            ) from e
        if credentials is None:
            raise CredentialError(
                "No AWS credentials found in shared credentials file",
                details={"path": credentials_file, "profile": config.profile},
            )

        exit_stack = AsyncExitStack()
        try:
            client = await exit_stack.enter_async_context(
                session.create_client(
                    "s3",
                    region_name=region,
                    endpoint_url=config.endpoint_url,
                )
            )
            await client.head_bucket(Bucket=config.bucket)
        except (BotoCoreError, ClientError) as e:
            await exit_stack.aclose()
            raise BucketConnectionError(
                f"Failed to open bucket: {e}",
                details={"bucket": config.bucket, "region": region},
            ) from e

        logger.debug("s3_bucket_opened", bucket=config.bucket, region=region)
        return S3Backend(client, config.bucket, exit_stack)
