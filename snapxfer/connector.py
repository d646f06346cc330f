# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
Bucket Connector - resolves a provider config into a BucketHandle.

One handle is opened per process and shared by every transfer; each
transfer gets its own stream, so the handle itself is never mutated by
them apart from the statistics counters.
"""

from dataclasses import dataclass, field
from datetime import datetime, UTC
from typing import Any, Dict, Mapping

from snapxfer.config import ProviderConfig, parse_provider_config
from snapxfer.exceptions import SnapXferError, UnsupportedProviderError
from snapxfer.log import get_logger
from snapxfer.providers import PROVIDERS
from snapxfer.providers.base import BucketBackend


@dataclass
class TransferStats:
    """Counters for operations performed through a handle."""

    uploads: int = 0
    downloads: int = 0
    removals: int = 0
    failures: int = 0
    bytes_uploaded: int = 0
    bytes_downloaded: int = 0
    last_error: str | None = None
    opened_at: datetime = field(default_factory=lambda: datetime.now(UTC))


@dataclass
class BucketHandle:
    """An opened bucket plus the settings and logger it was opened with."""

    config: ProviderConfig
    backend: BucketBackend
    logger: Any
    stats: TransferStats = field(default_factory=TransferStats)

    def object_key(self, name: str) -> str:
        """Scope an object name under the configured prefix."""
        name = name.lstrip("/")
        prefix = self.config.prefix.strip("/")
        if prefix:
            return f"{prefix}/{name}"
        return name

    def log_context(self) -> Dict[str, str]:
        return {
            "provider": self.config.provider.value,
            "bucket": self.config.bucket,
            "region": self.config.effective_region,
        }


async def initialize(
    config: ProviderConfig | Mapping[str, str],
    logger: Any = None,
) -> BucketHandle:
    """
    Open the bucket described by config.

    Args:
        config: A ProviderConfig, or the raw key-value map from the
            backup location (provider, bucket, prefix, region, ...)
        logger: structlog logger used for this handle's operations

    Returns:
        BucketHandle ready for transfers

    Raises:
        ConfigurationError: required keys are missing or invalid
        UnsupportedProviderError: no provider is registered for config.provider
        CredentialError: credential material is absent or unreadable
        BucketConnectionError: the bucket cannot be reached or opened
    """
    if logger is None:
        logger = get_logger()

    if not isinstance(config, ProviderConfig):
        if not config.get("region"):
            logger.info("no_region_provided")
        config = parse_provider_config(config)

    provider = PROVIDERS.get(config.provider)
    if provider is None:
        raise UnsupportedProviderError(
            f"Provider {config.provider.value!r} is not supported",
            details={"provider": config.provider.value},
        )

    log = logger.bind(
        provider=config.provider.value,
        bucket=config.bucket,
        region=config.effective_region,
    )

    try:
        backend = await provider.open(config, log)
    except SnapXferError as e:
        log.error("bucket_setup_failed", error=str(e))
        raise

    log.info("bucket_connected", prefix=config.prefix)

    return BucketHandle(config=config, backend=backend, logger=logger)


async def shutdown(handle: BucketHandle) -> None:
    """
    Release the provider session behind handle.

    Should be called once when the process is done with the bucket.
    """
    await handle.backend.close()
    handle.logger.bind(**handle.log_context()).info(
        "bucket_disconnected",
        uploads=handle.stats.uploads,
        downloads=handle.stats.downloads,
        failures=handle.stats.failures,
    )
