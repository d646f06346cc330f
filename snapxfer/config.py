# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
snapxfer Configuration - Immutable configuration data structures.

A ProviderConfig is frozen once created so that a bucket connection never
observes its settings changing underneath it.
"""

from dataclasses import dataclass
from enum import Enum
from typing import List, Mapping

from snapxfer.errors import (
    explain_missing_bucket,
    explain_missing_provider,
    explain_unsupported_provider,
)
from snapxfer.exceptions import ConfigurationError, UnsupportedProviderError

# Region used for AWS when the backup location does not name one
DEFAULT_AWS_REGION = "us-east-2"

# Profile looked up inside the shared credentials file
DEFAULT_AWS_PROFILE = "default"


class CloudProvider(str, Enum):
    """Object storage provider backing a bucket."""

    AWS = "aws"
    GCP = "gcp"


class TransferDirection(str, Enum):
    """Direction of a snapshot transfer."""

    BACKUP = "backup"  # write to the bucket
    RESTORE = "restore"  # read from the bucket


def parse_provider(value: str | None) -> CloudProvider:
    """Resolve a provider string into a CloudProvider."""
    if not value:
        raise ConfigurationError(explain_missing_provider())
    try:
        return CloudProvider(value.strip().lower())
    except ValueError as exc:
        raise UnsupportedProviderError(
            explain_unsupported_provider(value),
            details={"provider": value},
        ) from exc


@dataclass(frozen=True)
class ProviderConfig:
    """
    Immutable connection settings for one bucket.

    region and prefix are optional; endpoint_url points the AWS provider at
    an S3-compatible service instead of AWS itself.
    """

    provider: CloudProvider

    bucket: str

    region: str = ""

    # Key prefix under which every object name is scoped
    prefix: str = ""

    endpoint_url: str | None = None

    profile: str = DEFAULT_AWS_PROFILE

    def __post_init__(self) -> None:
        """Validate configuration after creation."""
        errors: List[str] = []

        if not isinstance(self.provider, CloudProvider):
            errors.append(f"Invalid provider: {self.provider!r}")

        if not self.bucket or not self.bucket.strip():
            errors.append(explain_missing_bucket())

        if self.prefix.startswith("/"):
            errors.append(f"prefix must be relative, got {self.prefix!r}")

        if errors:
            raise ConfigurationError(
                "Configuration validation failed",
                details={"errors": errors},
            )

    @property
    def effective_region(self) -> str:
        """Region actually used when opening the bucket."""
        if self.region:
            return self.region
        if self.provider == CloudProvider.AWS:
            return DEFAULT_AWS_REGION
        return ""

    def with_updates(self, **kwargs) -> "ProviderConfig":
        """
        Create a new config with updated values.

        Since the config is frozen, this creates a new instance.
        """
        from dataclasses import asdict

        current = asdict(self)
        current.update(kwargs)
        return ProviderConfig(**current)


def parse_provider_config(config: Mapping[str, str]) -> ProviderConfig:
    """
    Build a ProviderConfig from the key-value map handed over by the
    orchestrator for a backup location.

    Recognized keys: provider, bucket, prefix, region, s3Url, profile.
    Unknown keys are ignored.
    """
    provider = parse_provider(config.get("provider"))

    bucket = config.get("bucket")
    if not bucket:
        raise ConfigurationError(explain_missing_bucket())

    return ProviderConfig(
        provider=provider,
        bucket=bucket,
        region=config.get("region", "") or "",
        prefix=(config.get("prefix", "") or "").strip("/"),
        endpoint_url=config.get("s3Url") or None,
        profile=config.get("profile") or DEFAULT_AWS_PROFILE,
    )
