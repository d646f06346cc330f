# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
Environment-based configuration and credential discovery helpers.

- Build a ProviderConfig from environment variables
- Locate the AWS shared credentials file
"""

from __future__ import annotations

import os

from snapxfer.config import ProviderConfig, parse_provider_config
from snapxfer.errors import (
    explain_missing_aws_credentials_env,
    explain_unreadable_aws_credentials,
)
from snapxfer.exceptions import CredentialError

AWS_CREDENTIALS_ENV = "AWS_SHARED_CREDENTIALS_FILE"


def aws_shared_credentials_file() -> str:
    """
    Return the path of the AWS shared credentials file.

    The path must be named by AWS_SHARED_CREDENTIALS_FILE and point to a
    readable file; there is no fallback to ~/.aws/credentials.
    """

    path = os.getenv(AWS_CREDENTIALS_ENV)
    if not path:
        raise CredentialError(explain_missing_aws_credentials_env())

    if not os.path.isfile(path) or not os.access(path, os.R_OK):
        raise CredentialError(
            explain_unreadable_aws_credentials(path),
            details={"path": path},
        )

    return path


def create_config_from_env() -> ProviderConfig:
    """
    Create a ProviderConfig from environment variables.

    Required:
        - SNAPXFER_PROVIDER: 'aws' | 'gcp'
        - SNAPXFER_BUCKET: Name of the bucket holding snapshots

    Optional environment variables:
        - SNAPXFER_PREFIX: Key prefix (default: empty)
        - SNAPXFER_REGION: Region (default: us-east-2 for aws)
        - SNAPXFER_S3_URL: S3-compatible endpoint URL
        - SNAPXFER_AWS_PROFILE: Profile in the credentials file (default: default)
    """

    mapping = {
        "provider": os.getenv("SNAPXFER_PROVIDER", ""),
        "bucket": os.getenv("SNAPXFER_BUCKET", ""),
        "prefix": os.getenv("SNAPXFER_PREFIX", ""),
        "region": os.getenv("SNAPXFER_REGION", ""),
        "s3Url": os.getenv("SNAPXFER_S3_URL", ""),
        "profile": os.getenv("SNAPXFER_AWS_PROFILE", ""),
    }
    return parse_provider_config(mapping)
