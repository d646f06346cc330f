# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
Human-friendly error message helpers for snapxfer.

These helpers centralize wording for common configuration and credential
errors so that all modules present consistent, actionable messages.
"""


def explain_missing_provider() -> str:
    """
    Explain that the provider key is missing from the plugin config.
    """

    return (
        "Cloud provider is not configured. "
        "Set 'provider' in the backup location config (or SNAPXFER_PROVIDER) "
        "to one of: 'aws', 'gcp'."
    )


def explain_missing_bucket() -> str:
    """
    Explain that the bucket key is missing from the plugin config.
    """

    return (
        "Bucket is not configured. "
        "Set 'bucket' in the backup location config (or SNAPXFER_BUCKET)."
    )


def explain_unsupported_provider(value: str | None) -> str:
    """
    Explain that the provider string is not one we know how to open.
    """

    return (
        f"Provider {value!r} is not supported. "
        "Expected one of: 'aws', 'gcp'."
    )


def explain_missing_aws_credentials_env() -> str:
    """
    Explain that AWS_SHARED_CREDENTIALS_FILE is not set.
    """

    return (
        "AWS credentials are not configured. "
        "Set AWS_SHARED_CREDENTIALS_FILE to the path of a shared credentials file."
    )


def explain_unreadable_aws_credentials(path: str) -> str:
    """
    Explain that the shared credentials file cannot be read.
    """

    return (
        f"AWS shared credentials file {path!r} does not exist or is not readable. "
        "Mount the credentials secret at that path or fix AWS_SHARED_CREDENTIALS_FILE."
    )


def explain_missing_gcp_credentials() -> str:
    """
    Explain that application default credentials could not be discovered.
    """

    return (
        "GCP application default credentials were not found. "
        "Set GOOGLE_APPLICATION_CREDENTIALS or run with a workload identity."
    )
