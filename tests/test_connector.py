# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
Bucket connector and configuration tests.
"""

from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest
from botocore.exceptions import ClientError, EndpointConnectionError
from google.api_core.exceptions import Forbidden, NotFound
from google.auth.exceptions import RefreshError, TransportError

from snapxfer.config import (
    DEFAULT_AWS_REGION,
    CloudProvider,
    ProviderConfig,
    parse_provider_config,
)
from snapxfer.connector import BucketHandle, initialize, shutdown
from snapxfer.env import create_config_from_env
from snapxfer.exceptions import (
    BucketConnectionError,
    ConfigurationError,
    CredentialError,
    UnsupportedProviderError,
)
from snapxfer.providers import PROVIDERS
from snapxfer.providers.aws import AWSProvider
from snapxfer.providers.gcp import GCPProvider


@pytest.fixture
def spy_providers(monkeypatch, memory_backend):
    """Replace every registered provider with a spy returning memory_backend."""
    spies = {}
    for provider in list(PROVIDERS):
        spy = AsyncMock()
        spy.open.return_value = memory_backend
        monkeypatch.setitem(PROVIDERS, provider, spy)
        spies[provider] = spy
    return spies


# ============================================================================
# Configuration
# ============================================================================

def test_parse_provider_config_reads_all_keys():
    config = parse_provider_config(
        {
            "provider": "AWS",
            "bucket": "snapshots",
            "prefix": "/cluster-a/",
            "region": "eu-west-1",
            "s3Url": "http://minio:9000",
        }
    )

    assert config.provider == CloudProvider.AWS
    assert config.bucket == "snapshots"
    assert config.prefix == "cluster-a"
    assert config.effective_region == "eu-west-1"
    assert config.endpoint_url == "http://minio:9000"
    assert config.profile == "default"


def test_aws_region_defaults_when_absent():
    config = parse_provider_config({"provider": "aws", "bucket": "snapshots"})

    assert config.region == ""
    assert config.effective_region == DEFAULT_AWS_REGION == "us-east-2"


def test_gcp_has_no_default_region():
    config = ProviderConfig(provider=CloudProvider.GCP, bucket="snapshots")

    assert config.effective_region == ""


@pytest.mark.parametrize("mapping", [{"bucket": "b"}, {"provider": "aws"}, {"provider": "aws", "bucket": ""}])
def test_missing_required_keys_raise_configuration_error(mapping):
    with pytest.raises(ConfigurationError):
        parse_provider_config(mapping)


def test_empty_bucket_rejected_by_dataclass():
    with pytest.raises(ConfigurationError) as exc_info:
        ProviderConfig(provider=CloudProvider.AWS, bucket="  ")

    assert exc_info.value.details["errors"]


def test_with_updates_returns_new_config():
    config = ProviderConfig(provider=CloudProvider.AWS, bucket="a")
    updated = config.with_updates(bucket="b")

    assert updated.bucket == "b"
    assert config.bucket == "a"


def test_create_config_from_env(monkeypatch):
    monkeypatch.setenv("SNAPXFER_PROVIDER", "gcp")
    monkeypatch.setenv("SNAPXFER_BUCKET", "snapshots")
    monkeypatch.setenv("SNAPXFER_PREFIX", "prod")

    config = create_config_from_env()

    assert config.provider == CloudProvider.GCP
    assert config.prefix == "prod"


# ============================================================================
# Provider dispatch
# ============================================================================

@pytest.mark.asyncio
@pytest.mark.parametrize("provider", ["azure", "minio", "s3", "GCS", "aws2"])
async def test_unsupported_provider_never_opens_a_connection(provider, spy_providers):
    with pytest.raises(UnsupportedProviderError) as exc_info:
        await initialize({"provider": provider, "bucket": "snapshots"})

    assert exc_info.value.details["provider"] == provider
    for spy in spy_providers.values():
        spy.open.assert_not_called()


@pytest.mark.asyncio
async def test_initialize_dispatches_to_registered_provider(spy_providers, memory_backend):
    handle = await initialize({"provider": "gcp", "bucket": "snapshots", "prefix": "c1"})

    assert isinstance(handle, BucketHandle)
    assert handle.backend is memory_backend
    spy_providers[CloudProvider.GCP].open.assert_awaited_once()
    spy_providers[CloudProvider.AWS].open.assert_not_called()
    assert handle.object_key("snap-1") == "c1/snap-1"

    await shutdown(handle)
    assert memory_backend.closed


def test_object_key_without_prefix(memory_backend):
    handle = BucketHandle(
        config=ProviderConfig(provider=CloudProvider.AWS, bucket="b"),
        backend=memory_backend,
        logger=None,
    )

    assert handle.object_key("/snap-1") == "snap-1"


# ============================================================================
# Credential discovery
# ============================================================================

@pytest.mark.asyncio
async def test_aws_requires_credentials_file_env(monkeypatch):
    monkeypatch.delenv("AWS_SHARED_CREDENTIALS_FILE", raising=False)
    config = ProviderConfig(provider=CloudProvider.AWS, bucket="snapshots")

    with pytest.raises(CredentialError, match="AWS_SHARED_CREDENTIALS_FILE"):
        await AWSProvider().open(config, AsyncMock())


@pytest.mark.asyncio
async def test_aws_rejects_unreadable_credentials_file(monkeypatch, temp_dir: Path):
    missing = temp_dir / "credentials"
    monkeypatch.setenv("AWS_SHARED_CREDENTIALS_FILE", str(missing))
    config = ProviderConfig(provider=CloudProvider.AWS, bucket="snapshots")

    with pytest.raises(CredentialError) as exc_info:
        await AWSProvider().open(config, AsyncMock())

    assert exc_info.value.details["path"] == str(missing)


@pytest.mark.asyncio
async def test_gcp_missing_default_credentials(monkeypatch):
    from google.auth.exceptions import DefaultCredentialsError

    def no_credentials(*args, **kwargs):
        raise DefaultCredentialsError("no ADC")

    monkeypatch.setattr("google.auth.default", no_credentials)
    config = ProviderConfig(provider=CloudProvider.GCP, bucket="snapshots")

    with pytest.raises(CredentialError):
        await GCPProvider().open(config, AsyncMock())


def test_trailing_slash_prefix_does_not_double_separator(memory_backend):
    handle = BucketHandle(
        config=ProviderConfig(provider=CloudProvider.AWS, bucket="b", prefix="cluster-a/"),
        backend=memory_backend,
        logger=None,
    )

    assert handle.object_key("snap-1") == "cluster-a/snap-1"


# ============================================================================
# Bucket reachability
# ============================================================================

class FakeClientContext:
    """Async context manager standing in for session.create_client()."""

    def __init__(self, client):
        self.client = client
        self.exited = False

    async def __aenter__(self):
        return self.client

    async def __aexit__(self, exc_type, exc, tb):
        self.exited = True
        return False


@pytest.fixture
def aws_credentials_file(monkeypatch, temp_dir: Path) -> Path:
    path = temp_dir / "credentials"
    path.write_text("[default]\naws_access_key_id = AKIA\naws_secret_access_key = secret\n")
    monkeypatch.setenv("AWS_SHARED_CREDENTIALS_FILE", str(path))
    return path


def _patch_aws_session(monkeypatch, head_bucket_error):
    client = AsyncMock()
    client.head_bucket.side_effect = head_bucket_error
    context = FakeClientContext(client)

    session = MagicMock()
    session.get_credentials = AsyncMock(return_value=object())
    session.create_client.return_value = context
    monkeypatch.setattr("snapxfer.providers.aws.get_session", lambda: session)
    return session, context


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "error",
    [
        ClientError({"Error": {"Code": "404", "Message": "Not Found"}}, "HeadBucket"),
        ClientError({"Error": {"Code": "403", "Message": "Forbidden"}}, "HeadBucket"),
        EndpointConnectionError(endpoint_url="https://s3.eu-west-1.amazonaws.com"),
    ],
)
async def test_aws_unreachable_bucket_raises_connection_error(
    monkeypatch, aws_credentials_file, error
):
    session, context = _patch_aws_session(monkeypatch, error)
    config = ProviderConfig(provider=CloudProvider.AWS, bucket="snapshots", region="eu-west-1")

    with pytest.raises(BucketConnectionError) as exc_info:
        await AWSProvider().open(config, MagicMock())

    assert exc_info.value.details == {"bucket": "snapshots", "region": "eu-west-1"}
    assert exc_info.value.__cause__ is error
    assert context.exited
    session.set_config_variable.assert_any_call("credentials_file", str(aws_credentials_file))


@pytest.mark.asyncio
async def test_aws_open_uses_default_region(monkeypatch, aws_credentials_file):
    session, context = _patch_aws_session(monkeypatch, None)
    config = ProviderConfig(provider=CloudProvider.AWS, bucket="snapshots")

    backend = await AWSProvider().open(config, MagicMock())

    session.create_client.assert_called_once_with(
        "s3", region_name="us-east-2", endpoint_url=None
    )
    context.client.head_bucket.assert_awaited_once_with(Bucket="snapshots")
    assert not context.exited

    await backend.close()
    assert context.exited


def _patch_gcs_client(monkeypatch, get_bucket_error):
    client = MagicMock()
    client.get_bucket.side_effect = get_bucket_error
    monkeypatch.setattr("google.auth.default", lambda *a, **kw: (object(), "proj-1"))
    monkeypatch.setattr("snapxfer.providers.gcp.storage.Client", lambda **kw: client)
    return client


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "error",
    [
        NotFound("bucket snapshots does not exist"),
        Forbidden("caller lacks storage.buckets.get"),
        RefreshError("invalid_grant: account disabled"),
        TransportError("metadata server unreachable"),
    ],
)
async def test_gcp_unreachable_bucket_raises_connection_error(monkeypatch, error):
    client = _patch_gcs_client(monkeypatch, error)
    config = ProviderConfig(provider=CloudProvider.GCP, bucket="snapshots")

    with pytest.raises(BucketConnectionError) as exc_info:
        await GCPProvider().open(config, MagicMock())

    assert exc_info.value.details == {"bucket": "snapshots", "region": ""}
    assert exc_info.value.__cause__ is error
    client.close.assert_called_once()


@pytest.mark.asyncio
async def test_gcp_auth_failure_is_logged_by_initialize(monkeypatch):
    _patch_gcs_client(monkeypatch, RefreshError("invalid_grant: account disabled"))
    logger = MagicMock()

    with pytest.raises(BucketConnectionError):
        await initialize({"provider": "gcp", "bucket": "snapshots"}, logger=logger)

    bound = logger.bind.return_value
    bound.error.assert_called_once()
    assert bound.error.call_args.args[0] == "bucket_setup_failed"
