# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
Cloud providers - one BucketProvider per supported object store.
"""

from typing import Dict

from snapxfer.config import CloudProvider
from snapxfer.providers.aws import AWSProvider
from snapxfer.providers.base import (
    BucketBackend,
    BucketProvider,
    ObjectReader,
    ObjectWriter,
)
from snapxfer.providers.gcp import GCPProvider

# Adding a provider means adding an entry here and a CloudProvider member
PROVIDERS: Dict[CloudProvider, BucketProvider] = {
    CloudProvider.AWS: AWSProvider(),
    CloudProvider.GCP: GCPProvider(),
}

__all__ = [
    "PROVIDERS",
    "AWSProvider",
    "GCPProvider",
    "BucketBackend",
    "BucketProvider",
    "ObjectReader",
    "ObjectWriter",
]
