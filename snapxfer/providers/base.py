# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
Provider interfaces.

A BucketProvider opens one BucketBackend per process. Backends hand out
single-use writers and readers keyed by object name. A writer must not make
its object visible until close() succeeds.
"""

from abc import ABC, abstractmethod
from typing import Any

from snapxfer.config import ProviderConfig


class ObjectWriter(ABC):
    """Incremental writer for one object."""

    @abstractmethod
    async def write(self, data: bytes) -> None:
        """Append data to the object."""

    @abstractmethod
    async def close(self) -> None:
        """Finalize the object; it becomes visible as a whole or not at all."""

    @abstractmethod
    async def abort(self) -> None:
        """Discard everything written so far and release resources."""


class ObjectReader(ABC):
    """Incremental reader for one object."""

    @abstractmethod
    async def read(self, size: int) -> bytes:
        """Return up to size bytes, or b"" at end of object."""

    @abstractmethod
    async def close(self) -> None:
        """Release the underlying connection."""


class BucketBackend(ABC):
    """Provider-specific operations on an opened bucket."""

    @abstractmethod
    async def new_writer(self, key: str) -> ObjectWriter:
        """Open a writer for key."""

    @abstractmethod
    async def new_reader(self, key: str) -> ObjectReader:
        """Open a reader for key."""

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Delete the object at key."""

    @abstractmethod
    async def read_all(self, key: str) -> bytes:
        """Return the whole object at key."""

    @abstractmethod
    async def exists(self, key: str) -> bool:
        """Check whether an object is stored at key."""

    async def close(self) -> None:
        """Release the provider session."""
        return None


class BucketProvider(ABC):
    """Opens a bucket for one cloud provider."""

    @abstractmethod
    async def open(self, config: ProviderConfig, logger: Any) -> BucketBackend:
        """
        Resolve credentials and open the bucket named by config.

        Raises:
            CredentialError: credential material is absent or unreadable
            BucketConnectionError: the bucket cannot be reached or opened
        """
