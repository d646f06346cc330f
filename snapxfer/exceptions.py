# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
snapxfer Exceptions - Custom exceptions for the snapxfer package.
"""


class SnapXferError(Exception):
    """Base exception for all snapxfer errors."""

    def __init__(self, message: str, details: dict | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ConfigurationError(SnapXferError):
    """Raised when configuration is invalid."""

    pass


class UnsupportedProviderError(SnapXferError):
    """Raised when the requested cloud provider is not recognized."""

    pass


class CredentialError(SnapXferError):
    """Raised when provider credential material is absent or unreadable."""

    pass


class BucketConnectionError(SnapXferError):
    """Raised when the remote bucket cannot be reached or opened."""

    pass


class TransferError(SnapXferError):
    """Base class for failures while moving snapshot data."""

    pass


class UploadFailed(TransferError):
    """Raised when an object could not be written completely."""

    pass


class DownloadFailed(TransferError):
    """Raised when an object could not be read completely."""

    pass


class RemoveFailed(TransferError):
    """Raised when an object could not be deleted."""

    pass


class InvalidStateError(TransferError):
    """Raised when a stream is used after it was closed."""

    pass


class AmbiguousConfigError(SnapXferError):
    """Raised when more than one plugin config object matches the selector."""

    pass


class ClusterLookupError(SnapXferError):
    """Raised when a cluster API lookup fails for a reason other than not-found."""

    pass
