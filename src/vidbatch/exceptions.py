"""Exceptions raised by VidBatch components."""


class VidBatchError(Exception):
    """Base exception for all application-specific errors."""


class MetadataFetchError(VidBatchError):
    """Raised when video metadata cannot be retrieved (unavailable, restricted, timeout)."""


class AuthenticationError(VidBatchError):
    """Raised when browser cookies are missing, expired, or rejected by the platform."""


class NoSuitableFormatError(VidBatchError):
    """Raised when no stream (or stream pair) satisfies the requested mode."""


class TransferError(VidBatchError):
    """Raised on any network or I/O fault while streaming bytes to disk."""


class MergeError(VidBatchError):
    """Raised when FFmpeg fails to mux the video and audio tracks."""


class ConfigurationError(VidBatchError):
    """Raised for invalid configuration values (unknown mode, bad links file, ...)."""
