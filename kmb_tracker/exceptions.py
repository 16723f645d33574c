"""Exceptions raised by the KMB stop tracker."""


class KMBTrackerError(Exception):
    """Base exception for the app."""


class NetworkError(KMBTrackerError):
    """Raised when a KMB API request fails or returns a non-200 response."""


class ValidationError(KMBTrackerError):
    """Raised when inputs fail validation."""


class DuplicateError(KMBTrackerError):
    """Raised when a favorite already exists for a stop id."""


class NotFoundError(KMBTrackerError):
    """Raised when no favorite has the requested id."""


class StorageError(KMBTrackerError):
    """Raised when the local storage document cannot be read or written."""
