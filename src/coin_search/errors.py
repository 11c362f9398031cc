"""Failure taxonomy for a refresh cycle."""
from __future__ import annotations


class RefreshError(RuntimeError):
    """Raised when a refresh cycle cannot produce a snapshot."""

    user_message = "Failed to fetch data"


class NetworkFailure(RefreshError):
    """The outbound request could not complete (DNS, refused, timeout, non-2xx)."""


class ParseFailure(RefreshError):
    """The response body could not be decoded into the expected structure."""


class EmptyResultFailure(RefreshError):
    """The response decoded but yielded zero usable records."""

    user_message = "No data available"
