"""Package exceptions."""

from __future__ import annotations


class PortfelError(Exception):
    """Base class for errors raised by this package."""


class CapabilityUnavailableError(PortfelError):
    """Raised when an alarm is armed on a host without notification support."""
