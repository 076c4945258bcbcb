"""Exception types raised by the scanner."""

from __future__ import annotations


class SecurityScannerError(Exception):
    """Base class for scanner errors."""


class ConfigError(SecurityScannerError, ValueError):
    """Configuration is unusable; the scan cannot start."""


class RuleDefinitionError(SecurityScannerError, ValueError):
    """A rule definition is malformed."""


class ScannerStateError(SecurityScannerError, RuntimeError):
    """A scanner method was called in the wrong lifecycle phase."""
