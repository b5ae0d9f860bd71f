"""Engine error types."""

from __future__ import annotations


class ConfigurationError(ValueError):
    """Raised before any round runs when the configuration cannot produce combinations."""
