from __future__ import annotations


class SalesbotError(Exception):
    """Base class for errors raised by the salesbot package."""


class ConfigurationError(SalesbotError, ValueError):
    """Raised when settings or sampling parameters are out of range."""


class GenerationUnavailable(SalesbotError):
    """The generation backend is not loaded or cannot be reached."""
