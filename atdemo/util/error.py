"""Utility layer errors."""


class UtilError(Exception):
    """Base utility error."""


class ConfigurationError(UtilError):
    """A primitive was constructed with unusable settings (e.g. a short secret)."""


class SealError(UtilError):
    """Sealed value could not be opened (malformed, forged or expired)."""
