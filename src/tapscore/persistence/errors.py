class SaveError(Exception):
    """Base exception for save/load errors."""


class SaveValidationError(SaveError):
    """Raised when saved data fails to parse or validate."""


class UnsupportedSchemaError(SaveValidationError):
    """Raised when a saved document carries a schema version below the supported minimum."""
