"""Domain error types."""


class RetrievalError(RuntimeError):
    """Raised when a row written by the store cannot be read back."""


class EntryValidationError(ValueError):
    """Raised when a submitted entry is rejected before reaching the store."""


class UserValidationError(ValueError):
    """Raised when a user registration payload is rejected."""
