class VaultError(Exception):
    """Base error for contentvault."""


class StorageError(VaultError):
    """Raised by a slot backend when the durable medium cannot be read or written."""
