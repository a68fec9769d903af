"""
Error taxonomy for the paste lifecycle.

Every error the engine raises carries a message that is safe to show to the
caller and the HTTP status the API layer answers with.
"""


class PasteError(Exception):
    """Base class for classified paste failures."""

    status_code = 500
    message = "Internal server error"

    def __init__(self, message: str = None):
        super().__init__(message or self.message)
        if message:
            self.message = message


class NotFoundError(PasteError):
    """Paste is absent, expired or deleted. The three cases look the same."""

    status_code = 404
    message = "Paste not found"


class PasswordRequiredError(PasteError):
    status_code = 401
    message = "Password required for encrypted paste"


class InvalidPasswordError(PasteError):
    """Wrong password, or ciphertext that cannot be decrypted at all."""

    status_code = 401
    message = "Invalid password"


class StorageError(PasteError):
    status_code = 500
    message = "Storage unavailable"


class DuplicatePasteIdError(StorageError):
    message = "Paste id already in use"


class DecryptionError(Exception):
    """Raised by the cipher. Converted to InvalidPasswordError by the engine."""
