"""
Domain error taxonomy.

Every error carries the HTTP status it maps to and a message that is safe to
show to API clients. Internal detail stays in the logs.
"""


class AppError(Exception):
    status_code: int = 500
    default_message: str = "Internal Server Error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(AppError):
    status_code = 400
    default_message = "Invalid request"


class PayloadTooLarge(ValidationError):
    # Still a validation failure; only the status differs
    status_code = 413
    default_message = "File too large"


class NotFoundError(AppError):
    status_code = 404
    default_message = "Not found"


class StorageWriteFailure(AppError):
    default_message = "Failed to upload file to storage"


class StorageDeleteFailure(AppError):
    default_message = "Failed to delete file from storage"


class PersistenceFailure(AppError):
    default_message = "Database operation failed"
