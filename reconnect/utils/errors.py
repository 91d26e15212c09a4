from typing import Optional


class ServiceError(Exception):
    status_code = 500

    def __init__(self, message: str, error: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.error = error

    def to_dict(self):
        body = {"message": self.message}
        if self.error:
            body["error"] = self.error
        return body


class ValidationError(ServiceError):
    """Missing or invalid input."""

    status_code = 400


class NotFoundError(ServiceError):
    status_code = 404


class StorageError(ServiceError):
    """File or database I/O failed."""

    status_code = 500
