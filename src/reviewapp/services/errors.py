"""Base error for user-facing service failures."""

from fastapi import status


class ServiceError(Exception):
    """A request the service refuses, rendered to the client as ``{"error": message}``."""

    message: str = "Bad request"
    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str | None = None, status_code: int | None = None):
        if message is not None:
            self.message = message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)
