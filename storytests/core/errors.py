from typing import Optional

from storytests.models.schemas import ErrorCode


class ApiError(Exception):
    """Error rendered to the client as ``{"message": ..., "code": ...}``."""

    def __init__(self, status_code: int, message: str, code: Optional[ErrorCode] = None):
        super().__init__(message)
        self.status_code = status_code
        self.message = message
        self.code = code

    def to_body(self) -> dict:
        body = {"message": self.message}
        if self.code is not None:
            body["code"] = self.code.value
        return body


class JiraServiceError(Exception):
    """Upstream Jira call failed; ``status_code`` is None for transport errors."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code

    @property
    def is_auth_failure(self) -> bool:
        return self.status_code == 401


class GenerationError(Exception):
    """The generation provider could not produce test cases."""
