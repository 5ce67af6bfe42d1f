"""
Application errors.

New error codes go in ERROR_CODES.
"""
from typing import Any, Dict, Optional

ERROR_CODES: Dict[str, Dict[str, Any]] = {
    # Auth
    "UNAUTHORIZED": {"status": 401, "message": "Authentication required"},
    # Validation
    "INVALID_INPUT": {"status": 400, "message": "Invalid input"},
    # Gamification
    "NO_HEARTS_LEFT": {"status": 400, "message": "No hearts left"},
    # Server
    "INTERNAL_ERROR": {"status": 500, "message": "An unexpected error occurred"},
    "DATABASE_ERROR": {"status": 500, "message": "A database error occurred"},
}


class AppError(Exception):
    """Error with a stable code, an HTTP status and optional details."""

    def __init__(self, code: str, details: Optional[Dict[str, Any]] = None):
        info = ERROR_CODES[code]
        super().__init__(info["message"])
        self.code = code
        self.status_code = info["status"]
        self.message = info["message"]
        self.details = details

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"code": self.code, "message": self.message}
        if self.details:
            body["details"] = self.details
        return body


class InsufficientResource(AppError):
    """Requested heart amount exceeds the effective balance. Never retried automatically."""

    def __init__(self, requested: int, available: int):
        super().__init__("NO_HEARTS_LEFT", {"requested": requested, "available": available})
        self.requested = requested
        self.available = available
