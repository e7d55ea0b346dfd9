from typing import Any, Dict, Optional


class ChainError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.message}


class ValidationError(ChainError):
    """A field is missing, malformed or collides with an existing record."""
    status_code = 400

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field

    def to_dict(self) -> Dict[str, Any]:
        out = super().to_dict()
        if self.field:
            out["field"] = self.field
        return out


class UnknownReferenceError(ValidationError):
    """A Student/Teacher points at a User id that does not exist."""


class NotFoundError(ChainError):
    status_code = 404

    def __init__(self, message: str = "not found"):
        super().__init__(message)


class AuthenticationError(ChainError):
    status_code = 401


class PersistenceError(ChainError):
    status_code = 500

    def to_dict(self) -> Dict[str, Any]:
        # backend details stay in the log
        return {"error": "internal error"}
