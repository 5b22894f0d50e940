"""
Error hierarchy for Campus Service

Every error carries a machine-readable code and the HTTP status the API layer
renders it with. Services raise these; only main.py turns them into responses.
"""
from typing import Any, Dict


class CampusError(Exception):
    """Base exception for all Campus Service errors"""

    code: str = "CAMPUS_ERROR"
    http_status: int = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_response(self) -> Dict[str, Any]:
        """Convert to the REST error envelope"""
        return {"error": {"code": self.code, "message": self.message}}


class ValidationError(CampusError):
    """A required field is missing or malformed. Raised before any write."""

    code = "VALIDATION_ERROR"
    http_status = 400

    def __init__(self, message: str, field: str):
        super().__init__(message)
        self.field = field

    def to_response(self) -> Dict[str, Any]:
        response = super().to_response()
        response["error"]["field"] = self.field
        return response


class NotFoundError(CampusError):
    """A read that must return an entity found nothing"""

    code = "NOT_FOUND"
    http_status = 404


class StoreFailure(CampusError):
    """The underlying store rejected or failed a statement"""

    code = "STORE_FAILURE"
    http_status = 500
