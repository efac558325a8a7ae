"""
Domain errors and their HTTP mapping
"""
from dataclasses import dataclass, asdict
from typing import List, Optional
from fastapi import status


@dataclass(frozen=True)
class FieldError:
    """One schema or submission rule violation"""
    code: str
    message: str
    field_id: Optional[str] = None

    def to_dict(self) -> dict:
        data = asdict(self)
        return {"code": data["code"], "fieldId": data["field_id"], "message": data["message"]}


class FormCraftError(Exception):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Server error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(FormCraftError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Validation failed"

    def __init__(self, errors: List[FieldError], message: Optional[str] = None):
        self.errors = list(errors)
        if message is None and self.errors:
            message = "; ".join(e.message for e in self.errors)
        super().__init__(message)


class AuthError(FormCraftError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Could not validate credentials"


class InvalidCredentials(FormCraftError):
    """Wrong email or password at login"""
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid credentials"


class OwnershipError(FormCraftError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Not authorized"


class NotFound(FormCraftError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class ConflictError(FormCraftError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Record already exists"


class StoreError(FormCraftError):
    """Durable store failure. Absorbed by the store supervisor."""
    default_message = "Store unavailable"


class InternalError(FormCraftError):
    default_message = "Server error"
