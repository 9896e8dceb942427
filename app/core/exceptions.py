"""
Error kinds raised by the requirements and template services.

Callers branch on the exception class instead of parsing messages. Each kind
carries the HTTP status the API layer renders it with.
"""
import functools
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError


class RequirementsError(Exception):
    """Base error for the requirements subsystem."""

    status_code = 400

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.context = context or {}


class ValidationError(RequirementsError):
    """Malformed or incomplete input; never reaches storage."""

    status_code = 422

    def __init__(self, message: str, errors: Optional[List[Dict[str, str]]] = None,
                 context: Optional[Dict[str, Any]] = None):
        super().__init__(message, context)
        self.errors = errors or []


class NotFoundError(RequirementsError):
    """A referenced application, requirement, template or document does not exist."""

    status_code = 404

    def __init__(self, entity: str, entity_id: Optional[str] = None):
        super().__init__(f"{entity} not found", {"entity": entity, "id": entity_id})
        self.entity = entity
        self.entity_id = entity_id


class GuardError(RequirementsError):
    """Operation refused by a business rule (system template, inactive template, status transition)."""

    status_code = 409


class PartialFailureError(RequirementsError):
    """A multi-step operation failed partway; its changes were rolled back."""

    status_code = 500


def wrap_errors(action: str):
    """Re-raise unexpected database errors as ``Failed to <action>: <original>``.

    Errors that are already a RequirementsError pass through untouched.
    """
    def decorator(func):
        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            try:
                return await func(*args, **kwargs)
            except SQLAlchemyError as e:
                raise RequirementsError(f"Failed to {action}: {e}") from e
        return wrapper
    return decorator
