"""
Custom exceptions for the lead qualification service.
Provides consistent error handling across the application.
"""
from fastapi import HTTPException, status


class LeadQualifierException(Exception):
    """Base exception for the lead qualifier"""
    def __init__(self, message: str = "An error occurred"):
        self.message = message
        super().__init__(self.message)


class NotFoundError(LeadQualifierException):
    """Resource not found"""
    def __init__(self, resource: str = "Resource", resource_id: str = None):
        message = f"{resource} not found"
        if resource_id:
            message = f"{resource} with id '{resource_id}' not found"
        super().__init__(message)


class ValidationError(LeadQualifierException):
    """Validation failed"""
    def __init__(self, message: str = "Validation failed", field: str = None):
        if field:
            message = f"Validation failed for field '{field}': {message}"
        super().__init__(message)


class PersistenceError(LeadQualifierException):
    """Reading from or writing to the store failed"""
    def __init__(self, operation: str = "Database operation", message: str = None):
        msg = f"{operation} failed"
        if message:
            msg = f"{msg}: {message}"
        super().__init__(msg)


class CorruptModelError(PersistenceError):
    """A stored scoring model has an unusable weight set"""
    def __init__(self, model_version: int = None, message: str = None):
        operation = "Loading scoring model"
        if model_version is not None:
            operation = f"Loading scoring model v{model_version}"
        super().__init__(operation, message or "stored feature weights are invalid")


class ExternalServiceError(LeadQualifierException):
    """External service call failed"""
    def __init__(self, service: str = "External service", message: str = None):
        msg = f"{service} call failed"
        if message:
            msg = f"{msg}: {message}"
        super().__init__(msg)


# HTTP Exception helpers
def raise_not_found(resource: str = "Resource", resource_id: str = None):
    """Raise 404 HTTPException"""
    err = NotFoundError(resource, resource_id)
    raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=err.message)


def raise_validation_error(message: str = "Validation failed", field: str = None):
    """Raise 422 HTTPException"""
    err = ValidationError(message, field)
    raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=err.message)
