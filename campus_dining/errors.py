"""Domain errors raised by the service layer and rendered as {"message": ...}"""

from fastapi import status


class ServiceError(Exception):
    """Base class for errors that map onto an HTTP status"""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationFailed(ServiceError):
    status_code = status.HTTP_400_BAD_REQUEST


class PolicyViolation(ServiceError):
    """Operation is not allowed in the resource's current state"""
    status_code = status.HTTP_400_BAD_REQUEST


class InvalidTransition(ServiceError):
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, current, target):
        super().__init__(f"Cannot change order status from {current.value} to {target.value}")
        self.current = current
        self.target = target


class AlreadyExists(ServiceError):
    """Uniqueness constraint violation"""
    status_code = status.HTTP_400_BAD_REQUEST


class Forbidden(ServiceError):
    status_code = status.HTTP_403_FORBIDDEN

    def __init__(self, message: str = "Not authorized to perform this action"):
        super().__init__(message)


class NotFound(ServiceError):
    status_code = status.HTTP_404_NOT_FOUND
