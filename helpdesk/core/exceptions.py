"""
Core Exceptions
================

Custom exceptions for the helpdesk service.

Chat failures carry a short ``code`` so the gateway can report them to the
originating connection as a typed ``messageError`` event.
"""

from typing import Optional


class ApplicationException(Exception):
    """Base exception for all application errors."""

    code = "application_error"

    def __init__(self, message: str, details: Optional[dict] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class RepositoryException(ApplicationException):
    """Base exception for repository/data access errors."""

    code = "repository_error"


class ValidationException(ApplicationException):
    """Exception for validation errors."""

    code = "validation_error"


class ResourceNotFoundException(ApplicationException):
    """Exception when a requested resource is not found."""

    code = "not_found"

    def __init__(
        self,
        resource_type: str,
        resource_id: Optional[str] = None,
        details: Optional[dict] = None
    ):
        self.resource_type = resource_type
        self.resource_id = resource_id
        message = f"{resource_type}"
        if resource_id:
            message += f" with id '{resource_id}'"
        message += " not found"
        super().__init__(message, details)


class ExternalServiceException(ApplicationException):
    """Base exception for external service failures."""

    code = "external_service_error"

    def __init__(
        self,
        service_name: str,
        message: str,
        details: Optional[dict] = None
    ):
        self.service_name = service_name
        super().__init__(f"{service_name}: {message}", details)


class TransportException(ApplicationException):
    """Connection-level failure (socket closed, send failed)."""

    code = "transport_error"


# ========== Realtime chat ==========

class InvalidMessage(ValidationException):
    """Chat event is missing fields or carries blank content."""

    code = "invalid_message"


class InvalidEvent(InvalidMessage):
    """Inbound frame is not JSON or names an unknown event."""

    code = "invalid_event"


class PersistenceFailed(RepositoryException):
    """Message was broadcast but could not be appended to the ticket."""

    code = "persistence_failed"

    def __init__(self, ticket_id: str, message: str, details: Optional[dict] = None):
        self.ticket_id = ticket_id
        super().__init__(message, details or {"ticket_id": ticket_id})


class RewardFailed(ApplicationException):
    """Awarding chat participation points failed. Never surfaced to clients."""

    code = "reward_failed"

    def __init__(self, user_id: str, message: str, details: Optional[dict] = None):
        self.user_id = user_id
        super().__init__(message, details or {"user_id": user_id})


# ========== SLA monitor ==========

class LookupFailed(RepositoryException):
    """Assignee lookup failed while processing a breached ticket."""

    code = "lookup_failed"


class NotifyFailed(ExternalServiceException):
    """Notifier could not deliver a breach notification."""

    code = "notify_failed"

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__("Notifier", message, details)
