"""
Service-level errors.

Services raise these instead of HTTPException so they stay usable outside a
request (the weekly scheduler calls the same code). The exception handlers in
``mediecho.main`` turn them into the structured error body.
"""

from typing import Any, Dict, List, Optional


class ServiceError(Exception):
    status_code = 400

    def __init__(
        self,
        message: str,
        details: Optional[List[Any]] = None,
        **extra: Any,
    ):
        super().__init__(message)
        self.message = message
        self.details = details
        self.extra: Dict[str, Any] = extra

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"success": False, "message": self.message}
        if self.details:
            body["details"] = self.details
        body.update(self.extra)
        return body


class ValidationError(ServiceError):
    status_code = 400


class NotFoundError(ServiceError):
    status_code = 404


class PaymentRequiredError(ServiceError):
    status_code = 402


class DuplicateBriefError(ServiceError):
    """A brief already exists for the exact (user, week_start, week_end)."""

    status_code = 400

    def __init__(self, brief_id: int):
        super().__init__("A brief already exists for this week", brief_id=brief_id)
        self.brief_id = brief_id


class NoLogsError(ServiceError):
    status_code = 400

    def __init__(self, message: str = "No logs found for this week"):
        super().__init__(message)


class BillingNotConfiguredError(ServiceError):
    status_code = 503


class DecryptionError(ServiceError):
    """Ciphertext could not be decrypted with the configured secret."""

    status_code = 500
