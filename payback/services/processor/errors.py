"""Errors raised at the payment processor boundary."""


class CredentialMissing(Exception):
    """The user has not configured a processor secret key."""

    def __init__(self, message: str = "Payment processor API key is not configured") -> None:
        super().__init__(message)
        self.message = message


class ProcessorError(Exception):
    """Base class for failures reported by the payment processor adapter."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ProcessorUnavailable(ProcessorError):
    """Transport failure or processor-side outage; safe to retry manually."""


class ProcessorRejected(ProcessorError):
    """The processor gave a definitive refusal (decline, bad request, bad key)."""

    def __init__(self, reason: str, code: str | None = None) -> None:
        super().__init__(reason)
        self.reason = reason
        self.code = code


class NotFound(ProcessorError):
    """A referenced processor object does not exist."""

    def __init__(self, resource: str, resource_id: str | None = None) -> None:
        label = f"{resource} {resource_id}" if resource_id else resource
        super().__init__(f"{label} not found")
        self.resource = resource
        self.resource_id = resource_id
