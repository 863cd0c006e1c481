"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class PartialDataUnavailable(DomainException):
    """A single input source (expenses, bank transactions, categories...) could not be read"""

    def __init__(self, source: str, reason: str = ""):
        self.source = source
        super().__init__(f"{source} unavailable: {reason}" if reason else f"{source} unavailable")


class StoreUnavailableError(DomainException):
    """Record store is down or rejected the operation"""

    pass


class GenerativeCallFailure(DomainException):
    """Completion service failed, timed out, or returned an unusable body"""

    def __init__(self, reason: str, message: str = ""):
        self.reason = reason
        super().__init__(message or reason)


class ValidationFailure(DomainException):
    """Caller input is malformed; carries the offending field"""

    def __init__(self, field: str, message: str):
        self.field = field
        self.message = message
        super().__init__(f"{field}: {message}")


class InvalidMissionTypeError(ValidationFailure):
    """Requested weekly mission type does not exist"""

    def __init__(self, mission_type: str):
        super().__init__("mission_type", f"unknown mission type '{mission_type}'")


class AlertNotFoundError(DomainException):
    """Alert id does not belong to the user or does not exist"""

    pass
