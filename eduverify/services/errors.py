class ServiceError(Exception):
    """Base for failures surfaced to callers; str(exc) is the user-facing message."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class AuthError(ServiceError):
    pass


class ConflictError(ServiceError):
    pass


class NotFoundError(ServiceError):
    pass


class ValidationError(ServiceError):
    pass


class InvalidTransitionError(ServiceError):
    pass
