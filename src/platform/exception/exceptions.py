class CustomBaseError(Exception):
    """Base class for all custom exceptions - controls logging behavior in @Logger.io"""

    def __init__(self, message: str, status_code: int = 500) -> None:
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class UnauthenticatedError(CustomBaseError):
    def __init__(self, message: str = 'Not authenticated') -> None:
        super().__init__(message, 401)


class InvalidArgumentError(CustomBaseError):
    def __init__(self, message: str) -> None:
        super().__init__(message, 400)


class ForbiddenError(CustomBaseError):
    def __init__(self, message: str) -> None:
        super().__init__(message, 403)


class NotFoundError(CustomBaseError):
    def __init__(self, message: str) -> None:
        super().__init__(message, 404)


class FailedPreconditionError(CustomBaseError):
    def __init__(self, message: str, status_code: int = 409) -> None:
        super().__init__(message, status_code)


class ConcurrentModificationError(CustomBaseError):
    """A conditional write lost against a concurrent writer; re-read and retry."""

    def __init__(self, message: str) -> None:
        super().__init__(message, 409)


class InternalError(CustomBaseError):
    def __init__(self, message: str = 'Internal server error') -> None:
        super().__init__(message, 500)
