"""Keygate exception hierarchy."""


class KeygateError(Exception):
    """Base exception for all Keygate errors."""

    status_code = 400

    def __init__(self, message: str = "", code: str = "KEYGATE_ERROR"):
        self.message = message
        self.code = code
        super().__init__(message)


class ValidationError(KeygateError):
    """Raised when a required field is missing or malformed."""

    status_code = 422

    def __init__(self, message: str = "Invalid request"):
        super().__init__(message, code="VALIDATION_ERROR")


class InvalidCredentialsError(KeygateError):
    """Raised on a username/password mismatch."""

    status_code = 401

    def __init__(self, message: str = "Invalid username or password"):
        super().__init__(message, code="INVALID_CREDENTIALS")


class NotFoundError(KeygateError):
    status_code = 404

    def __init__(self, message: str = "Not found"):
        super().__init__(message, code="NOT_FOUND")


class DeviceNotFoundError(NotFoundError):
    def __init__(self, message: str = "Device not found"):
        super().__init__(message)


class UserNotFoundError(NotFoundError):
    def __init__(self, message: str = "User not found"):
        super().__init__(message)


class DuplicateError(KeygateError):
    status_code = 409

    def __init__(self, message: str = "Already exists"):
        super().__init__(message, code="DUPLICATE")


class DuplicateDeviceError(DuplicateError):
    """Raised when issuing a key for a MAC that already holds one."""

    def __init__(self, message: str = "Device already holds a license key"):
        super().__init__(message)


class DuplicateUserError(DuplicateError):
    def __init__(self, message: str = "Username already exists"):
        super().__init__(message)


class BackendUnavailableError(KeygateError):
    """Raised when the database cannot be reached. Safe for the user to retry."""

    status_code = 503

    def __init__(self, message: str = "Backend unavailable, please retry"):
        super().__init__(message, code="BACKEND_UNAVAILABLE")
