"""Custom exception classes for the VISOR API."""


class VisorError(Exception):
    """Base exception for VISOR."""

    def __init__(self, code: str, message: str, details=None, status_code: int = 500):
        self.code = code
        self.message = message
        self.details = details
        self.status_code = status_code
        super().__init__(message)


class ValidationError(VisorError):
    """Malformed or incomplete client input."""

    def __init__(self, message: str, details=None):
        super().__init__("IncompleteBody", message, details, status_code=400)


class NotFoundError(VisorError):
    """Resource not found (or owned by another organization)."""

    def __init__(self, resource: str, resource_id: str):
        super().__init__(
            "NotFound",
            f"{resource} '{resource_id}' not found",
            status_code=404,
        )


class ImmutableStateError(VisorError):
    """Mutation attempted on an approved report."""

    def __init__(self, report_id: str):
        super().__init__(
            "ImmutableReport",
            f"Report '{report_id}' is approved and can no longer be changed",
            status_code=409,
        )


class ConflictError(VisorError):
    """Stale optimistic-concurrency token."""

    def __init__(self, message: str):
        super().__init__("Conflict", message, status_code=409)


class PersistenceError(VisorError):
    """The store or storage backend rejected an operation."""

    def __init__(self, message: str, details=None):
        super().__init__("InternalError", message, details, status_code=500)


class AuthenticationError(VisorError):
    """Missing or invalid credential."""

    def __init__(self, message: str = "Authentication required"):
        super().__init__("Unauthorized", message, status_code=401)
