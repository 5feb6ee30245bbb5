"""Application exceptions.

Routers and helpers raise these; ``crm.main`` maps them onto HTTP responses.
"""


class CRMError(Exception):
    """Base exception for all CRM errors."""

    status_code = 500

    def __init__(self, detail: str):
        self.detail = detail
        super().__init__(detail)


class NotFound(CRMError):
    """Raised when an entity is absent or hidden from the caller.

    The two cases are reported identically so callers cannot test for the
    existence of rows outside their scope.
    """

    status_code = 404

    def __init__(self, entity: str = "Record"):
        self.entity = entity
        super().__init__(f"{entity} not found")


class CodeAllocationFailed(CRMError):
    """Raised when no unique daily code could be inserted."""

    def __init__(self, prefix: str, attempts: int):
        self.prefix = prefix
        self.attempts = attempts
        super().__init__(
            f"Could not allocate a unique code for '{prefix}' after {attempts} attempts"
        )


class StoreUnavailable(CRMError):
    """Raised when the persistence store cannot be reached."""

    def __init__(self, detail: str = "Data store unavailable"):
        super().__init__(detail)


class Conflict(CRMError):
    """Raised when a business key is already taken."""

    status_code = 409


class InvalidReference(CRMError):
    """Raised when a payload points at a related record that does not exist."""

    status_code = 400
