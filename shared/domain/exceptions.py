"""
Domain Error Categories

Bounded contexts raise subclasses of these; the API layer maps the
category to an HTTP status without importing any context.
"""


class DomainError(Exception):
    """Base class for all expected business-rule failures"""

    code = 'domain_error'

    def __init__(self, message: str = '', *, code: str | None = None):
        super().__init__(message or self.__class__.__name__)
        self.message = message or self.__class__.__name__
        if code:
            self.code = code

    def details(self) -> dict:
        """Extra machine-readable fields for the error body"""
        return {}


class NotFound(DomainError):
    """Referenced aggregate or child entity does not exist"""

    code = 'not_found'


class ValidationFailed(DomainError):
    """Input is malformed or violates a precondition checked before any write"""

    code = 'invalid'


class Conflict(DomainError):
    """Request is well-formed but conflicts with current state"""

    code = 'conflict'

    #: Conflicts caused by the store (contention, timeouts) are worth retrying.
    retryable = False
