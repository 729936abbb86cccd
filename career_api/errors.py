RETRYABLE_STATUSES = frozenset({429, 503})

# ---------------------------
# Error taxonomy
# ---------------------------
class CareerAPIError(Exception):
    """Base class for errors that map onto an HTTP response."""

    status_code = 500

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ConfigurationError(CareerAPIError):
    pass


class TransportError(CareerAPIError):
    """Upstream HTTP call failed. `status` is None for network errors."""

    def __init__(self, message: str, status: int | None = None, body: str = ""):
        super().__init__(message)
        self.status = status
        self.body = body

    @property
    def retryable(self) -> bool:
        return self.status is None or self.status in RETRYABLE_STATUSES


class ExtractionError(CareerAPIError):
    pass


class ParseError(CareerAPIError):
    pass


class SchemaError(ParseError):
    pass


class AnalysisTimeoutError(CareerAPIError):
    status_code = 504


class PersistenceError(CareerAPIError):
    pass


class PolicyDeniedError(PersistenceError):
    status_code = 403


class NotFoundError(CareerAPIError):
    status_code = 404


class AuthenticationError(CareerAPIError):
    status_code = 401


class AuthorizationError(CareerAPIError):
    status_code = 403


class UploadRejectedError(CareerAPIError):
    status_code = 400


class DocumentReadError(CareerAPIError):
    status_code = 422


class InvalidReportError(CareerAPIError):
    status_code = 422
