class RelayError(Exception):
    """Base error carrying the HTTP status it should be answered with."""

    def __init__(self, message: str = "internal server error", status_code: int = 500, payload: dict | None = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.payload = payload

    def to_dict(self) -> dict:
        body = dict(self.payload or {})
        body["error"] = self.message
        return body


class ValidationError(RelayError):
    def __init__(self, message: str, payload: dict | None = None):
        super().__init__(message, status_code=400, payload=payload)


class AuthError(RelayError):
    def __init__(self, message: str = "invalid webhook signature", payload: dict | None = None):
        super().__init__(message, status_code=401, payload=payload)


class NotFoundError(RelayError):
    def __init__(self, message: str = "not found", payload: dict | None = None):
        super().__init__(message, status_code=404, payload=payload)


class UpstreamError(RelayError):
    def __init__(self, message: str, status_code: int = 502, payload: dict | None = None):
        super().__init__(message, status_code=status_code, payload=payload)
