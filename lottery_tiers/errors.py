"""Errors raised for invalid input to the tier and generator engines."""


class PreconditionError(ValueError):
    """Required input is missing or invalid; never retried."""

    def __init__(self, message: str, code: str = "BAD_REQUEST", details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}
