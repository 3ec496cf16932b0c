"""Adapter layer errors."""


class AdapterError(Exception):
    """Base adapter error."""

    pass


class ProviderError(AdapterError):
    """The hosted identity provider failed or refused a request.

    Attributes:
        status_code: HTTP status returned by the provider, if it answered
    """

    def __init__(self, message: str, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message)
