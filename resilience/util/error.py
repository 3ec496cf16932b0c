"""Utility layer errors."""


class UtilError(Exception):
    """Base utility error."""

    pass


class ConfigurationError(UtilError):
    """Settings cannot be used as given.

    Attributes:
        settings: Names of the offending settings (env var style)
    """

    def __init__(self, message: str, settings: list[str] | None = None):
        self.settings = settings or []
        detail = f" ({', '.join(self.settings)})" if self.settings else ""
        super().__init__(f"{message}{detail}")
