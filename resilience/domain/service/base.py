"""Base service class for domain services."""


class Service:
    """Marker base for domain services.

    Services hold no connections of their own: repositories and the session
    provider are passed in, so every service can run against the in-memory
    implementations.
    """
