"""Authenticated identity.

Issued by the external identity provider and read-only to this service.
"""

from typing import Any

from resilience.domain.model.common import DomainModel

# Metadata keys that may carry a human name, in order of preference
NAME_METADATA_KEYS = ("full_name", "name", "displayName", "display_name")


class Identity(DomainModel):
    """The user the identity provider says is signed in.

    ``subject_id`` is the provider's stable id for the user. An empty
    subject id is representable so that callers can be told it is invalid.
    """

    subject_id: str
    email: str | None = None
    phone: str | None = None
    metadata: dict[str, Any] = {}  # Provider user metadata (names, avatar, ...)
    provider: str | None = None  # e.g. "google"

    def suggested_display_name(self) -> str | None:
        """Best-effort display name derived from provider data.

        First non-blank of the name metadata fields, then the local part of
        the email address.
        """
        for key in NAME_METADATA_KEYS:
            value = self.metadata.get(key)
            if isinstance(value, str) and value.strip():
                return value.strip()

        if self.email:
            local_part = self.email.split("@")[0].strip()
            if local_part:
                return local_part

        return None

    @property
    def avatar_url(self) -> str | None:
        """Avatar URL from provider metadata, if any."""
        value = self.metadata.get("avatar_url")
        return value if isinstance(value, str) and value else None
