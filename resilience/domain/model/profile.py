"""Profile entity.

One row per authenticated identity, kept in the ``profiles`` table.
"""

from datetime import datetime
from typing import Optional

from resilience.domain.model.common import DomainModel
from resilience.domain.value import ProfileId


class Profile(DomainModel):
    """Profile of a trainer or client, keyed by the identity's subject id.

    ``id`` is assigned by the store on insert and is None only for a
    profile that has not been written yet.
    """

    id: Optional[ProfileId] = None
    subject_id: str
    email: Optional[str] = None
    display_name: Optional[str] = None  # Human edits are never overwritten
    avatar_url: Optional[str] = None
    phone: Optional[str] = None
    roles: frozenset[str] = frozenset()  # Append-only during reconciliation
    providers: frozenset[str] = frozenset()
    provider_type: Optional[str] = None  # Provider of the first sign-in
    last_authenticated_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def has_display_name(self) -> bool:
        """Whether a non-blank display name is already set."""
        return bool(self.display_name and self.display_name.strip())
