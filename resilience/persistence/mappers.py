"""Mappers for converting between database rows and domain models.

Domain models are immutable pydantic models, so rows are mapped by hand.
"""

from typing import Any, Dict

from resilience.domain.model import Profile
from resilience.domain.value import ProfileId, ProfilePatch


def row_to_profile(row: Dict[str, Any]) -> Profile:
    """Convert database row to Profile domain model.

    Args:
        row: Database row as dict

    Returns:
        Profile domain model
    """
    return Profile(
        id=ProfileId(row["id"]),
        subject_id=row["subject_id"],
        email=row.get("email"),
        display_name=row.get("display_name"),
        avatar_url=row.get("avatar_url"),
        phone=row.get("phone"),
        roles=frozenset(row.get("roles") or []),
        providers=frozenset(row.get("providers") or []),
        provider_type=row.get("provider_type"),
        last_authenticated_at=row.get("last_authenticated_at"),
        created_at=row.get("created_at"),
        updated_at=row.get("updated_at"),
    )


def profile_to_dict(profile: Profile) -> Dict[str, Any]:
    """Convert Profile domain model to an insert dict.

    Store-managed columns (id and timestamps) are left out.

    Args:
        profile: Profile domain model

    Returns:
        Dict suitable for database insertion
    """
    return {
        "subject_id": profile.subject_id,
        "email": profile.email,
        "display_name": profile.display_name,
        "avatar_url": profile.avatar_url,
        "phone": profile.phone,
        "roles": sorted(profile.roles),
        "providers": sorted(profile.providers),
        "provider_type": profile.provider_type,
        "last_authenticated_at": profile.last_authenticated_at,
    }


def patch_to_dict(patch: ProfilePatch) -> Dict[str, Any]:
    """Convert a profile patch to the columns it writes."""
    values = patch.changes()
    for column in ("roles", "providers"):
        if column in values:
            values[column] = sorted(values[column])
    return values
