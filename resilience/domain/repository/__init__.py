"""Repository interfaces for the ResiliencePro domain.

Repository interfaces are defined in the domain layer (dependency inversion).
Implementations live in the persistence layer.
"""

from resilience.domain.repository.profile import ProfileRepository

__all__ = ["ProfileRepository"]
