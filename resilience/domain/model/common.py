"""Base model for domain entities."""

from pydantic import BaseModel, ConfigDict


class DomainModel(BaseModel):
    """Immutable domain entity.

    Unknown fields are rejected so that a renamed column or token claim
    fails loudly instead of being dropped.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")
