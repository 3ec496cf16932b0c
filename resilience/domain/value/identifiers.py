"""Strongly typed identifiers for domain entities."""

from typing import NewType

# Store-assigned sequential row identifier of a profile
ProfileId = NewType("ProfileId", int)
