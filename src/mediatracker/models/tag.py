"""
Tag models.
"""

from __future__ import annotations

from typing import FrozenSet

from pydantic import BaseModel, ConfigDict, Field


class TagSummary(BaseModel):
    """A live tag with the number of live entries carrying it."""

    name: str = Field(..., description="Lowercase tag name")
    entry_count: int = Field(..., ge=0)

    model_config = ConfigDict(from_attributes=True)


class TagDelta(BaseModel):
    """Outcome of reconciling an entry's tags against a desired set."""

    added: FrozenSet[str] = Field(default_factory=frozenset)
    removed: FrozenSet[str] = Field(default_factory=frozenset)
    created: FrozenSet[str] = Field(
        default_factory=frozenset, description="Names that needed a new Tag row"
    )

    model_config = ConfigDict(frozen=True)

    @property
    def is_noop(self) -> bool:
        return not (self.added or self.removed)
