"""State data models for organized vaults."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, Field


class VaultState(BaseModel):
    """Run bookkeeping persisted alongside a vault.

    Only the time of the last completed run is retained; individual runs
    leave no other history in the state file.
    """

    root: str
    last_organized_at: Optional[datetime] = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


__all__ = ["VaultState"]
