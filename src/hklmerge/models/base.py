"""
Base model for exported records.
"""

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class DataModel(BaseModel):
    """
    Base model for records written by hkl-merge.

    Every record gets an optional identifier and a UTC creation time.
    Enums are stored by value so records serialize to plain strings.
    """

    model_config = ConfigDict(
        use_enum_values=True,
        validate_assignment=True,
    )

    # Caller-assigned record identifier
    id: Optional[str] = Field(default=None)

    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> dict:
        """Record as a dict, without unset optional fields."""
        return self.model_dump(exclude_none=True)

    def to_json(self) -> str:
        return self.model_dump_json(exclude_none=True)
