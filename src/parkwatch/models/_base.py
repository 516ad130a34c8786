"""Base model for snapshot data.

Snapshot fields use snake_case in Python and the rig dashboard's wire names
as aliases (``total``, ``slots``, ``cardUID`` ...).  Models accept either
form on input and always dump with aliases.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict


class ParkwatchBaseModel(BaseModel):
    model_config = ConfigDict(
        extra="ignore",
        populate_by_name=True,
        validate_assignment=False,
    )

    def to_wire(self) -> dict[str, Any]:
        """JSON-ready dict using wire aliases."""
        return self.model_dump(mode="json", by_alias=True)
