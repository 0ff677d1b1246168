#!/usr/bin/env python3
"""
Request models for API endpoints.
"""

import uuid
from typing import List, Optional

from pydantic import BaseModel, Field, model_validator


class AssignRequest(BaseModel):
    """Request to assign one position, or a batch of positions."""
    position_id: Optional[uuid.UUID] = Field(None, description="Single position to assign")
    position_ids: Optional[List[uuid.UUID]] = Field(
        None,
        min_length=1,
        max_length=500,
        description="Batch of positions to assign (1-500)"
    )
    force: bool = Field(default=False, description="Reassign positions that are not open")

    @model_validator(mode="after")
    def _exactly_one_target(self) -> "AssignRequest":
        if (self.position_id is None) == (self.position_ids is None):
            raise ValueError("Provide exactly one of position_id or position_ids")
        return self

    @property
    def is_single(self) -> bool:
        return self.position_id is not None

    def target_ids(self) -> List[uuid.UUID]:
        return [self.position_id] if self.position_id is not None else list(self.position_ids)
