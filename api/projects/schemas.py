"""
Pydantic schemas for project endpoints.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, field_validator


class ProjectRequest(BaseModel):
    # Used for both create and full-replacement update. Empty strings are allowed.
    name: str
    description: str

    @field_validator("name", "description")
    @classmethod
    def _no_nul(cls, value: str) -> str:
        # Postgres text columns reject the NUL character.
        if "\x00" in value:
            raise ValueError("must not contain NUL characters")
        return value


class ProjectSummary(BaseModel):
    id: int
    name: str


class ProjectResponse(BaseModel):
    id: int
    name: str
    description: str
    created_at: datetime
    updated_at: datetime
