"""
Descriptor payloads exchanged with the registry service.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel


class RegistryDescriptor(BaseModel):
    id: int
    name: str
    full_name: str
    description: str
    api_url: str
    web_url: str
    created_at: datetime
    updated_at: datetime


class NewDescriptorRequest(BaseModel):
    name: str
    full_name: str
    description: str
    api_url: str
    web_url: str


class UpdateDescriptorRequest(NewDescriptorRequest):
    id: int
