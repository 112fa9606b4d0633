"""
Self-registration with the registry service.

One tick decides between create and update by looking the module up first.
Nothing is remembered between ticks: if the entry disappears the next tick
creates it again.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass

from . import schemas
from .client import RegistryClient

MODULE_NAME = "projects"
MODULE_FULL_NAME = "Projects"
MODULE_DESCRIPTION = "Projects Module"

logger = logging.getLogger(__name__)


class TickOutcome(str, enum.Enum):
    CREATED = "created"
    UPDATED = "updated"


@dataclass(frozen=True)
class ModuleIdentity:
    """
    URLs this service reports about itself.
    """

    api_url: str
    web_url: str


def new_descriptor(identity: ModuleIdentity) -> schemas.NewDescriptorRequest:
    return schemas.NewDescriptorRequest(
        name=MODULE_NAME,
        full_name=MODULE_FULL_NAME,
        description=MODULE_DESCRIPTION,
        api_url=identity.api_url,
        web_url=identity.web_url,
    )


def updated_descriptor(
    identity: ModuleIdentity,
    current: schemas.RegistryDescriptor,
) -> schemas.UpdateDescriptorRequest:
    return schemas.UpdateDescriptorRequest(
        id=current.id,
        **new_descriptor(identity).model_dump(),
    )


async def run_tick(client: RegistryClient, identity: ModuleIdentity) -> TickOutcome:
    """
    Create or update this module's descriptor. Raises `RegistryProtocolError`.
    """
    current = await client.lookup(MODULE_NAME)
    if current is None:
        await client.create(new_descriptor(identity))
        logger.info("registry_module_created name=%s", MODULE_NAME)
        return TickOutcome.CREATED

    await client.update(updated_descriptor(identity, current))
    logger.debug("registry_module_updated name=%s id=%s", MODULE_NAME, current.id)
    return TickOutcome.UPDATED
