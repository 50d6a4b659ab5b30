"""Tenant entity."""

from dataclasses import dataclass
from uuid import UUID


@dataclass(frozen=True, slots=True)
class Tenant:
    """The directory tenant of the authenticated session."""

    tenant_id: UUID
    display_name: str
    default_domain: str
