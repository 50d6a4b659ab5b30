"""Application registration entity."""

from dataclasses import dataclass, field
from uuid import UUID


@dataclass(slots=True)
class ApplicationRegistration:
    """An Entra ID application registration."""

    object_id: UUID
    app_id: UUID
    display_name: str
    redirect_uris: list[str] = field(default_factory=list)
    declared_permission_ids: list[UUID] = field(default_factory=list)
