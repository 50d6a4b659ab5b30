"""App role assignment entity."""

from dataclasses import dataclass
from uuid import UUID


@dataclass(frozen=True, slots=True)
class AppRoleAssignment:
    """A granted application permission (admin consent) for a service principal."""

    id: str
    principal_id: UUID
    resource_id: UUID
    app_role_id: UUID

    @property
    def key(self) -> tuple[UUID, UUID, UUID]:
        """Natural key of the assignment."""
        return (self.principal_id, self.resource_id, self.app_role_id)
