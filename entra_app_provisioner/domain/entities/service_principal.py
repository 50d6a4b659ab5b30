"""Service principal entity and its declared app roles."""

from dataclasses import dataclass, field
from uuid import UUID


@dataclass(frozen=True, slots=True)
class AppRole:
    """An application permission declared by a resource API."""

    id: UUID
    value: str
    display_name: str = ""
    is_enabled: bool = True


@dataclass(slots=True)
class ServicePrincipal:
    """Tenant-local identity instantiated from an application registration."""

    object_id: UUID
    app_id: UUID
    display_name: str
    app_roles: list[AppRole] = field(default_factory=list)

    def find_app_role(self, role_id: UUID) -> AppRole | None:
        """Resolve a declared, enabled app role by identifier."""
        for role in self.app_roles:
            if role.id == role_id and role.is_enabled:
                return role
        return None
