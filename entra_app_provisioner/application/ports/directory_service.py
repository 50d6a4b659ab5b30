"""Port for the directory service - driven/secondary port."""

from datetime import datetime
from typing import Protocol
from uuid import UUID

from ...domain.entities import (
    AppRoleAssignment,
    ApplicationRegistration,
    ClientSecret,
    ServicePrincipal,
    Tenant,
)
from ...domain.value_objects import RegistrationSpec


class DirectoryService(Protocol):
    """
    Port for reading and modifying the identity directory.

    This is a driven (secondary) port that defines how the application
    manages application registrations, service principals and consent.
    All methods raise DirectoryServiceError on failure.
    """

    async def get_tenant(self) -> Tenant:
        """Get the tenant of the authenticated session."""
        ...

    async def find_applications(self, display_name: str) -> list[ApplicationRegistration]:
        """Find registrations whose display name equals ``display_name``, ignoring case."""
        ...

    async def create_application(self, spec: RegistrationSpec) -> ApplicationRegistration:
        """Create a single-tenant registration from the spec."""
        ...

    async def update_application(self, object_id: UUID, spec: RegistrationSpec) -> None:
        """Replace the registration's permissions and redirect URIs with the desired ones."""
        ...

    async def add_client_secret(
        self, object_id: UUID, display_name: str, expires_at: datetime
    ) -> ClientSecret:
        """Add a password credential and return it with its one-time secret text."""
        ...

    async def find_service_principal(self, app_id: UUID | str) -> ServicePrincipal | None:
        """Find the service principal of an application, with its app roles."""
        ...

    async def create_service_principal(self, app_id: UUID) -> ServicePrincipal:
        """
        Create the service principal of an application.

        Raises:
            DirectoryConflictError: If it already exists.
        """
        ...

    async def list_app_role_assignments(self, principal_id: UUID) -> list[AppRoleAssignment]:
        """List app-role assignments granted to a service principal."""
        ...

    async def create_app_role_assignment(
        self, principal_id: UUID, resource_id: UUID, app_role_id: UUID
    ) -> AppRoleAssignment:
        """Grant an app role of ``resource_id`` to ``principal_id``."""
        ...
