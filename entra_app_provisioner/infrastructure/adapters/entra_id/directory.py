"""Entra ID directory service implementation."""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import Any
from uuid import UUID

from ....application.exceptions import DirectoryConflictError, DirectoryServiceError
from ....domain.entities import (
    AppRole,
    AppRoleAssignment,
    ApplicationRegistration,
    ClientSecret,
    ServicePrincipal,
    Tenant,
)
from ....domain.value_objects import RegistrationSpec
from .graph_client import GraphApiError, GraphClient

logger = logging.getLogger(__name__)


def _odata_quote(value: str) -> str:
    """Quote a string literal for an OData $filter."""
    return "'" + value.replace("'", "''") + "'"


def _translate(action: str, error: GraphApiError) -> DirectoryServiceError:
    """Map a Graph error to the application's exception."""
    msg = f"Failed to {action}: {error.message}"
    if error.status_code == 409:
        return DirectoryConflictError(msg, detail=error.detail)
    return DirectoryServiceError(msg, detail=error.detail)


class EntraIdDirectoryService:
    """
    Directory service implementation using Microsoft Graph API.

    Implements the DirectoryService port for Entra ID on top of an open
    GraphClient session.
    """

    def __init__(self, client: GraphClient) -> None:
        """
        Initialize the directory service.

        Args:
            client: Connected Graph session.
        """
        self._client = client

    async def get_tenant(self) -> Tenant:
        """Get the tenant of the authenticated session."""
        try:
            organizations = await self._client.get_all_pages("/organization")
        except GraphApiError as e:
            raise _translate("read tenant information", e) from e

        if not organizations:
            msg = "Failed to read tenant information: no organization returned"
            raise DirectoryServiceError(msg)

        return self._map_tenant(organizations[0])

    async def find_applications(self, display_name: str) -> list[ApplicationRegistration]:
        """Find registrations whose display name equals ``display_name``, ignoring case."""
        params = {"$filter": f"displayName eq {_odata_quote(display_name)}"}
        try:
            raw = await self._client.get_all_pages("/applications", params=params)
        except GraphApiError as e:
            raise _translate(f"look up application '{display_name}'", e) from e

        # Graph compares displayName case-insensitively
        matches = [self._map_application(a) for a in raw]
        logger.info("Found %d application(s) named '%s'", len(matches), display_name)
        return matches

    async def create_application(self, spec: RegistrationSpec) -> ApplicationRegistration:
        """Create a single-tenant registration from the spec."""
        body = {
            "displayName": spec.display_name,
            "signInAudience": spec.sign_in_audience,
            **self._desired_state(spec),
        }
        try:
            raw = await self._client.post("/applications", body)
        except GraphApiError as e:
            raise _translate(f"create application '{spec.display_name}'", e) from e
        return self._map_application(raw)

    async def update_application(self, object_id: UUID, spec: RegistrationSpec) -> None:
        """Replace the registration's permissions and redirect URIs with the desired ones."""
        try:
            await self._client.patch(f"/applications/{object_id}", self._desired_state(spec))
        except GraphApiError as e:
            raise _translate(f"update application {object_id}", e) from e

    async def add_client_secret(
        self, object_id: UUID, display_name: str, expires_at: datetime
    ) -> ClientSecret:
        """Add a password credential and return it with its one-time secret text."""
        body = {
            "passwordCredential": {
                "displayName": display_name,
                "endDateTime": expires_at.astimezone(UTC).isoformat().replace("+00:00", "Z"),
            }
        }
        try:
            raw = await self._client.post(f"/applications/{object_id}/addPassword", body)
        except GraphApiError as e:
            raise _translate(f"add client secret to application {object_id}", e) from e

        return ClientSecret(
            key_id=UUID(raw["keyId"]),
            secret_text=raw["secretText"],
            display_name=raw.get("displayName", display_name),
            expires_at=self._parse_datetime(raw.get("endDateTime")) or expires_at,
        )

    async def find_service_principal(self, app_id: UUID | str) -> ServicePrincipal | None:
        """Find the service principal of an application, with its app roles."""
        params = {"$filter": f"appId eq {_odata_quote(str(app_id))}"}
        try:
            raw = await self._client.get_all_pages("/servicePrincipals", params=params)
        except GraphApiError as e:
            raise _translate(f"look up service principal for {app_id}", e) from e
        return self._map_service_principal(raw[0]) if raw else None

    async def create_service_principal(self, app_id: UUID) -> ServicePrincipal:
        """Create the service principal of an application."""
        body = {"appId": str(app_id), "accountEnabled": True}
        try:
            raw = await self._client.post("/servicePrincipals", body)
        except GraphApiError as e:
            raise _translate(f"create service principal for {app_id}", e) from e
        return self._map_service_principal(raw)

    async def list_app_role_assignments(self, principal_id: UUID) -> list[AppRoleAssignment]:
        """List app-role assignments granted to a service principal."""
        try:
            raw = await self._client.get_all_pages(f"/servicePrincipals/{principal_id}/appRoleAssignments")
        except GraphApiError as e:
            raise _translate(f"list app role assignments of {principal_id}", e) from e
        return [self._map_assignment(a) for a in raw]

    async def create_app_role_assignment(
        self, principal_id: UUID, resource_id: UUID, app_role_id: UUID
    ) -> AppRoleAssignment:
        """Grant an app role of ``resource_id`` to ``principal_id``."""
        body = {
            "principalId": str(principal_id),
            "resourceId": str(resource_id),
            "appRoleId": str(app_role_id),
        }
        try:
            raw = await self._client.post(f"/servicePrincipals/{principal_id}/appRoleAssignments", body)
        except GraphApiError as e:
            raise _translate(f"assign app role {app_role_id}", e) from e
        return self._map_assignment(raw)

    @staticmethod
    def _desired_state(spec: RegistrationSpec) -> dict[str, Any]:
        """Permissions and redirect URIs, submitted whole to replace what is there."""
        return {
            "requiredResourceAccess": [
                {
                    "resourceAppId": spec.resource_app_id,
                    "resourceAccess": [
                        {"id": str(p.id), "type": str(p.permission_type)}
                        for p in spec.required_permissions
                    ],
                }
            ],
            "web": {"redirectUris": [spec.redirect_uri]},
        }

    @staticmethod
    def _map_tenant(raw: dict[str, Any]) -> Tenant:
        """Map an organization to a Tenant."""
        domains = raw.get("verifiedDomains", [])
        default = next((d for d in domains if d.get("isDefault")), None)
        initial = next((d for d in domains if d.get("isInitial")), None)
        domain = (default or initial or {}).get("name") or raw["id"]
        return Tenant(
            tenant_id=UUID(raw["id"]),
            display_name=raw.get("displayName") or domain,
            default_domain=domain,
        )

    @staticmethod
    def _map_application(raw: dict[str, Any]) -> ApplicationRegistration:
        """Map a Graph application to an ApplicationRegistration."""
        permission_ids = [
            UUID(access["id"])
            for resource in raw.get("requiredResourceAccess") or []
            for access in resource.get("resourceAccess") or []
        ]
        return ApplicationRegistration(
            object_id=UUID(raw["id"]),
            app_id=UUID(raw["appId"]),
            display_name=raw.get("displayName", ""),
            redirect_uris=list((raw.get("web") or {}).get("redirectUris") or []),
            declared_permission_ids=permission_ids,
        )

    @staticmethod
    def _map_service_principal(raw: dict[str, Any]) -> ServicePrincipal:
        """Map a Graph service principal to a ServicePrincipal."""
        roles = [
            AppRole(
                id=UUID(role["id"]),
                value=role.get("value") or "",
                display_name=role.get("displayName") or "",
                is_enabled=role.get("isEnabled", True),
            )
            for role in raw.get("appRoles") or []
        ]
        return ServicePrincipal(
            object_id=UUID(raw["id"]),
            app_id=UUID(raw["appId"]),
            display_name=raw.get("displayName", ""),
            app_roles=roles,
        )

    @staticmethod
    def _map_assignment(raw: dict[str, Any]) -> AppRoleAssignment:
        """Map a Graph app role assignment."""
        return AppRoleAssignment(
            id=raw.get("id", ""),
            principal_id=UUID(raw["principalId"]),
            resource_id=UUID(raw["resourceId"]),
            app_role_id=UUID(raw["appRoleId"]),
        )

    @staticmethod
    def _parse_datetime(dt_string: str | None) -> datetime | None:
        """Parse ISO datetime string to datetime object."""
        if not dt_string:
            return None
        try:
            dt = datetime.fromisoformat(dt_string.replace("Z", "+00:00"))
            return dt if dt.tzinfo else dt.replace(tzinfo=UTC)
        except ValueError:
            logger.warning("Failed to parse datetime: %s", dt_string)
            return None
