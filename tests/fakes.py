"""Test doubles for application ports and Microsoft Graph."""

from __future__ import annotations

import json
import re
from datetime import datetime
from typing import Any
from uuid import UUID, uuid4

import httpx

from entra_app_provisioner.application.exceptions import DirectoryConflictError, DirectoryServiceError
from entra_app_provisioner.domain.entities import (
    AppRoleAssignment,
    ApplicationRegistration,
    ClientSecret,
    ServicePrincipal,
    Tenant,
)
from entra_app_provisioner.domain.value_objects import MICROSOFT_GRAPH_APP_ID, RegistrationSpec


class InMemoryDirectory:
    """Directory service double keeping state in memory, with failure injection."""

    def __init__(self, tenant: Tenant, resource: ServicePrincipal) -> None:
        self.tenant = tenant
        self.applications: list[ApplicationRegistration] = []
        self.service_principals: dict[UUID, ServicePrincipal] = {resource.app_id: resource}
        self.assignments: list[AppRoleAssignment] = []
        self.secrets: list[tuple[UUID, ClientSecret]] = []
        self.updates: list[tuple[UUID, RegistrationSpec]] = []
        self.failures: dict[str, DirectoryServiceError] = {}
        self.failing_roles: set[UUID] = set()
        self.race_service_principal = False

    def _maybe_fail(self, operation: str) -> None:
        if operation in self.failures:
            raise self.failures[operation]

    async def get_tenant(self) -> Tenant:
        self._maybe_fail("get_tenant")
        return self.tenant

    async def find_applications(self, display_name: str) -> list[ApplicationRegistration]:
        self._maybe_fail("find_applications")
        return [a for a in self.applications if a.display_name.casefold() == display_name.casefold()]

    async def create_application(self, spec: RegistrationSpec) -> ApplicationRegistration:
        self._maybe_fail("create_application")
        app = ApplicationRegistration(
            object_id=uuid4(),
            app_id=uuid4(),
            display_name=spec.display_name,
            redirect_uris=[spec.redirect_uri],
            declared_permission_ids=[p.id for p in spec.required_permissions],
        )
        self.applications.append(app)
        return app

    async def update_application(self, object_id: UUID, spec: RegistrationSpec) -> None:
        self._maybe_fail("update_application")
        app = next(a for a in self.applications if a.object_id == object_id)
        app.redirect_uris = [spec.redirect_uri]
        app.declared_permission_ids = [p.id for p in spec.required_permissions]
        self.updates.append((object_id, spec))

    async def add_client_secret(
        self, object_id: UUID, display_name: str, expires_at: datetime
    ) -> ClientSecret:
        self._maybe_fail("add_client_secret")
        secret = ClientSecret(
            key_id=uuid4(),
            secret_text=f"secret-{uuid4()}",
            display_name=display_name,
            expires_at=expires_at,
        )
        self.secrets.append((object_id, secret))
        return secret

    async def find_service_principal(self, app_id: UUID | str) -> ServicePrincipal | None:
        self._maybe_fail("find_service_principal")
        return self.service_principals.get(UUID(str(app_id)))

    async def create_service_principal(self, app_id: UUID) -> ServicePrincipal:
        self._maybe_fail("create_service_principal")
        sp = ServicePrincipal(object_id=uuid4(), app_id=app_id, display_name="sp")
        self.service_principals[app_id] = sp
        if self.race_service_principal:
            msg = "Failed to create service principal: already exists"
            raise DirectoryConflictError(msg, detail="status=409")
        return sp

    async def list_app_role_assignments(self, principal_id: UUID) -> list[AppRoleAssignment]:
        self._maybe_fail("list_app_role_assignments")
        return [a for a in self.assignments if a.principal_id == principal_id]

    async def create_app_role_assignment(
        self, principal_id: UUID, resource_id: UUID, app_role_id: UUID
    ) -> AppRoleAssignment:
        if app_role_id in self.failing_roles:
            msg = f"Failed to assign app role {app_role_id}: Forbidden"
            raise DirectoryServiceError(msg, detail="status=403")
        assignment = AppRoleAssignment(
            id=str(uuid4()),
            principal_id=principal_id,
            resource_id=resource_id,
            app_role_id=app_role_id,
        )
        if any(a.key == assignment.key for a in self.assignments):
            msg = "Permission being assigned already exists on the object"
            raise DirectoryServiceError(msg, detail="status=400")
        self.assignments.append(assignment)
        return assignment


class StaticTokenProvider:
    """Token provider returning a fixed token."""

    def __init__(self, token: str = "test-token", error: Exception | None = None) -> None:
        self.token = token
        self.error = error
        self.acquired = 0
        self.signed_out = 0

    def acquire_token(self) -> str:
        if self.error:
            raise self.error
        self.acquired += 1
        return self.token

    def sign_out(self) -> None:
        self.signed_out += 1


class FakeGraphApi:
    """
    Minimal in-memory Microsoft Graph for httpx.MockTransport.

    Implements the endpoints the provisioner calls. ``errors`` maps
    ``(method, path)`` to ``(status, code)`` to make a request fail. Each
    ``disconnects`` entry ``(method, path regex, exception)`` fails the first
    matching request at the network level.
    """

    def __init__(self, tenant_id: UUID, app_roles: list[dict[str, Any]]) -> None:
        self.tenant_id = tenant_id
        self.applications: list[dict[str, Any]] = []
        self.graph_sp: dict[str, Any] = {
            "id": str(uuid4()),
            "appId": MICROSOFT_GRAPH_APP_ID,
            "displayName": "Microsoft Graph",
            "appRoles": app_roles,
        }
        self.service_principals: list[dict[str, Any]] = [self.graph_sp]
        self.assignments: list[dict[str, Any]] = []
        self.requests: list[httpx.Request] = []
        self.errors: dict[tuple[str, str], tuple[int, str]] = {}
        self.disconnects: list[tuple[str, str, type[httpx.TransportError]]] = []

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path.removeprefix("/v1.0")
        method = request.method

        for entry in self.disconnects:
            disconnect_method, pattern, error_type = entry
            if method == disconnect_method and re.fullmatch(pattern, path):
                self.disconnects.remove(entry)
                raise error_type("connection lost", request=request)

        if (method, path) in self.errors:
            status, code = self.errors[(method, path)]
            error = {"code": code, "message": f"{code} error", "innerError": {"request-id": "req-1"}}
            return httpx.Response(status, json={"error": error})

        body = json.loads(request.content) if request.content else {}
        parts = path.strip("/").split("/")

        match method, parts:
            case "GET", ["organization"]:
                org = {
                    "id": str(self.tenant_id),
                    "displayName": "Contoso",
                    "verifiedDomains": [
                        {"name": "contoso.onmicrosoft.com", "isDefault": False, "isInitial": True},
                        {"name": "contoso.com", "isDefault": True, "isInitial": False},
                    ],
                }
                return httpx.Response(200, json={"value": [org]})
            case "GET", ["applications"]:
                name = self._filter_value(request, "displayName")
                value = [a for a in self.applications if a["displayName"].lower() == name.lower()]
                return httpx.Response(200, json={"value": value})
            case "POST", ["applications"]:
                app = {"id": str(uuid4()), "appId": str(uuid4()), **body}
                self.applications.append(app)
                return httpx.Response(201, json=app)
            case "PATCH", ["applications", object_id]:
                self._application(object_id).update(body)
                return httpx.Response(204)
            case "POST", ["applications", object_id, "addPassword"]:
                credential = body["passwordCredential"]
                created = {
                    "keyId": str(uuid4()),
                    "secretText": "s3cr3t~value",
                    "displayName": credential["displayName"],
                    "endDateTime": credential["endDateTime"],
                }
                self._application(object_id).setdefault("passwordCredentials", []).append(created)
                return httpx.Response(200, json=created)
            case "GET", ["servicePrincipals"]:
                app_id = self._filter_value(request, "appId")
                value = [sp for sp in self.service_principals if sp["appId"] == app_id]
                return httpx.Response(200, json={"value": value})
            case "POST", ["servicePrincipals"]:
                if any(sp["appId"] == body["appId"] for sp in self.service_principals):
                    error = {"code": "Request_MultipleObjectsWithSameKeyValue", "message": "exists"}
                    return httpx.Response(409, json={"error": error})
                sp = {"id": str(uuid4()), "appId": body["appId"], "displayName": "sp", "appRoles": []}
                self.service_principals.append(sp)
                return httpx.Response(201, json=sp)
            case "GET", ["servicePrincipals", sp_id, "appRoleAssignments"]:
                value = [a for a in self.assignments if a["principalId"] == sp_id]
                return httpx.Response(200, json={"value": value})
            case "POST", ["servicePrincipals", sp_id, "appRoleAssignments"]:
                assignment = {"id": f"assignment-{len(self.assignments)}", **body}
                self.assignments.append(assignment)
                return httpx.Response(201, json=assignment)

        return httpx.Response(404, json={"error": {"code": "Request_ResourceNotFound", "message": path}})

    def _application(self, object_id: str) -> dict[str, Any]:
        return next(a for a in self.applications if a["id"] == object_id)

    @staticmethod
    def _filter_value(request: httpx.Request, field: str) -> str:
        match = re.fullmatch(rf"{field} eq '(.*)'", request.url.params.get("$filter", ""))
        return match.group(1).replace("''", "'") if match else ""
