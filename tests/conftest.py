"""Pytest configuration and shared fixtures."""

from __future__ import annotations

from typing import Any
from uuid import UUID, uuid4

import pytest

from entra_app_provisioner.domain.entities import AppRole, ServicePrincipal, Tenant
from entra_app_provisioner.domain.value_objects import (
    MICROSOFT_GRAPH_APP_ID,
    RegistrationSpec,
    RequiredPermission,
)
from entra_app_provisioner.infrastructure.config import DEFAULT_PERMISSIONS

from .fakes import FakeGraphApi, InMemoryDirectory, StaticTokenProvider


@pytest.fixture
def tenant() -> Tenant:
    """The signed-in tenant."""
    return Tenant(tenant_id=uuid4(), display_name="Contoso", default_domain="contoso.onmicrosoft.com")


@pytest.fixture
def graph_resource() -> ServicePrincipal:
    """Microsoft Graph service principal declaring the default app roles."""
    return ServicePrincipal(
        object_id=uuid4(),
        app_id=UUID(MICROSOFT_GRAPH_APP_ID),
        display_name="Microsoft Graph",
        app_roles=[
            AppRole(id=p.id, value=p.name or "", display_name=p.name or "")
            for p in DEFAULT_PERMISSIONS
        ],
    )


@pytest.fixture
def directory(tenant: Tenant, graph_resource: ServicePrincipal) -> InMemoryDirectory:
    """Empty in-memory directory."""
    return InMemoryDirectory(tenant, graph_resource)


@pytest.fixture
def spec() -> RegistrationSpec:
    """Spec requiring the default Graph application permissions."""
    return RegistrationSpec(
        display_name="Test Integration",
        redirect_uri="https://example.com/oauth",
        secret_lifetime_months=6,
        required_permissions=DEFAULT_PERMISSIONS,
    )


@pytest.fixture
def role_permission() -> RequiredPermission:
    """A single application permission (User.Read.All)."""
    return DEFAULT_PERMISSIONS[0]


@pytest.fixture
def graph_app_roles() -> list[dict[str, Any]]:
    """Microsoft Graph appRoles payload for the default permissions."""
    return [
        {"id": str(p.id), "value": p.name, "displayName": p.name, "isEnabled": True}
        for p in DEFAULT_PERMISSIONS
    ]


@pytest.fixture
def graph_api(graph_app_roles: list[dict[str, Any]]) -> FakeGraphApi:
    """Fake Graph API with an empty tenant."""
    return FakeGraphApi(uuid4(), graph_app_roles)


@pytest.fixture
def token_provider() -> StaticTokenProvider:
    """Token provider returning a fixed token."""
    return StaticTokenProvider()


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove every provisioner setting from the environment."""
    for name in (
        "APP_DISPLAY_NAME",
        "SECRET_LIFETIME_MONTHS",
        "REDIRECT_URI",
        "REQUIRED_PERMISSIONS",
        "RESOURCE_APP_ID",
        "SECRET_DISPLAY_NAME",
        "AUTH_MODE",
        "AZURE_TENANT_ID",
        "AZURE_CLIENT_ID",
        "AZURE_CLIENT_SECRET",
        "GRAPH_TIMEOUT",
        "EXPORT_CREDENTIALS",
        "EXPORT_DIRECTORY",
        "EXPORT_FORMAT",
        "LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)
