"""Application settings loaded from environment variables."""

import os
from dataclasses import dataclass, field, replace
from functools import cached_property
from pathlib import Path
from typing import Any

from ...application.exceptions import ConfigurationError
from ...domain.value_objects import MICROSOFT_GRAPH_APP_ID, RegistrationSpec, RequiredPermission
from ..adapters.entra_id.auth import (
    GRAPH_CLI_CLIENT_ID,
    ClientCredentialsTokenProvider,
    InteractiveTokenProvider,
    TokenProvider,
)
from ..adapters.entra_id.graph_client import GraphClientConfig
from ..adapters.export import CredentialsFileConfig, ExportFormat

# Microsoft Graph application permissions granted to the integration
DEFAULT_PERMISSIONS: tuple[RequiredPermission, ...] = (
    RequiredPermission.parse("df021288-bdef-4463-88db-98f22de89214", "User.Read.All"),
    RequiredPermission.parse("5b567255-7703-4780-807c-7be8301ae99b", "Group.Read.All"),
    RequiredPermission.parse("7ab1d382-f21e-4acd-a863-ba3e13f7da61", "Directory.Read.All"),
    RequiredPermission.parse("b0afded3-3588-46d8-8b3d-9842eff778da", "AuditLog.Read.All"),
    RequiredPermission.parse("230c1aed-a721-4c5d-9cb4-a90514e508ef", "Reports.Read.All"),
    RequiredPermission.parse("246dd0d5-5bd0-4def-940b-0421030a5b68", "Policy.Read.All"),
    RequiredPermission.parse("9a5d68dd-52b0-4cc2-bd40-abcf44ac3a30", "Application.Read.All"),
)

AUTH_MODES = ("interactive", "device_code", "client_credentials")


def _env_bool(key: str, default: bool = False) -> bool:
    """Get boolean from environment variable."""
    return os.environ.get(key, str(default)).lower() in ("true", "1", "yes")


def _env_int(key: str, default: int) -> int:
    """Get integer from environment variable."""
    return int(os.environ.get(key, str(default)))


def _env_float(key: str, default: float) -> float:
    """Get float from environment variable."""
    return float(os.environ.get(key, str(default)))


def _env_str(key: str, default: str = "") -> str:
    """Get string from environment variable."""
    return os.environ.get(key, default)


def _env_permissions(key: str) -> tuple[RequiredPermission, ...]:
    """Get a comma-separated permission list, falling back to the defaults."""
    raw = os.environ.get(key, "")
    if not raw.strip():
        return DEFAULT_PERMISSIONS
    known = {p.id: p.name for p in DEFAULT_PERMISSIONS}
    permissions = [RequiredPermission.parse(item) for item in raw.split(",") if item.strip()]
    return tuple(replace(p, name=p.name or known.get(p.id)) for p in permissions)


@dataclass
class Settings:
    """Application settings container."""

    # Registration
    app_display_name: str = field(default_factory=lambda: _env_str("APP_DISPLAY_NAME", "SaaS Tenant Integration"))
    secret_lifetime_months: int = field(default_factory=lambda: _env_int("SECRET_LIFETIME_MONTHS", 12))
    redirect_uri: str = field(default_factory=lambda: _env_str("REDIRECT_URI", "https://localhost/auth/callback"))
    required_permissions: tuple[RequiredPermission, ...] = field(
        default_factory=lambda: _env_permissions("REQUIRED_PERMISSIONS")
    )
    resource_app_id: str = field(default_factory=lambda: _env_str("RESOURCE_APP_ID", MICROSOFT_GRAPH_APP_ID))
    secret_display_name: str = field(
        default_factory=lambda: _env_str("SECRET_DISPLAY_NAME", "Tenant integration secret")
    )

    # Azure/Entra ID sign-in
    auth_mode: str = field(default_factory=lambda: _env_str("AUTH_MODE", "interactive"))
    azure_tenant_id: str = field(default_factory=lambda: _env_str("AZURE_TENANT_ID", "organizations"))
    azure_client_id: str = field(default_factory=lambda: _env_str("AZURE_CLIENT_ID", GRAPH_CLI_CLIENT_ID))
    azure_client_secret: str = field(default_factory=lambda: _env_str("AZURE_CLIENT_SECRET"))
    graph_timeout: float = field(default_factory=lambda: _env_float("GRAPH_TIMEOUT", 30.0))

    # Credentials export
    export_credentials: bool = field(default_factory=lambda: _env_bool("EXPORT_CREDENTIALS"))
    export_directory: str = field(default_factory=lambda: _env_str("EXPORT_DIRECTORY", "."))
    export_format: str = field(default_factory=lambda: _env_str("EXPORT_FORMAT", "text"))

    log_level: str = field(default_factory=lambda: _env_str("LOG_LEVEL", "INFO"))

    def validate(self) -> None:
        """Validate settings."""
        mode = self.auth_mode.lower()
        if mode not in AUTH_MODES:
            msg = f"Invalid AUTH_MODE: {self.auth_mode} (use {', '.join(AUTH_MODES)})"
            raise ConfigurationError(msg)

        if mode == "client_credentials":
            missing: list[str] = []
            if not self.azure_tenant_id or self.azure_tenant_id in ("organizations", "common"):
                missing.append("AZURE_TENANT_ID")
            if not self.azure_client_id or self.azure_client_id == GRAPH_CLI_CLIENT_ID:
                missing.append("AZURE_CLIENT_ID")
            if not self.azure_client_secret:
                missing.append("AZURE_CLIENT_SECRET")
            if missing:
                msg = f"Missing required environment variables for client_credentials: {', '.join(missing)}"
                raise ConfigurationError(msg)

        if self.export_format.lower() not in {f.value for f in ExportFormat}:
            msg = f"Invalid EXPORT_FORMAT: {self.export_format} (use text or json)"
            raise ConfigurationError(msg)

        if self.graph_timeout <= 0:
            msg = f"GRAPH_TIMEOUT must be positive, got {self.graph_timeout}"
            raise ConfigurationError(msg)

        # Raises InvalidRegistrationSpecError
        _ = self.registration_spec

    @cached_property
    def registration_spec(self) -> RegistrationSpec:
        """Get the desired registration state."""
        return RegistrationSpec(
            display_name=self.app_display_name,
            redirect_uri=self.redirect_uri,
            secret_lifetime_months=self.secret_lifetime_months,
            required_permissions=self.required_permissions,
            resource_app_id=self.resource_app_id,
            secret_display_name=self.secret_display_name,
        )

    @cached_property
    def graph_config(self) -> GraphClientConfig:
        """Get Graph API client configuration."""
        return GraphClientConfig(timeout=self.graph_timeout)

    @cached_property
    def credentials_file_config(self) -> CredentialsFileConfig:
        """Get credentials export configuration."""
        return CredentialsFileConfig(
            directory=Path(self.export_directory),
            export_format=ExportFormat(self.export_format.lower()),
        )

    def create_token_provider(self) -> TokenProvider:
        """Create the token provider for the configured sign-in mode."""
        match self.auth_mode.lower():
            case "client_credentials":
                return ClientCredentialsTokenProvider(
                    tenant_id=self.azure_tenant_id,
                    client_id=self.azure_client_id,
                    client_secret=self.azure_client_secret,
                )
            case mode:
                return InteractiveTokenProvider(
                    tenant_id=self.azure_tenant_id,
                    client_id=self.azure_client_id,
                    use_device_code=mode == "device_code",
                )


def load_settings(**overrides: Any) -> Settings:
    """
    Load and validate settings from environment.

    Keyword arguments that are not None override the environment.
    """
    settings = Settings(**{k: v for k, v in overrides.items() if v is not None})
    settings.validate()
    return settings
