"""Credentials file exporter."""

from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum
from pathlib import Path

from pydantic import BaseModel, Field

from ....application.exceptions import CredentialExportError
from ....domain.entities import ClientSecret, Tenant

logger = logging.getLogger(__name__)


class ExportFormat(StrEnum):
    """Credentials file format."""

    TEXT = "text"
    JSON = "json"

    @property
    def suffix(self) -> str:
        """File extension."""
        return ".json" if self is ExportFormat.JSON else ".txt"


class ExportedCredentials(BaseModel):
    """Credentials an integration needs to authenticate against the tenant."""

    tenant_id: str = Field(description="Directory (tenant) ID")
    tenant_domain: str = Field(description="Default verified domain of the tenant")
    client_id: str = Field(description="Application (client) ID")
    client_secret: str = Field(description="Client secret value, shown only once")
    secret_expires_at: datetime

    def to_text(self) -> str:
        """Render as ``KEY=value`` lines."""
        return (
            f"TENANT_ID={self.tenant_id}\n"
            f"TENANT_DOMAIN={self.tenant_domain}\n"
            f"CLIENT_ID={self.client_id}\n"
            f"CLIENT_SECRET={self.client_secret}\n"
            f"SECRET_EXPIRES_AT={self.secret_expires_at.isoformat()}\n"
        )


@dataclass(frozen=True, slots=True)
class CredentialsFileConfig:
    """Credentials file export configuration."""

    directory: Path = Path()
    export_format: ExportFormat = ExportFormat.TEXT


class CredentialsFileExporter:
    """Writes credentials to ``<tenant-domain>-credentials.<ext>``, readable by the owner only."""

    def __init__(self, config: CredentialsFileConfig) -> None:
        """Initialize the exporter."""
        self._config = config

    def path_for(self, tenant: Tenant) -> Path:
        """File the tenant's credentials are written to."""
        name = re.sub(r"[^A-Za-z0-9._-]", "_", tenant.default_domain)
        return self._config.directory / f"{name}-credentials{self._config.export_format.suffix}"

    def export(self, tenant: Tenant, application_id: str, secret: ClientSecret) -> Path:
        """Write the credentials file, replacing an existing one."""
        record = ExportedCredentials(
            tenant_id=str(tenant.tenant_id),
            tenant_domain=tenant.default_domain,
            client_id=application_id,
            client_secret=secret.secret_text,
            secret_expires_at=secret.expires_at,
        )
        if self._config.export_format is ExportFormat.JSON:
            content = record.model_dump_json(indent=2) + "\n"
        else:
            content = record.to_text()

        path = self.path_for(tenant)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(content)
            path.chmod(0o600)
        except OSError as e:
            msg = f"Failed to write credentials to {path}: {e}"
            raise CredentialExportError(msg) from e

        logger.debug("Wrote %s credentials file %s", self._config.export_format, path)
        return path
