"""Use case for reconciling the integration's application registration."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path
from uuid import UUID

from ...domain.entities import ApplicationRegistration, ClientSecret, ConsentReport, ServicePrincipal, Tenant
from ...domain.services import ConsentPlanner
from ...domain.value_objects import ConsentStatus, RegistrationSpec
from ..exceptions import (
    AmbiguousRegistrationError,
    CredentialExportError,
    DirectoryConflictError,
    DirectoryServiceError,
)
from ..ports import CredentialExporter, DirectoryService

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ReconciliationResult:
    """Result of the reconcile registration use case."""

    application_id: UUID
    object_id: UUID
    tenant_id: UUID
    tenant_domain: str
    display_name: str
    redirect_uri: str
    created: bool
    service_principal_id: UUID | None
    consent: ConsentReport = field(default_factory=ConsentReport)
    secret: ClientSecret | None = None
    exported_to: Path | None = None

    @property
    def secret_value(self) -> str | None:
        """One-time secret text, only when created this run."""
        return self.secret.secret_text if self.secret else None

    @property
    def secret_expires_at(self) -> datetime | None:
        """Expiry of the secret created this run."""
        return self.secret.expires_at if self.secret else None

    @property
    def requires_manual_consent(self) -> bool:
        """Check if an administrator must finish consent in the portal."""
        return self.service_principal_id is None or self.consent.requires_manual_consent

    @property
    def admin_consent_url(self) -> str:
        """Tenant-wide admin consent URL for this application."""
        return (
            f"https://login.microsoftonline.com/{self.tenant_id}/adminconsent"
            f"?client_id={self.application_id}"
        )

    @property
    def azure_portal_url(self) -> str:
        """URL to manage this app's API permissions in Azure Portal."""
        return (
            f"https://portal.azure.com/#view/Microsoft_AAD_RegisteredApps"
            f"/ApplicationMenuBlade/~/CallAnAPI/appId/{self.application_id}"
        )


class ReconcileRegistration:
    """
    Use case ensuring the registration matches the desired spec.

    Looks the registration up by display name, creates or updates it,
    ensures its service principal and grants admin consent for every
    application permission. Lookup, create and update failures propagate;
    service principal and consent failures are counted and reported.
    """

    def __init__(
        self,
        directory: DirectoryService,
        *,
        exporter: CredentialExporter | None = None,
    ) -> None:
        """
        Initialize the use case.

        Args:
            directory: Adapter for the identity directory.
            exporter: Optional adapter persisting newly created credentials.
        """
        self._directory = directory
        self._exporter = exporter

    async def execute(self, spec: RegistrationSpec) -> ReconciliationResult:
        """
        Execute the reconciliation.

        Returns:
            ReconciliationResult with identifiers, consent report and secret.

        Raises:
            DirectoryServiceError: If a core directory operation fails.
        """
        logger.info("Reconciling application registration '%s'...", spec.display_name)

        tenant = await self._directory.get_tenant()
        logger.info("Connected to tenant %s (%s)", tenant.display_name, tenant.tenant_id)

        application, secret = await self._create_or_update(spec)
        created = secret is not None

        service_principal = await self._ensure_service_principal(application.app_id)

        if service_principal is None:
            consent = self._consent_unavailable(spec, "service principal unavailable")
        else:
            consent = await self._reconcile_consent(spec, service_principal)
        logger.info("Admin consent: %s", consent.get_summary())

        exported_to = self._export(tenant, application, secret) if secret else None

        return ReconciliationResult(
            application_id=application.app_id,
            object_id=application.object_id,
            tenant_id=tenant.tenant_id,
            tenant_domain=tenant.default_domain,
            display_name=application.display_name,
            redirect_uri=spec.redirect_uri,
            created=created,
            service_principal_id=service_principal.object_id if service_principal else None,
            consent=consent,
            secret=secret,
            exported_to=exported_to,
        )

    async def _create_or_update(
        self, spec: RegistrationSpec
    ) -> tuple[ApplicationRegistration, ClientSecret | None]:
        """Create the registration with a secret, or update the existing one."""
        matches = await self._directory.find_applications(spec.display_name)

        if len(matches) > 1:
            ids = ", ".join(str(m.app_id) for m in matches)
            msg = f"Found {len(matches)} application registrations named '{spec.display_name}'"
            raise AmbiguousRegistrationError(msg, detail=f"appIds: {ids}")

        if matches:
            existing = matches[0]
            logger.info(
                "Registration exists (appId %s), updating permissions and redirect URI",
                existing.app_id,
            )
            await self._directory.update_application(existing.object_id, spec)
            logger.info("No new client secret generated, reuse the existing one")
            return existing, None

        logger.info("Registration not found, creating it...")
        application = await self._directory.create_application(spec)
        logger.info("Created registration (appId %s)", application.app_id)

        expires_at = spec.secret_expiry(datetime.now(UTC))
        try:
            secret = await self._directory.add_client_secret(
                application.object_id, spec.secret_display_name, expires_at
            )
        except DirectoryServiceError as e:
            # Later runs take the update path and never add a secret
            msg = (
                f"Registration '{application.display_name}' (appId {application.app_id}) was created "
                f"without a client secret ({e.message}). Add a secret in the Azure portal "
                "or delete the registration before running again"
            )
            raise DirectoryServiceError(msg, detail=e.detail) from e
        logger.info("Created client secret %s expiring %s", secret.key_id, secret.expires_at.isoformat())
        return application, secret

    async def _ensure_service_principal(self, app_id: UUID) -> ServicePrincipal | None:
        """Get or create the service principal; failures are not fatal."""
        try:
            existing = await self._directory.find_service_principal(app_id)
            if existing is not None:
                logger.info("Service principal exists (%s)", existing.object_id)
                return existing

            try:
                created = await self._directory.create_service_principal(app_id)
            except DirectoryConflictError:
                logger.info("Service principal was created concurrently, fetching it")
                return await self._directory.find_service_principal(app_id)

            logger.info("Created service principal (%s)", created.object_id)
            return created

        except DirectoryServiceError as e:
            logger.warning("Could not ensure service principal for %s: %s", app_id, e)
            return None

    async def _reconcile_consent(
        self, spec: RegistrationSpec, principal: ServicePrincipal
    ) -> ConsentReport:
        """Grant every application permission that is not yet assigned."""
        try:
            resource = await self._directory.find_service_principal(spec.resource_app_id)
            if resource is None:
                msg = f"Resource service principal {spec.resource_app_id} not found"
                raise DirectoryServiceError(msg)
            existing = await self._directory.list_app_role_assignments(principal.object_id)
        except DirectoryServiceError as e:
            logger.warning("Could not read consent state: %s", e)
            return self._consent_unavailable(spec, str(e))

        decisions = ConsentPlanner(resource).plan(
            list(spec.required_permissions), principal.object_id, existing
        )
        report = ConsentReport()

        for decision in decisions:
            permission = decision.permission
            if decision.status is ConsentStatus.UNRESOLVED:
                logger.warning("Permission %s is not declared by the resource API", permission.id)
                report.record(permission, ConsentStatus.UNRESOLVED, error="app role not found")
                continue

            role_value = decision.role.value if decision.role else None
            if not decision.needs_grant:
                report.record(permission, decision.status, role_value=role_value)
                continue

            try:
                await self._directory.create_app_role_assignment(
                    principal.object_id, resource.object_id, decision.role.id
                )
                logger.info("Granted %s", role_value)
                report.record(permission, ConsentStatus.GRANTED, role_value=role_value)
            except DirectoryServiceError as e:
                logger.warning("Failed to grant %s: %s", role_value, e)
                report.record(permission, ConsentStatus.FAILED, role_value=role_value, error=str(e))

        return report

    @staticmethod
    def _consent_unavailable(spec: RegistrationSpec, reason: str) -> ConsentReport:
        """Report every application permission as failed."""
        report = ConsentReport()
        for permission in spec.required_permissions:
            status = ConsentStatus.FAILED if permission.is_role else ConsentStatus.SKIPPED
            report.record(permission, status, error=reason if permission.is_role else None)
        return report

    def _export(
        self, tenant: Tenant, application: ApplicationRegistration, secret: ClientSecret
    ) -> Path | None:
        """Persist the new credentials; failures are not fatal."""
        if self._exporter is None:
            return None
        try:
            path = self._exporter.export(tenant, str(application.app_id), secret)
        except CredentialExportError as e:
            logger.warning("Could not export credentials: %s", e)
            return None
        logger.info("Credentials written to %s", path)
        return path
