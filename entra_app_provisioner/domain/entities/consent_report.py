"""Consent report aggregate root."""

from dataclasses import dataclass, field

from ..value_objects import ConsentStatus, RequiredPermission


@dataclass(frozen=True, slots=True)
class PermissionConsent:
    """Consent outcome for one required permission."""

    permission: RequiredPermission
    status: ConsentStatus
    role_value: str | None = None
    error: str | None = None

    @property
    def label(self) -> str:
        """Human-readable permission name."""
        return self.role_value or self.permission.label


@dataclass(slots=True)
class ConsentReport:
    """Aggregate root tallying admin consent over the required permissions."""

    entries: list[PermissionConsent] = field(default_factory=list)

    def record(
        self,
        permission: RequiredPermission,
        status: ConsentStatus,
        *,
        role_value: str | None = None,
        error: str | None = None,
    ) -> PermissionConsent:
        """Append the outcome for a permission."""
        entry = PermissionConsent(permission, status, role_value=role_value, error=error)
        self.entries.append(entry)
        return entry

    def by_status(self, status: ConsentStatus) -> list[PermissionConsent]:
        """Get entries with the given status."""
        return [e for e in self.entries if e.status == status]

    @property
    def granted_count(self) -> int:
        """Assignments created this run."""
        return len(self.by_status(ConsentStatus.GRANTED))

    @property
    def already_granted_count(self) -> int:
        """Assignments that were already present."""
        return len(self.by_status(ConsentStatus.ALREADY_GRANTED))

    @property
    def succeeded_count(self) -> int:
        """Permissions that are consented after this run."""
        return sum(1 for e in self.entries if e.status.is_success)

    @property
    def failed_count(self) -> int:
        """Permissions that could not be resolved or granted."""
        return sum(1 for e in self.entries if e.status.requires_attention)

    @property
    def skipped_count(self) -> int:
        """Delegated permissions, not handled by app-role assignment."""
        return len(self.by_status(ConsentStatus.SKIPPED))

    @property
    def failures(self) -> list[PermissionConsent]:
        """Entries requiring manual remediation."""
        return [e for e in self.entries if e.status.requires_attention]

    @property
    def requires_manual_consent(self) -> bool:
        """Check if any permission must be granted by hand."""
        return self.failed_count > 0

    def get_summary(self) -> str:
        """Generate a human-readable summary of the report."""
        if not self.entries:
            return "No permissions to consent"

        parts = [f"{self.succeeded_count} succeeded"]
        if self.granted_count:
            parts.append(f"{self.granted_count} newly granted")
        if self.failed_count:
            parts.append(f"{self.failed_count} failed")
        if self.skipped_count:
            parts.append(f"{self.skipped_count} skipped")
        return ", ".join(parts)
