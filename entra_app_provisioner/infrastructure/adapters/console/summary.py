"""Human-readable run summary on standard output."""

from __future__ import annotations

from typing import TYPE_CHECKING, TextIO

from ....domain.value_objects import ConsentStatus

if TYPE_CHECKING:
    from ....application.use_cases import ReconciliationResult

_STATUS_LABELS = {
    ConsentStatus.GRANTED: "granted",
    ConsentStatus.ALREADY_GRANTED: "already granted",
    ConsentStatus.FAILED: "FAILED",
    ConsentStatus.UNRESOLVED: "NOT FOUND",
    ConsentStatus.SKIPPED: "skipped (delegated)",
}


class ConsoleSummary:
    """Formats a ReconciliationResult for the operator."""

    def __init__(self, stream: TextIO | None = None) -> None:
        """Initialize with the output stream (stdout by default)."""
        self._stream = stream

    def render(self, result: ReconciliationResult) -> str:
        """Build the summary text."""
        lines: list[str] = []

        def header(title: str) -> None:
            lines.extend(["", title, "=" * len(title)])

        def section(title: str) -> None:
            lines.extend(["", title])

        header("Application Registration Summary")
        lines.append(f"Tenant:            {result.tenant_domain} ({result.tenant_id})")
        lines.append(f"Display name:      {result.display_name}")
        lines.append(f"Application ID:    {result.application_id}")
        lines.append(f"Object ID:         {result.object_id}")
        lines.append(f"Redirect URI:      {result.redirect_uri}")
        lines.append(f"Registration:      {'created' if result.created else 'updated'}")
        sp = str(result.service_principal_id) if result.service_principal_id else "UNAVAILABLE"
        lines.append(f"Service principal: {sp}")

        section(f"Admin consent: {result.consent.get_summary()}")
        for entry in result.consent.entries:
            line = f"  - {entry.label}: {_STATUS_LABELS[entry.status]}"
            if entry.error:
                line += f" ({entry.error})"
            lines.append(line)

        section("Client secret")
        if result.secret is not None:
            lines.append(f"  Value:   {result.secret.secret_text}")
            lines.append(f"  ID:      {result.secret.key_id}")
            lines.append(f"  Expires: {result.secret.expires_at:%Y-%m-%d}")
            lines.append("  Save the secret value now, it cannot be displayed again.")
            if result.exported_to is not None:
                lines.append(f"  Written to {result.exported_to}")
        else:
            lines.append("  No new secret was generated, keep using the existing one.")

        if result.requires_manual_consent:
            section("ACTION REQUIRED")
            lines.append("  Some permissions were not granted. Grant admin consent manually in the Azure portal:")
            lines.append(f"  {result.azure_portal_url}")
            lines.append(f"  or open: {result.admin_consent_url}")

        return "\n".join(lines) + "\n"

    def show(self, result: ReconciliationResult) -> None:
        """Print the summary."""
        print(self.render(result), file=self._stream, end="")
