"""Port for credential export - driven/secondary port."""

from pathlib import Path
from typing import Protocol

from ...domain.entities import ClientSecret, Tenant


class CredentialExporter(Protocol):
    """Port for persisting newly issued application credentials."""

    def export(self, tenant: Tenant, application_id: str, secret: ClientSecret) -> Path:
        """
        Persist the credentials.

        Returns:
            Location the credentials were written to.

        Raises:
            CredentialExportError: If writing fails.
        """
        ...
