"""Client secret entity."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID


@dataclass(frozen=True, slots=True)
class ClientSecret:
    """
    A password credential added to an application registration.

    The secret text is only returned by the directory when the credential is
    created and cannot be read back afterwards.
    """

    key_id: UUID
    secret_text: str
    display_name: str | None
    expires_at: datetime

    def __repr__(self) -> str:
        return (
            f"ClientSecret(key_id={self.key_id!r}, display_name={self.display_name!r}, "
            f"expires_at={self.expires_at.isoformat()!r})"
        )
