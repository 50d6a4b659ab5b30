"""Required permission value objects."""

from dataclasses import dataclass
from enum import StrEnum
from typing import Self
from uuid import UUID

from ..exceptions import InvalidPermissionError


class PermissionType(StrEnum):
    """Kind of permission, named as Microsoft Graph names it."""

    ROLE = "Role"
    SCOPE = "Scope"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True, slots=True)
class RequiredPermission:
    """A permission the registration must declare on the resource API."""

    id: UUID
    permission_type: PermissionType = PermissionType.ROLE
    name: str | None = None

    @property
    def is_role(self) -> bool:
        """Application permissions need an app-role assignment for consent."""
        return self.permission_type is PermissionType.ROLE

    @property
    def label(self) -> str:
        """Name if known, else the identifier."""
        return self.name or str(self.id)

    @classmethod
    def parse(cls, raw: str, name: str | None = None) -> Self:
        """
        Parse a permission from ``<guid>``, ``Role:<guid>`` or ``Scope:<guid>``.

        A bare identifier is treated as an application (role) permission.
        """
        text = raw.strip()
        permission_type = PermissionType.ROLE

        if ":" in text:
            kind, _, text = text.partition(":")
            try:
                permission_type = next(
                    t for t in PermissionType if t.value.lower() == kind.strip().lower()
                )
            except StopIteration:
                msg = f"Unknown permission type '{kind}' in '{raw}' (use Role or Scope)"
                raise InvalidPermissionError(msg) from None

        try:
            permission_id = UUID(text.strip())
        except ValueError:
            msg = f"Invalid permission identifier: '{raw}'"
            raise InvalidPermissionError(msg) from None

        return cls(id=permission_id, permission_type=permission_type, name=name)
