"""Domain service deciding which app-role assignments must be created."""

from dataclasses import dataclass
from uuid import UUID

from ..entities import AppRole, AppRoleAssignment, ServicePrincipal
from ..value_objects import ConsentStatus, RequiredPermission


@dataclass(frozen=True, slots=True)
class ConsentDecision:
    """What to do for one required permission."""

    permission: RequiredPermission
    role: AppRole | None
    status: ConsentStatus | None

    @property
    def needs_grant(self) -> bool:
        """Check if an assignment must be created."""
        return self.status is None


class ConsentPlanner:
    """Compares required permissions with the assignments already in place."""

    def __init__(self, resource: ServicePrincipal) -> None:
        """Initialize planner with the resource API's service principal."""
        self._resource = resource

    def plan(
        self,
        permissions: list[RequiredPermission],
        principal_id: UUID,
        existing: list[AppRoleAssignment],
    ) -> list[ConsentDecision]:
        """
        Decide per permission, preserving order.

        Args:
            permissions: Required permissions of the registration.
            principal_id: Object ID of the registration's service principal.
            existing: Assignments currently held by the principal.

        Returns:
            One decision per permission.
        """
        granted = {a.key for a in existing}
        decisions: list[ConsentDecision] = []

        for permission in permissions:
            if not permission.is_role:
                decisions.append(ConsentDecision(permission, None, ConsentStatus.SKIPPED))
                continue

            role = self._resource.find_app_role(permission.id)
            if role is None:
                decisions.append(ConsentDecision(permission, None, ConsentStatus.UNRESOLVED))
                continue

            key = (principal_id, self._resource.object_id, role.id)
            status = ConsentStatus.ALREADY_GRANTED if key in granted else None
            decisions.append(ConsentDecision(permission, role, status))

        return decisions
