"""Domain value objects - Immutable objects defined by their attributes."""

from .consent_status import ConsentStatus
from .permission import PermissionType, RequiredPermission
from .registration_spec import MICROSOFT_GRAPH_APP_ID, SINGLE_TENANT_AUDIENCE, RegistrationSpec

__all__ = [
    "MICROSOFT_GRAPH_APP_ID",
    "SINGLE_TENANT_AUDIENCE",
    "ConsentStatus",
    "PermissionType",
    "RegistrationSpec",
    "RequiredPermission",
]
