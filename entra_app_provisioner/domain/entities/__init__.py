"""Domain entities - Objects with identity and lifecycle."""

from .app_role_assignment import AppRoleAssignment
from .application_registration import ApplicationRegistration
from .client_secret import ClientSecret
from .consent_report import ConsentReport, PermissionConsent
from .service_principal import AppRole, ServicePrincipal
from .tenant import Tenant

__all__ = [
    "AppRole",
    "AppRoleAssignment",
    "ApplicationRegistration",
    "ClientSecret",
    "ConsentReport",
    "PermissionConsent",
    "ServicePrincipal",
    "Tenant",
]
