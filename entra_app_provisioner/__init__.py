"""Provision and reconcile the Entra ID application registration of a tenant integration."""

__version__ = "1.0.0"
