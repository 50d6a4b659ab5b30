"""Credential export adapters."""

from .credentials_file import CredentialsFileConfig, CredentialsFileExporter, ExportedCredentials, ExportFormat

__all__ = [
    "CredentialsFileConfig",
    "CredentialsFileExporter",
    "ExportFormat",
    "ExportedCredentials",
]
