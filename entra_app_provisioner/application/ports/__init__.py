"""Application ports - Interfaces for external adapters."""

from .credential_exporter import CredentialExporter
from .directory_service import DirectoryService

__all__ = [
    "CredentialExporter",
    "DirectoryService",
]
