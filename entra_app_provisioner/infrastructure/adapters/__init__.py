"""Infrastructure adapters - Implementations of application ports."""

from .console import ConsoleSummary
from .entra_id import (
    ClientCredentialsTokenProvider,
    EntraIdDirectoryService,
    GraphClient,
    GraphClientConfig,
    InteractiveTokenProvider,
)
from .export import CredentialsFileConfig, CredentialsFileExporter, ExportFormat

__all__ = [
    "ClientCredentialsTokenProvider",
    "ConsoleSummary",
    "CredentialsFileConfig",
    "CredentialsFileExporter",
    "EntraIdDirectoryService",
    "ExportFormat",
    "GraphClient",
    "GraphClientConfig",
    "InteractiveTokenProvider",
]
