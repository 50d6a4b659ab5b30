"""Entra ID adapters built on Microsoft Graph."""

from .auth import (
    ClientCredentialsTokenProvider,
    GraphAuthenticationError,
    InteractiveTokenProvider,
    TokenProvider,
)
from .directory import EntraIdDirectoryService
from .graph_client import GraphApiError, GraphClient, GraphClientConfig

__all__ = [
    "ClientCredentialsTokenProvider",
    "EntraIdDirectoryService",
    "GraphApiError",
    "GraphAuthenticationError",
    "GraphClient",
    "GraphClientConfig",
    "InteractiveTokenProvider",
    "TokenProvider",
]
