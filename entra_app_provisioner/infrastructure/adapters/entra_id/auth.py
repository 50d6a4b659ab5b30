"""MSAL token providers for Microsoft Graph."""

from __future__ import annotations

import logging
from datetime import UTC, datetime, timedelta
from typing import Any, ClassVar, Protocol

import msal

logger = logging.getLogger(__name__)

AUTHORITY_BASE = "https://login.microsoftonline.com"

# Public client ID of "Microsoft Graph Command Line Tools"
GRAPH_CLI_CLIENT_ID = "14d82eec-204b-4c2f-b7e8-296a70dab67e"


class GraphAuthenticationError(RuntimeError):
    """Raised when no access token can be acquired."""


class TokenProvider(Protocol):
    """Source of bearer tokens for the Graph session."""

    def acquire_token(self) -> str:
        """Return a valid access token."""
        ...

    def sign_out(self) -> None:
        """Forget cached accounts and tokens."""
        ...


def _token_from_result(result: dict[str, Any] | None) -> str:
    """Extract the access token from an MSAL result or raise."""
    if not result or "access_token" not in result:
        result = result or {}
        error = result.get("error_description", result.get("error", "Unknown error"))
        msg = f"Failed to acquire access token: {error}"
        raise GraphAuthenticationError(msg)
    return result["access_token"]


class ClientCredentialsTokenProvider:
    """Application (client credentials) authentication for unattended runs."""

    SCOPE: ClassVar[list[str]] = ["https://graph.microsoft.com/.default"]

    def __init__(self, tenant_id: str, client_id: str, client_secret: str) -> None:
        """Initialize the provider."""
        self._tenant_id = tenant_id
        self._client_id = client_id
        self._client_secret = client_secret
        self._access_token: str | None = None
        self._token_expiry: datetime | None = None
        self._msal_app: msal.ConfidentialClientApplication | None = None

    def _get_msal_app(self) -> msal.ConfidentialClientApplication:
        """Get or create MSAL application instance."""
        if self._msal_app is None:
            self._msal_app = msal.ConfidentialClientApplication(
                client_id=self._client_id,
                client_credential=self._client_secret,
                authority=f"{AUTHORITY_BASE}/{self._tenant_id}",
            )
        return self._msal_app

    def acquire_token(self) -> str:
        """Acquire access token using client credentials flow."""
        if self._access_token and self._token_expiry and datetime.now(UTC) < self._token_expiry:
            return self._access_token

        result = self._get_msal_app().acquire_token_for_client(scopes=self.SCOPE)
        self._access_token = _token_from_result(result)
        expires_in = result.get("expires_in", 3600)
        # Refresh 5 minutes before expiry
        self._token_expiry = datetime.now(UTC) + timedelta(seconds=expires_in - 300)

        return self._access_token

    def sign_out(self) -> None:
        """Drop the cached token."""
        self._access_token = None
        self._token_expiry = None


class InteractiveTokenProvider:
    """
    Delegated sign-in of an administrator.

    Tokens are served from the MSAL cache when possible, otherwise the user
    signs in through the browser or, with ``use_device_code``, by entering a
    code on another device.
    """

    SCOPES: ClassVar[list[str]] = [
        "https://graph.microsoft.com/Application.ReadWrite.All",
        "https://graph.microsoft.com/Directory.ReadWrite.All",
        "https://graph.microsoft.com/AppRoleAssignment.ReadWrite.All",
    ]

    def __init__(
        self,
        tenant_id: str = "organizations",
        client_id: str = GRAPH_CLI_CLIENT_ID,
        *,
        use_device_code: bool = False,
    ) -> None:
        """Initialize the provider."""
        self._tenant_id = tenant_id
        self._client_id = client_id
        self._use_device_code = use_device_code
        self._msal_app: msal.PublicClientApplication | None = None

    def _get_msal_app(self) -> msal.PublicClientApplication:
        """Get or create MSAL application instance."""
        if self._msal_app is None:
            self._msal_app = msal.PublicClientApplication(
                client_id=self._client_id,
                authority=f"{AUTHORITY_BASE}/{self._tenant_id}",
            )
        return self._msal_app

    def acquire_token(self) -> str:
        """Acquire a delegated token, signing in when the cache has none."""
        app = self._get_msal_app()

        accounts = app.get_accounts()
        if accounts:
            result = app.acquire_token_silent(self.SCOPES, account=accounts[0])
            if result and "access_token" in result:
                return result["access_token"]

        if self._use_device_code:
            flow = app.initiate_device_flow(scopes=self.SCOPES)
            if "user_code" not in flow:
                msg = f"Failed to start device code flow: {flow.get('error_description', flow)}"
                raise GraphAuthenticationError(msg)
            # The message tells the operator where to enter the code
            print(flow["message"], flush=True)
            result = app.acquire_token_by_device_flow(flow)
        else:
            logger.info("Opening browser for administrator sign-in...")
            result = app.acquire_token_interactive(scopes=self.SCOPES)

        return _token_from_result(result)

    def sign_out(self) -> None:
        """Remove every signed-in account from the token cache."""
        if self._msal_app is None:
            return
        for account in self._msal_app.get_accounts():
            self._msal_app.remove_account(account)
