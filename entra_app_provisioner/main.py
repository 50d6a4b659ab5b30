#!/usr/bin/env python3
"""
Entra App Provisioner

Composition root and application entry point.
Wires together all layers following hexagonal architecture principles.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from typing import TYPE_CHECKING

from . import __version__
from .application.exceptions import ConfigurationError, DirectoryServiceError
from .application.use_cases import ReconcileRegistration
from .infrastructure.adapters import (
    ConsoleSummary,
    CredentialsFileExporter,
    EntraIdDirectoryService,
    GraphClient,
)
from .infrastructure.adapters.entra_id import GraphAuthenticationError
from .infrastructure.config import Settings, load_settings

if TYPE_CHECKING:
    from collections.abc import Sequence

    from .application.use_cases import ReconciliationResult

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)
logger = logging.getLogger(__name__)


class ApplicationContainer:
    """
    Dependency injection container.

    Responsible for creating and wiring all application components.
    """

    def __init__(self, settings: Settings) -> None:
        """Initialize container with settings."""
        self._settings = settings

    def create_graph_client(self) -> GraphClient:
        """Create the Graph session (not yet connected)."""
        return GraphClient(self._settings.create_token_provider(), self._settings.graph_config)

    def create_exporter(self) -> CredentialsFileExporter | None:
        """Create the credentials exporter if export is enabled."""
        if not self._settings.export_credentials:
            return None
        return CredentialsFileExporter(self._settings.credentials_file_config)

    def create_reconcile_use_case(self, client: GraphClient) -> ReconcileRegistration:
        """Create the main use case with all dependencies."""
        return ReconcileRegistration(
            EntraIdDirectoryService(client),
            exporter=self.create_exporter(),
        )


class Application:
    """Main application orchestrator, owning the Graph session lifecycle."""

    def __init__(self, settings: Settings, summary: ConsoleSummary | None = None) -> None:
        """Initialize application with settings."""
        self._settings = settings
        self._container = ApplicationContainer(settings)
        self._summary = summary or ConsoleSummary()

    async def reconcile(self) -> ReconciliationResult:
        """Run one reconciliation inside a Graph session."""
        async with self._container.create_graph_client() as client:
            use_case = self._container.create_reconcile_use_case(client)
            return await use_case.execute(self._settings.registration_spec)

    async def run(self) -> int:
        """
        Run the reconciliation and print the summary.

        Returns:
            Exit code (0 for success, 1 for failure).
        """
        try:
            result = await self.reconcile()
        except GraphAuthenticationError as e:
            logger.error("Sign-in failed, nothing was changed: %s", e)
            return 1
        except DirectoryServiceError as e:
            logger.exception("Reconciliation failed: %s", e.message)
            if e.detail:
                logger.error("Details: %s", e.detail)
            return 1

        self._summary.show(result)
        if result.requires_manual_consent:
            logger.warning(
                "%d permission(s) need admin consent, grant them manually in the portal",
                result.consent.failed_count,
            )
        return 0


def build_parser() -> argparse.ArgumentParser:
    """Build the command line parser; unset options fall back to the environment."""
    parser = argparse.ArgumentParser(
        prog="entra-app-provisioner",
        description="Create or update the tenant integration's Entra ID application registration.",
    )
    parser.add_argument("--display-name", dest="app_display_name", help="Registration display name")
    parser.add_argument(
        "--secret-lifetime-months",
        type=int,
        help="Lifetime of a newly created client secret in months",
    )
    parser.add_argument("--redirect-uri", help="Web redirect URI")
    parser.add_argument(
        "--export",
        dest="export_credentials",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Write newly created credentials to <tenant-domain>-credentials file",
    )
    parser.add_argument("--export-dir", dest="export_directory", help="Directory of the credentials file")
    parser.add_argument("--export-format", choices=["text", "json"], help="Credentials file format")
    parser.add_argument(
        "--auth-mode",
        choices=["interactive", "device_code", "client_credentials"],
        help="How to sign in to Microsoft Graph",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


async def async_main(argv: Sequence[str] | None = None) -> int:
    """Async entry point."""
    args = build_parser().parse_args(argv)
    try:
        logger.info("Entra App Provisioner %s starting...", __version__)

        settings = load_settings(**vars(args))
        logging.getLogger().setLevel(settings.log_level.upper())

        app = Application(settings)
        return await app.run()

    except (ConfigurationError, ValueError) as e:
        logger.error("Configuration error: %s", e)
        return 1
    except KeyboardInterrupt:
        logger.info("Interrupted")
        return 1
    except Exception:
        logger.exception("Unexpected error")
        return 1


def main() -> None:
    """Main entry point."""
    exit_code = asyncio.run(async_main())
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
