"""Tests for RegistrationSpec value object."""

from __future__ import annotations

from datetime import UTC, datetime
from uuid import uuid4

import pytest

from entra_app_provisioner.domain.exceptions import InvalidRegistrationSpecError
from entra_app_provisioner.domain.value_objects import (
    MICROSOFT_GRAPH_APP_ID,
    PermissionType,
    RegistrationSpec,
    RequiredPermission,
)


def _spec(**overrides: object) -> RegistrationSpec:
    values: dict[str, object] = {
        "display_name": "Test Integration",
        "redirect_uri": "https://example.com/oauth",
        "secret_lifetime_months": 6,
        "required_permissions": (RequiredPermission(uuid4()),),
    }
    values.update(overrides)
    return RegistrationSpec(**values)  # type: ignore[arg-type]


class TestRegistrationSpec:
    """Tests for RegistrationSpec value object."""

    def test_defaults(self) -> None:
        """Resource defaults to Microsoft Graph and audience to single tenant."""
        spec = _spec()
        assert spec.resource_app_id == MICROSOFT_GRAPH_APP_ID
        assert spec.sign_in_audience == "AzureADMyOrg"

    def test_empty_display_name_invalid(self) -> None:
        """Display name is the lookup key and cannot be blank."""
        with pytest.raises(InvalidRegistrationSpecError, match="Display name"):
            _spec(display_name="  ")

    def test_relative_redirect_uri_invalid(self) -> None:
        """Redirect URI must be absolute."""
        with pytest.raises(InvalidRegistrationSpecError, match="absolute"):
            _spec(redirect_uri="/oauth/callback")

    def test_http_redirect_uri_invalid(self) -> None:
        """Plain http is rejected for public hosts."""
        with pytest.raises(InvalidRegistrationSpecError, match="https"):
            _spec(redirect_uri="http://example.com/oauth")

    def test_http_localhost_redirect_uri_allowed(self) -> None:
        """Plain http is accepted for localhost."""
        spec = _spec(redirect_uri="http://localhost:8400/callback")
        assert spec.redirect_uri == "http://localhost:8400/callback"

    @pytest.mark.parametrize("months", [0, -1, 25])
    def test_lifetime_out_of_range_invalid(self, months: int) -> None:
        """Secret lifetime must be between 1 and 24 months."""
        with pytest.raises(InvalidRegistrationSpecError, match="Secret lifetime"):
            _spec(secret_lifetime_months=months)

    def test_no_permissions_invalid(self) -> None:
        """At least one permission is required."""
        with pytest.raises(InvalidRegistrationSpecError, match="At least one"):
            _spec(required_permissions=())

    def test_duplicate_permissions_invalid(self) -> None:
        """The same permission cannot be listed twice."""
        permission_id = uuid4()
        with pytest.raises(InvalidRegistrationSpecError, match="duplicate"):
            _spec(
                required_permissions=(
                    RequiredPermission(permission_id),
                    RequiredPermission(permission_id, PermissionType.SCOPE),
                )
            )

    def test_invalid_spec_is_value_error(self) -> None:
        """Invalid specs are reported as configuration errors."""
        with pytest.raises(ValueError):
            _spec(display_name="")

    def test_secret_expiry_adds_calendar_months(self) -> None:
        """Expiry is now plus the lifetime in calendar months."""
        spec = _spec(secret_lifetime_months=6)
        now = datetime(2026, 1, 31, 12, 0, tzinfo=UTC)
        assert spec.secret_expiry(now) == datetime(2026, 7, 31, 12, 0, tzinfo=UTC)

    def test_secret_expiry_clamps_to_month_end(self) -> None:
        """Month arithmetic clamps to the last day of shorter months."""
        spec = _spec(secret_lifetime_months=1)
        now = datetime(2026, 1, 31, tzinfo=UTC)
        assert spec.secret_expiry(now) == datetime(2026, 2, 28, tzinfo=UTC)

    def test_spec_is_frozen(self) -> None:
        """Spec should be immutable."""
        spec = _spec()
        with pytest.raises(AttributeError):
            spec.display_name = "Other"  # type: ignore[misc]
