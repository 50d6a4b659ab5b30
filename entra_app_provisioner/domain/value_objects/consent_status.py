"""Consent status value object."""

from enum import StrEnum, auto


class ConsentStatus(StrEnum):
    """Outcome of reconciling admin consent for one permission."""

    GRANTED = auto()
    ALREADY_GRANTED = auto()
    FAILED = auto()
    UNRESOLVED = auto()
    SKIPPED = auto()

    @property
    def is_success(self) -> bool:
        """Check if the permission ends up consented."""
        return self in {ConsentStatus.GRANTED, ConsentStatus.ALREADY_GRANTED}

    @property
    def requires_attention(self) -> bool:
        """Check if the permission needs manual remediation."""
        return self in {ConsentStatus.FAILED, ConsentStatus.UNRESOLVED}

    def __str__(self) -> str:
        return self.value
