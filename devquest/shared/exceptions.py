"""Custom exception hierarchy for the devquest engine."""


class DevQuestError(Exception):
    """Base exception for all engine errors."""

    pass


class ConfigError(DevQuestError):
    """Raised when configuration validation fails."""

    pass


class InvalidRequestError(DevQuestError):
    """Raised when caller-supplied input is outside its domain.

    Raw strings (challenge type, target metric, status) and numeric
    arguments are validated before they reach engine logic.
    """

    pass


class SnapshotStoreError(DevQuestError):
    """Raised when snapshot persistence operations fail."""

    pass
