"""Custom exception hierarchy for the ability engine.

Exceptions here cover infrastructure problems only: bad configuration,
storage failures, undecodable content and scheduler misuse. Gameplay
outcomes such as "on cooldown" or "no destination" are never raised; they
are returned as ``CastFailure`` values so that every call site handles the
"can't cast" path explicitly.

Example:
    >>> from ability_engine.core.exceptions import ContentDecodeError
    >>> raise ContentDecodeError("Malformed spell data", feature_id="feat-1")
"""

from __future__ import annotations

from typing import Any


class AbilityEngineError(Exception):
    """Base exception for all ability engine errors.

    Attributes:
        message: Human-readable error description.
        details: Optional dictionary containing additional error context.
    """

    def __init__(self, message: str, *, details: dict[str, Any] | None = None) -> None:
        """Initialize the base exception.

        Args:
            message: Human-readable error description.
            details: Optional dictionary containing additional error context.
        """
        self.message = message
        self.details = details or {}
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format the exception message with optional details.

        Returns:
            Formatted error message including any provided details.
        """
        if self.details:
            detail_str = ", ".join(f"{k}={v!r}" for k, v in self.details.items())
            return f"{self.message} [{detail_str}]"
        return self.message

    def __repr__(self) -> str:
        """Return a detailed string representation of the exception."""
        return f"{self.__class__.__name__}(message={self.message!r}, details={self.details!r})"


# =============================================================================
# Configuration Exceptions
# =============================================================================


class ConfigurationError(AbilityEngineError):
    """Raised when application configuration is invalid."""

    def __init__(
        self,
        message: str,
        *,
        config_key: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize configuration error with config key context.

        Args:
            message: Human-readable error description.
            config_key: The configuration key that caused the error.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if config_key:
            combined_details["config_key"] = config_key
        super().__init__(message, details=combined_details)


# =============================================================================
# Storage Exceptions
# =============================================================================


class StorageError(AbilityEngineError):
    """Base exception for persistence collaborator failures."""


class LedgerStoreError(StorageError):
    """Raised when a ledger entry cannot be read or written.

    Carries the ledger key so operators can locate the broken row.
    """

    def __init__(
        self,
        message: str,
        *,
        owner_id: str | None = None,
        ability_id: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize ledger store error with key context.

        Args:
            message: Human-readable error description.
            owner_id: Owner part of the ledger key.
            ability_id: Ability part of the ledger key.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if owner_id:
            combined_details["owner_id"] = owner_id
        if ability_id:
            combined_details["ability_id"] = ability_id
        super().__init__(message, details=combined_details)


# =============================================================================
# Content Exceptions
# =============================================================================


class ContentDecodeError(AbilityEngineError):
    """Raised when a feature's data blob claims to be a spell but cannot be decoded.

    The Source Aggregator catches this, logs it and skips the feature.
    """

    def __init__(
        self,
        message: str,
        *,
        feature_id: str | None = None,
        spell_type: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize decode error with feature context.

        Args:
            message: Human-readable error description.
            feature_id: Identifier of the feature whose blob failed.
            spell_type: The declared ``spellType`` of the blob, if any.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if feature_id:
            combined_details["feature_id"] = feature_id
        if spell_type:
            combined_details["spell_type"] = spell_type
        super().__init__(message, details=combined_details)


# =============================================================================
# Scheduler Exceptions
# =============================================================================


class SchedulerError(AbilityEngineError):
    """Raised when the daily reset scheduler is misused (e.g. started twice)."""


__all__ = [
    "AbilityEngineError",
    "ConfigurationError",
    "StorageError",
    "LedgerStoreError",
    "ContentDecodeError",
    "SchedulerError",
]
