"""Tests for the exception hierarchy."""

from __future__ import annotations

from ability_engine.core.exceptions import (
    AbilityEngineError,
    ConfigurationError,
    ContentDecodeError,
    LedgerStoreError,
    SchedulerError,
    StorageError,
)


class TestAbilityEngineError:
    """Tests for the base AbilityEngineError exception."""

    def test_basic_message(self) -> None:
        """Test exception with basic message."""
        exc = AbilityEngineError("Test error message")
        assert exc.message == "Test error message"
        assert exc.details == {}
        assert str(exc) == "Test error message"

    def test_with_details(self) -> None:
        """Test exception with additional details."""
        exc = AbilityEngineError("Test error", details={"key": "value", "count": 42})
        assert exc.details == {"key": "value", "count": 42}
        assert "key='value'" in str(exc)
        assert "count=42" in str(exc)

    def test_repr(self) -> None:
        """Test exception repr output."""
        repr_str = repr(AbilityEngineError("Test", details={"x": 1}))
        assert "AbilityEngineError" in repr_str
        assert "Test" in repr_str
        assert "x" in repr_str


class TestContextExceptions:
    """Tests for exceptions that carry domain context."""

    def test_configuration_error_with_key(self) -> None:
        """Test ConfigurationError records the offending key."""
        exc = ConfigurationError("Bad value", config_key="round_seconds")
        assert exc.details["config_key"] == "round_seconds"

    def test_ledger_store_error_with_key(self) -> None:
        """Test LedgerStoreError records the ledger key."""
        exc = LedgerStoreError("Write failed", owner_id="hero", ability_id="spell-recall")
        assert exc.details == {"owner_id": "hero", "ability_id": "spell-recall"}
        assert isinstance(exc, StorageError)

    def test_content_decode_error_with_feature(self) -> None:
        """Test ContentDecodeError records the feature and spell type."""
        exc = ContentDecodeError("Bad blob", feature_id="feat-1", spell_type="utility")
        assert exc.details["feature_id"] == "feat-1"
        assert exc.details["spell_type"] == "utility"

    def test_inheritance(self) -> None:
        """Test exception inheritance chain."""
        for exc in (
            ConfigurationError("e"),
            LedgerStoreError("e"),
            ContentDecodeError("e"),
            SchedulerError("e"),
        ):
            assert isinstance(exc, AbilityEngineError)
            assert isinstance(exc, Exception)
