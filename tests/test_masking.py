"""Tests for the column mask registry and value rendering."""

from querylog.masking import ColumnMaskRegistry
from querylog.utils import SECRET_MARKER, _sanitize_log_message, flatten, format_value, mask_arguments


class TestColumnMaskRegistry:
    """Test ColumnMaskRegistry."""

    def test_add_and_contains(self):
        """Test adding columns."""
        registry = ColumnMaskRegistry()
        registry.add("password")

        assert "password" in registry
        assert "email" not in registry
        assert len(registry) == 1

    def test_remove_first_occurrence_only(self):
        """Test that remove deletes one occurrence of a duplicate."""
        registry = ColumnMaskRegistry(["password", "password"])
        registry.remove("password")

        assert list(registry) == ["password"]
        registry.remove("password")
        assert "password" not in registry

    def test_remove_missing_is_noop(self):
        """Test removing a column that was never added."""
        registry = ColumnMaskRegistry(["password"])
        registry.remove("email")

        assert list(registry) == ["password"]

    def test_add_then_remove_restores_indices(self):
        """Test that add followed by remove leaves masking unchanged."""
        order = ["a", "b", "c", "b"]
        registry = ColumnMaskRegistry(["c"])
        before = registry.mask_indices(order)

        registry.add("b")
        assert registry.mask_indices(order) == [1, 2, 3]
        registry.remove("b")

        assert registry.mask_indices(order) == before == [2]

    def test_mask_indices_ascending(self):
        """Test derived indices are ascending positions in the column order."""
        registry = ColumnMaskRegistry(["token", "password"])
        order = ["id", "password", "name", "token", "password"]

        assert registry.mask_indices(order) == [1, 3, 4]

    def test_mask_indices_empty_registry(self):
        """Test that nothing is masked by an empty registry."""
        assert ColumnMaskRegistry().mask_indices(["a", "b"]) == []


class TestValueRendering:
    """Test bound value rendering."""

    def test_format_value(self):
        """Test values render with their Python representation."""
        assert format_value("abc") == "'abc'"
        assert format_value(42) == "42"
        assert format_value(None) == "None"

    def test_mask_arguments(self):
        """Test that only indexed arguments are replaced."""
        assert mask_arguments([1, 2, 3], [1]) == ["1", SECRET_MARKER, "3"]

    def test_mask_arguments_beyond_resolved_columns(self):
        """Test that indices past the argument list are ignored."""
        assert mask_arguments([1], [0, 5]) == [SECRET_MARKER]
        assert mask_arguments(["a", "b"], []) == ["'a'", "'b'"]

    def test_flatten(self):
        """Test that list and tuple arguments are expanded."""
        assert flatten([1, [2, 3], (4,), "ab"]) == [1, 2, 3, 4, "ab"]


class TestSanitizeLogMessage:
    """Test credential masking in driver error messages."""

    def test_masks_credentials(self):
        """Test passwords, AWS keys and connection strings are hidden."""
        message = _sanitize_log_message(
            "login failed: PASSWORD=hunter2, aws_secret_access_key=abc123 at redshift://host:5439/db"
        )

        assert message == "login failed: PASSWORD=*****, aws_secret_access_key=***** at redshift:*****"
