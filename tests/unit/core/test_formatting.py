"""Tests for audit message formatting helpers."""

from docgate.core.formatting import get_diff_string, object_to_string


class TestObjectToString:
    def test_none_is_null(self):
        assert object_to_string(None) == "null"

    def test_flat_document(self):
        assert object_to_string({"name": "A", "count": 3}) == "name: A\ncount: 3"

    def test_long_strings_are_truncated(self):
        rendered = object_to_string({"bio": "x" * 100}, max_string_length=10)

        assert rendered == "bio: " + "x" * 10 + "..."

    def test_nested_mappings_are_indented(self):
        rendered = object_to_string({"address": {"city": "Oslo"}})

        assert rendered == "address: \n  city: Oslo"


class TestGetDiffString:
    def test_no_changes(self):
        assert get_diff_string({"a": 1}, {"a": 1}) == ""

    def test_changed_added_and_removed(self):
        diff = get_diff_string({"a": 1, "gone": True}, {"a": 2, "new": "x"})

        assert "\n  a: 1 --> 2" in diff
        assert "\n  gone [REMOVED]" in diff
        assert "\n  new [ADDED]: x" in diff
