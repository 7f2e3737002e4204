"""String helpers for audit messages."""

from typing import Any, Mapping

NULL_TEXT = "null"


def object_to_string(
    document: Mapping[str, Any] | None,
    max_string_length: int = 64,
    depth: int = 0,
) -> str:
    """Render a document as indented ``key: value`` lines.

    Long strings are truncated to ``max_string_length`` characters and nested
    mappings are rendered one level deeper with a slightly smaller budget.

    Args:
        document: The document to render.
        max_string_length: Maximum string length before truncation.
        depth: Current nesting depth (used for indentation).

    Returns:
        The rendered string, or "null" for a missing document.
    """
    if document is None:
        return NULL_TEXT

    lines = []
    for key, value in document.items():
        if isinstance(value, str) and len(value) > max_string_length:
            value = value[:max_string_length] + "..."
        elif isinstance(value, Mapping):
            value = object_to_string(value, max_string_length - 2, depth + 1)
        lines.append(f"{'  ' * depth}{key}: {value}")

    prefix = "\n" if depth > 0 else ""
    return prefix + "\n".join(lines)


def get_diff_string(old_data: Mapping[str, Any], new_data: Mapping[str, Any]) -> str:
    """Describe field-level changes between two versions of a document.

    Each changed field is rendered on its own line as ``key: old --> new``.
    Fields only present in the old version are marked ``[REMOVED]`` and
    fields only present in the new version are marked ``[ADDED]``.

    Returns:
        The diff, one change per line, each line prefixed by a newline.
        Empty string when nothing changed.
    """
    diff = []
    for key, old_value in old_data.items():
        if key not in new_data:
            diff.append(f"\n  {key} [REMOVED]")
        elif old_value != new_data[key]:
            diff.append(f"\n  {key}: {old_value} --> {new_data[key]}")
    for key, new_value in new_data.items():
        if key not in old_data:
            diff.append(f"\n  {key} [ADDED]: {new_value}")
    return "".join(diff)
