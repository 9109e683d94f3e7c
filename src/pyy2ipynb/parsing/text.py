"""Multiline text coercion shared by the normalizer and the image extractor."""

from typing import Any


def is_string_list(value: Any) -> bool:
    """Return True for a list whose items are all strings."""
    return isinstance(value, list) and all(isinstance(v, str) for v in value)


def to_lines(value: Any) -> list[str]:
    """Coerce a multiline text field into nbformat's line-list shape.

    A list of strings is taken as already split and returned as a copy.
    A string is split after every newline; each line keeps its own "\\n"
    and the empty remainder after a final newline is dropped. Anything else
    (None, numbers, mixed lists) becomes an empty list.

    Args:
        value: Raw field value from a loosely-typed document

    Returns:
        list[str]: Line list, e.g. "a\\nb" -> ["a\\n", "b"]
    """
    if is_string_list(value):
        return list(value)
    if not isinstance(value, str) or not value:
        return []

    parts = value.split("\n")
    lines = [part + "\n" for part in parts[:-1]]
    if parts[-1]:
        lines.append(parts[-1])
    return lines


def join_lines(value: Any) -> str:
    """Join a line list (or pass through a string) into one text block."""
    if isinstance(value, list):
        return "".join(str(v) for v in value)
    if isinstance(value, str):
        return value
    return ""
