"""Strict structural validation of nbformat v4 documents.

The schema enforced here is closed and stricter than nbformat's own: no
unknown keys anywhere, and code cells and execute_result outputs must carry
a numeric ``execution_count`` (null is rejected). Validation stops at the
first violation.
"""

import json
from pathlib import Path
from typing import Any

import nbformat

from pyy2ipynb import NotebookParseError, StructuralViolation
from pyy2ipynb.parsing.pyy import format_location, is_number


ROOT_KEYS = frozenset({"nbformat", "nbformat_minor", "metadata", "cells"})
BASE_CELL_KEYS = frozenset({"id", "cell_type", "metadata", "source"})

CELL_KEYS = {
    "markdown": BASE_CELL_KEYS | {"attachments"},
    "code": BASE_CELL_KEYS | {"outputs", "execution_count"},
    "raw": BASE_CELL_KEYS,
}

OUTPUT_KEYS = {
    "stream": frozenset({"output_type", "name", "text", "metadata"}),
    "error": frozenset({"output_type", "ename", "evalue", "traceback"}),
    "display_data": frozenset({"output_type", "data", "metadata", "transient"}),
    "execute_result": frozenset({"output_type", "data", "metadata", "execution_count"}),
}


class StrictValidator:
    """Fail-fast validator for the closed notebook schema.

    Example:
        >>> StrictValidator().validate(json.load(f), source="lesson.ipynb")
    """

    def validate(self, notebook: Any, source: str = "<notebook>") -> None:
        """Validate a parsed notebook.

        Args:
            notebook: Any parsed JSON value
            source: Identifier used in error messages (usually the file path)

        Raises:
            StructuralViolation: On the first schema mismatch
        """
        _Check(source).notebook(notebook)

    def validate_file(self, filepath: Path | str) -> None:
        """Read a notebook file and validate it.

        Args:
            filepath: Path to the .ipynb file

        Raises:
            NotebookParseError: If the file is missing or not well-formed JSON
            StructuralViolation: On the first schema mismatch
        """
        self.validate(self.load(filepath), source=str(filepath))

    def validate_with_nbformat(self, notebook: Any, source: str = "<notebook>") -> None:
        """Cross-check a notebook against the official nbformat JSON schema.

        Args:
            notebook: Parsed notebook dictionary
            source: Identifier used in error messages

        Raises:
            StructuralViolation: If nbformat reports the notebook invalid
        """
        try:
            nbformat.validate(nbformat.from_dict(notebook))
        except nbformat.ValidationError as e:
            location = format_location(list(getattr(e, "absolute_path", [])))
            raise StructuralViolation(
                source, location, f"nbformat schema: {getattr(e, 'message', e)}"
            ) from e

    def load(self, filepath: Path | str) -> Any:
        """Read a notebook file as JSON without validating it."""
        filepath = Path(filepath)
        if not filepath.exists():
            raise NotebookParseError(f"Notebook file not found: {filepath}")
        try:
            with open(filepath, "r", encoding="utf-8") as f:
                return json.load(f)
        except json.JSONDecodeError as e:
            raise NotebookParseError(f"Failed to parse {filepath}: {e}") from e
        except (OSError, UnicodeDecodeError) as e:
            raise NotebookParseError(f"Failed to read {filepath}: {e}") from e


class _Check:
    """Depth-first checks for one document; every failure raises immediately."""

    def __init__(self, source: str):
        self.source = source

    def fail(self, location: str, message: str) -> None:
        raise StructuralViolation(self.source, location, message)

    def keys(self, value: dict, allowed: frozenset, location: str) -> None:
        for key in value:
            if key not in allowed:
                self.fail(location, f"unexpected field '{key}'")

    def object(self, value: Any, location: str) -> None:
        if not isinstance(value, dict):
            self.fail(location, "expected object")

    def string(self, value: Any, location: str) -> None:
        if not isinstance(value, str):
            self.fail(location, "expected string")

    def number(self, value: Any, location: str, detail: str = "") -> None:
        if not is_number(value):
            self.fail(location, f"expected number{detail}")

    def string_list(self, value: Any, location: str) -> None:
        if not isinstance(value, list):
            self.fail(location, "expected string[]")
        for i, item in enumerate(value):
            if not isinstance(item, str):
                self.fail(f"{location}[{i}]", "expected string")

    def notebook(self, nb: Any) -> None:
        self.object(nb, "root")
        self.keys(nb, ROOT_KEYS, "root")

        if not (is_number(nb.get("nbformat")) and nb["nbformat"] == 4):
            self.fail("nbformat", "expected 4")
        self.number(nb.get("nbformat_minor"), "nbformat_minor")
        self.object(nb.get("metadata"), "metadata")
        if not isinstance(nb.get("cells"), list):
            self.fail("cells", "expected array")

        for index, cell in enumerate(nb["cells"]):
            self.cell(cell, f"cells[{index}]")

    def cell(self, cell: Any, location: str) -> None:
        self.object(cell, location)

        cell_type = cell.get("cell_type")
        if not isinstance(cell_type, str):
            self.fail(f"{location}.cell_type", "missing or not a string")
        self.string(cell.get("id"), f"{location}.id")
        self.object(cell.get("metadata"), f"{location}.metadata")
        self.string_list(cell.get("source"), f"{location}.source")

        if cell_type not in CELL_KEYS:
            self.fail(f"{location}.cell_type", f"unsupported '{cell_type}'")
        self.keys(cell, CELL_KEYS[cell_type], f"{location} ({cell_type} cell)")

        if cell_type == "markdown":
            if "attachments" in cell:
                self.object(cell["attachments"], f"{location}.attachments")

        elif cell_type == "code":
            if not isinstance(cell.get("outputs"), list):
                self.fail(f"{location}.outputs", "expected array")
            self.number(cell.get("execution_count"), f"{location}.execution_count", " (not null)")
            for index, output in enumerate(cell["outputs"]):
                self.output(output, f"{location}.outputs[{index}]")

    def output(self, output: Any, location: str) -> None:
        self.object(output, location)

        output_type = output.get("output_type")
        if not isinstance(output_type, str):
            self.fail(f"{location}.output_type", "missing or not a string")
        if output_type not in OUTPUT_KEYS:
            self.fail(f"{location}.output_type", f"unsupported '{output_type}'")
        self.keys(output, OUTPUT_KEYS[output_type], f"{location} ({output_type} output)")

        if output_type == "stream":
            self.string(output.get("name"), f"{location}.name")
            self.string_list(output.get("text"), f"{location}.text")
            self.optional_object(output, "metadata", location)

        elif output_type == "error":
            self.string(output.get("ename"), f"{location}.ename")
            self.string(output.get("evalue"), f"{location}.evalue")
            self.string_list(output.get("traceback"), f"{location}.traceback")

        else:
            self.object(output.get("data"), f"{location}.data")
            # null metadata reads as an empty object
            if output.get("metadata") is not None:
                self.object(output["metadata"], f"{location}.metadata")
            if output_type == "display_data":
                self.optional_object(output, "transient", location)
            else:
                # nbformat allows null here; the strict schema does not
                self.number(output.get("execution_count"), f"{location}.execution_count")

    def optional_object(self, value: dict, key: str, location: str) -> None:
        if key in value:
            self.object(value[key], f"{location}.{key}")
