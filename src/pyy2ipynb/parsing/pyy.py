"""Reading and normalization of pyy authoring documents."""

import copy
import json
import math
from pathlib import Path
from typing import Any

from loguru import logger
from pydantic import ValidationError

from pyy2ipynb import NormalizationError, NotebookParseError
from pyy2ipynb.models import Notebook
from pyy2ipynb.parsing.text import to_lines


def is_number(value: Any) -> bool:
    """Return True for JSON numbers (int or float, never bool)."""
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def is_finite_number(value: Any) -> bool:
    """Return True for JSON numbers that are neither NaN nor infinite."""
    return is_number(value) and math.isfinite(value)


def format_location(loc: tuple | list) -> str:
    """Render a key/index path as ``cells[2].outputs[0].name``.

    Args:
        loc: Sequence of dict keys (str) and list indices (int)

    Returns:
        str: Dotted path, or "root" for the empty path
    """
    out = ""
    for part in loc:
        if isinstance(part, int):
            out += f"[{part}]"
        else:
            out += f".{part}" if out else str(part)
    return out or "root"


def _drop_nulls(record: dict, keys: tuple[str, ...]) -> None:
    for key in keys:
        if key in record and record[key] is None:
            del record[key]


class PyyReader:
    """Reader for pyy documents (JSON on disk)."""

    def read(self, filepath: Path | str) -> Any:
        """Load a pyy document.

        Args:
            filepath: Path to the .pyy file

        Returns:
            Any: The parsed JSON value (shape not checked)

        Raises:
            NotebookParseError: If the file is missing or not well-formed JSON
        """
        filepath = Path(filepath)

        if not filepath.exists():
            raise NotebookParseError(f"Document not found: {filepath}")

        try:
            with open(filepath, "r", encoding="utf-8") as f:
                return json.load(f)
        except json.JSONDecodeError as e:
            raise NotebookParseError(f"Failed to parse {filepath}: {e}") from e
        except (OSError, UnicodeDecodeError) as e:
            raise NotebookParseError(f"Failed to read {filepath}: {e}") from e


class NotebookNormalizer:
    """Lift a loosely-typed pyy document into a canonical nbformat v4 Notebook.

    The input value is never modified; normalization works on a deep copy.
    """

    CELL_TYPES = ("markdown", "code", "raw")
    OUTPUT_TYPES = ("stream", "error", "display_data", "execute_result")

    # Legacy output tags rewritten before anything else looks at an output
    OUTPUT_TYPE_ALIASES = {"update_display_data": "display_data"}

    # Authoring-only fields
    ROOT_AUTHORING_FIELDS = ("pyyFormat",)
    CELL_AUTHORING_FIELDS = ("codeCellIndex",)
    # Optional objects where null means "absent"
    NULLABLE_FIELDS = ("attachments", "metadata", "transient")

    MULTILINE_MIME_TYPES = ("text/plain", "text/markdown")

    def __init__(self, default_nbformat_minor: int = 5):
        """Initialize normalizer.

        Args:
            default_nbformat_minor: Minor version used when the input has none
        """
        self.default_nbformat_minor = default_nbformat_minor

    def normalize(self, document: Any) -> Notebook:
        """Normalize a parsed pyy document.

        Args:
            document: Parsed JSON value of the pyy file

        Returns:
            Notebook: Canonical notebook

        Raises:
            NormalizationError: If the document cannot take the canonical shape
        """
        if not isinstance(document, dict):
            raise NormalizationError("root: expected a JSON object")

        doc = copy.deepcopy(document)
        for field in self.ROOT_AUTHORING_FIELDS:
            doc.pop(field, None)

        doc["nbformat"] = 4
        if not is_finite_number(doc.get("nbformat_minor")):
            doc["nbformat_minor"] = self.default_nbformat_minor
        if not isinstance(doc.get("metadata"), dict):
            doc["metadata"] = {}

        cells = doc.get("cells")
        if not isinstance(cells, list):
            cells = []
        doc["cells"] = [self._normalize_cell(cell, index) for index, cell in enumerate(cells)]

        self.assign_execution_counts(doc["cells"])

        try:
            notebook = Notebook.model_validate(doc)
        except ValidationError as e:
            error = e.errors()[0]
            raise NormalizationError(
                f"{format_location(error['loc'])}: {error['msg']}"
            ) from e

        logger.debug(f"Normalized notebook with {len(notebook.cells)} cell(s)")
        return notebook

    def _normalize_cell(self, cell: Any, index: int) -> dict:
        """Normalize one cell dictionary in place and return it."""
        if not isinstance(cell, dict):
            raise NormalizationError(f"cells[{index}]: expected object")

        cell_type = cell.get("cell_type")
        if cell_type not in self.CELL_TYPES:
            raise NormalizationError(f"cells[{index}].cell_type: unsupported '{cell_type}'")

        for field in self.CELL_AUTHORING_FIELDS:
            cell.pop(field, None)
        _drop_nulls(cell, self.NULLABLE_FIELDS)

        if not isinstance(cell.get("id"), str) or not cell["id"]:
            cell["id"] = f"cell-{index}"
        if not isinstance(cell.get("metadata"), dict):
            cell["metadata"] = {}
        cell["source"] = to_lines(cell.get("source"))

        if cell_type == "code":
            outputs = cell.get("outputs")
            if not isinstance(outputs, list):
                outputs = []
            cell["outputs"] = [
                self._normalize_output(output, f"cells[{index}].outputs[{i}]")
                for i, output in enumerate(outputs)
            ]
        else:
            # nbformat: code-only fields never appear on markdown/raw cells
            cell.pop("outputs", None)
            cell.pop("execution_count", None)

        return cell

    def _normalize_output(self, output: Any, location: str) -> dict:
        """Normalize one output dictionary in place and return it."""
        if not isinstance(output, dict):
            raise NormalizationError(f"{location}: expected object")

        output_type = output.get("output_type")
        output_type = self.OUTPUT_TYPE_ALIASES.get(output_type, output_type)
        if output_type not in self.OUTPUT_TYPES:
            raise NormalizationError(f"{location}.output_type: unsupported '{output_type}'")
        output["output_type"] = output_type
        _drop_nulls(output, self.NULLABLE_FIELDS)

        if output_type == "stream":
            output.setdefault("name", "stdout")
            output["text"] = to_lines(output.get("text"))

        elif output_type == "error":
            output.setdefault("ename", "")
            output.setdefault("evalue", "")
            output["traceback"] = to_lines(output.get("traceback"))

        else:
            output["data"] = self._normalize_mimebundle(output.get("data"))
            if not isinstance(output.get("metadata"), dict):
                output["metadata"] = {}

        return output

    def _normalize_mimebundle(self, data: Any) -> dict:
        """Coerce a display/execute ``data`` value into a MIME-keyed mapping."""
        if isinstance(data, str):
            return {"text/plain": to_lines(data)}
        if not isinstance(data, dict):
            return {"text/plain": to_lines("" if data is None else str(data))}

        bundle = dict(data)
        for mime in self.MULTILINE_MIME_TYPES:
            if isinstance(bundle.get(mime), str):
                bundle[mime] = to_lines(bundle[mime])
        return bundle

    def assign_execution_counts(self, cells: list[dict]) -> None:
        """Give every code cell and execute_result a non-negative integer count.

        A running counter starts at 1 and advances once per code cell whether
        or not that cell's own count was kept. A finite count is truncated
        toward zero and kept unless negative; anything else takes the counter's
        current value. Two cells can therefore end up with the same count,
        e.g. [2, None] -> [2, 2].

        Args:
            cells: Normalized cell dictionaries, modified in place
        """
        counter = 1
        for cell in cells:
            if cell.get("cell_type") != "code":
                continue

            count = cell.get("execution_count")
            if is_finite_number(count):
                count = int(count)
                if count < 0:
                    count = counter
            else:
                count = counter
            cell["execution_count"] = count
            counter += 1

            for output in cell["outputs"]:
                if output["output_type"] != "execute_result":
                    continue
                result_count = output.get("execution_count")
                if is_finite_number(result_count) and int(result_count) >= 0:
                    output["execution_count"] = int(result_count)
                else:
                    output["execution_count"] = count
