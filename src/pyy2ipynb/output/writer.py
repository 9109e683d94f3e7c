"""Serialization of notebooks to disk."""

import json
from pathlib import Path
from typing import Any

from loguru import logger

from pyy2ipynb.models import Notebook


class NotebookWriter:
    """Write notebooks as indented JSON with a trailing newline.

    The output is byte-stable: the same notebook always serializes to the
    same bytes (UTF-8, LF line endings, key order preserved).
    """

    def __init__(self, indent: int = 2):
        """Initialize writer.

        Args:
            indent: JSON indentation width
        """
        self.indent = indent

    def dumps(self, notebook: Notebook | dict[str, Any]) -> str:
        """Serialize a notebook to its on-disk text.

        Args:
            notebook: Notebook model or plain notebook dictionary

        Returns:
            str: JSON text ending in a newline
        """
        if isinstance(notebook, Notebook):
            notebook = notebook.to_json_dict()
        return json.dumps(notebook, indent=self.indent, ensure_ascii=False) + "\n"

    def write(self, notebook: Notebook | dict[str, Any], output_path: Path | str) -> Path:
        """Write a notebook to a file.

        Args:
            notebook: Notebook to write
            output_path: Output file path

        Returns:
            Path: Path to written file
        """
        output_path = Path(output_path)

        # Ensure parent directory exists
        output_path.parent.mkdir(parents=True, exist_ok=True)

        with open(output_path, "w", encoding="utf-8", newline="\n") as f:
            f.write(self.dumps(notebook))

        logger.debug(f"Wrote notebook {output_path}")
        return output_path
