"""Externalization of embedded data-URI images into content-addressed files."""

import base64
import binascii
import hashlib
import os
import re
import shutil
from pathlib import Path
from typing import Any, Optional

from loguru import logger

from pyy2ipynb import ImageExtractionError
from pyy2ipynb.models import (
    CodeCell,
    DisplayDataOutput,
    ExecuteResultOutput,
    Notebook,
    StreamOutput,
)
from pyy2ipynb.parsing.text import join_lines, to_lines


# MIME type -> file extension; anything else is stored as .bin
IMAGE_EXTENSIONS = {
    "image/png": "png",
    "image/jpeg": "jpg",
    "image/jpg": "jpg",
    "image/gif": "gif",
    "image/webp": "webp",
    "image/svg+xml": "svg",
}

_HTML_DOUBLE_QUOTED = re.compile(r'src="data:(image/[^;]+);base64,([^"]+)"')
_HTML_SINGLE_QUOTED = re.compile(r"src='data:(image/[^;]+);base64,([^']+)'")
_MARKDOWN_IMAGE = re.compile(r"!\[([^\]]*)\]\(data:(image/[^;]+);base64,([^)]+)\)")
_DATA_URI = re.compile(r"^data:(image/[^;]+);base64,(.+)$", re.DOTALL)

_NON_BASE64 = re.compile(r"[^A-Za-z0-9+/]")


def extension_for(mime: str) -> str:
    """Return the file extension for an image MIME type."""
    return IMAGE_EXTENSIONS.get((mime or "").lower(), "bin")


def decode_base64(payload: str) -> bytes:
    """Decode a base64 payload the way browsers do.

    Whitespace and characters outside the alphabet are ignored, the URL-safe
    alphabet is accepted and missing padding is restored. A dangling final
    character that cannot complete a byte is discarded.

    Raises:
        ImageExtractionError: If the payload cannot be decoded
    """
    cleaned = _NON_BASE64.sub("", payload.replace("-", "+").replace("_", "/"))
    if len(cleaned) % 4 == 1:
        cleaned = cleaned[:-1]
    cleaned += "=" * (-len(cleaned) % 4)
    try:
        return base64.b64decode(cleaned)
    except (binascii.Error, ValueError) as e:
        raise ImageExtractionError(f"Invalid base64 image payload: {e}") from e


class ImageStore:
    """Content-addressed image directory owned by one notebook.

    Used as a context manager: entering deletes and recreates the directory,
    so every run regenerates it from scratch; leaving removes it again when
    nothing was stored.

    Attributes:
        images_dir: Directory holding ``<sha256>.<ext>`` files
        written: Files actually written during this run, in write order
    """

    def __init__(self, images_dir: Path | str):
        self.images_dir = Path(images_dir)
        self.written: list[Path] = []
        self._stored: dict[Path, None] = {}

    def __enter__(self) -> "ImageStore":
        self.reset()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.remove_if_empty()

    def reset(self) -> None:
        """Delete the directory if present and recreate it empty."""
        if self.images_dir.exists():
            logger.debug(f"Removing previous image directory {self.images_dir}")
            shutil.rmtree(self.images_dir)
        self.images_dir.mkdir(parents=True)
        self.written = []
        self._stored = {}

    def write(self, mime: str, payload: str) -> Path:
        """Store one base64 image, writing the file only if it does not exist.

        Args:
            mime: Image MIME type (selects the extension)
            payload: Base64-encoded image bytes

        Returns:
            Path: Absolute path of the stored file
        """
        data = decode_base64(str(payload))
        digest = hashlib.sha256(data).hexdigest()
        target = (self.images_dir / f"{digest}.{extension_for(mime)}").absolute()

        if not target.exists():
            try:
                target.write_bytes(data)
            except OSError as e:
                raise ImageExtractionError(f"Failed to save image {target}: {e}") from e
            self.written.append(target)
            logger.debug(f"Wrote {mime} image {target.name} ({len(data)} bytes)")

        self._stored[target] = None
        return target

    @property
    def images(self) -> list[Path]:
        """Distinct files handed out by ``write``, in first-use order."""
        return list(self._stored)

    def remove_if_empty(self) -> bool:
        """Delete the directory when it contains no files.

        Returns:
            bool: True if the directory was removed
        """
        if self.images_dir.is_dir() and not any(self.images_dir.iterdir()):
            self.images_dir.rmdir()
            return True
        return False


class ImageExtractor:
    """Move embedded images out of a notebook into its sibling image directory.

    Images are found in cell sources, stream text, ``text/html`` and
    ``text/markdown`` output data (as HTML ``src`` attributes or markdown
    image links with data URIs) and as ``image/*`` entries of output data.
    Each one is stored through an ImageStore and replaced by a path relative
    to the notebook.
    """

    def __init__(self, images_suffix: str = ".images"):
        """Initialize image extractor.

        Args:
            images_suffix: Suffix replacing the notebook's extension for its image directory
        """
        self.images_suffix = images_suffix
        self.last_store: Optional[ImageStore] = None

    def images_dir_for(self, notebook_path: Path | str) -> Path:
        """Return the image directory owned by a notebook path."""
        return Path(notebook_path).with_suffix(self.images_suffix)

    def extract(self, notebook: Notebook, notebook_path: Path | str) -> Notebook:
        """Externalize all embedded images of a notebook.

        Args:
            notebook: Normalized notebook
            notebook_path: Path the notebook will be written to

        Returns:
            Notebook: New notebook referencing the image files

        Raises:
            ImageExtractionError: If an image payload cannot be decoded or saved
        """
        notebook_path = Path(notebook_path).absolute()
        store = ImageStore(self.images_dir_for(notebook_path))
        self.last_store = store

        with store:
            rewriter = _Rewriter(store, notebook_path.parent)
            cells = [rewriter.rewrite_cell(cell) for cell in notebook.cells]

        if store.images:
            logger.info(f"Extracted {len(store.images)} image(s) into {store.images_dir}")
        return notebook.model_copy(update={"cells": cells})


class _Rewriter:
    """Per-run helper binding an ImageStore to the notebook's directory."""

    def __init__(self, store: ImageStore, notebook_dir: Path):
        self.store = store
        self.notebook_dir = notebook_dir

    def relative(self, target: Path) -> str:
        # Notebook links use forward slashes on every platform
        return Path(os.path.relpath(target, self.notebook_dir)).as_posix()

    def store_image(self, mime: str, payload: str) -> str:
        return self.relative(self.store.write(mime, payload))

    def rewrite_text(self, text: str) -> str:
        """Replace data-URI images in HTML and markdown text with file links."""
        text = _HTML_DOUBLE_QUOTED.sub(
            lambda m: f'src="{self.store_image(m.group(1), m.group(2))}"', text
        )
        text = _HTML_SINGLE_QUOTED.sub(
            lambda m: f"src='{self.store_image(m.group(1), m.group(2))}'", text
        )
        text = _MARKDOWN_IMAGE.sub(
            lambda m: f"![{m.group(1)}]({self.store_image(m.group(2), m.group(3))})", text
        )
        return text

    def rewrite_lines(self, lines: list[str]) -> list[str]:
        # Always re-split so multi-line entries become canonical lines
        return to_lines(self.rewrite_text(join_lines(lines)))

    def rewrite_cell(self, cell: Any) -> Any:
        update: dict[str, Any] = {"source": self.rewrite_lines(cell.source)}
        if isinstance(cell, CodeCell):
            update["outputs"] = [self.rewrite_output(output) for output in cell.outputs]
        return cell.model_copy(update=update)

    def rewrite_output(self, output: Any) -> Any:
        if isinstance(output, StreamOutput):
            return output.model_copy(update={"text": self.rewrite_lines(output.text)})
        if isinstance(output, (DisplayDataOutput, ExecuteResultOutput)):
            return output.model_copy(update={"data": self.rewrite_data(output.data)})
        return output

    def rewrite_data(self, data: dict[str, Any]) -> dict[str, Any]:
        """Externalize ``image/*`` entries and embedded images in HTML/markdown."""
        bundle = dict(data)

        for mime in list(bundle):
            if not mime.lower().startswith("image/"):
                continue
            value = bundle[mime]
            if not isinstance(value, (str, list)):
                continue

            raw = join_lines(value)
            match = _DATA_URI.match(raw)
            image_mime, payload = (match.group(1), match.group(2)) if match else (mime, raw)

            img_html = f'<img src="{self.store_image(image_mime, payload)}" />'
            html = bundle.get("text/html")
            if isinstance(html, str):
                bundle["text/html"] = html + img_html
            elif isinstance(html, list):
                bundle["text/html"] = to_lines(join_lines(html) + img_html)
            else:
                bundle["text/html"] = img_html

            del bundle[mime]

        for mime in ("text/html", "text/markdown"):
            value = bundle.get(mime)
            if isinstance(value, str):
                bundle[mime] = self.rewrite_text(value)
            elif isinstance(value, list):
                bundle[mime] = self.rewrite_lines(value)

        return bundle
