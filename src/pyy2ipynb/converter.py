"""End-to-end conversion of pyy documents into strict notebooks."""

from pathlib import Path
from typing import Iterable, Optional

from loguru import logger

from pyy2ipynb.models import ConversionResult
from pyy2ipynb.output.writer import NotebookWriter
from pyy2ipynb.parsing.extractors import ImageExtractor
from pyy2ipynb.parsing.pyy import NotebookNormalizer, PyyReader
from pyy2ipynb.validation.strict import StrictValidator


def find_documents(root: Path | str, suffix: str) -> list[Path]:
    """Recursively list files under a directory with the given suffix.

    Args:
        root: Directory to search
        suffix: File extension, matched case-insensitively (e.g. ".pyy")

    Returns:
        list[Path]: Matching files in sorted order
    """
    root = Path(root)
    suffix = suffix.lower()
    return sorted(
        path for path in root.rglob("*") if path.is_file() and path.name.lower().endswith(suffix)
    )


class NotebookConverter:
    """Run the normalize -> extract images -> write pipeline for pyy documents.

    Each document is processed start to finish before the next one begins.
    The caller must make sure no other process writes the same output path
    (or its image directory) at the same time.
    """

    def __init__(
        self,
        source_suffix: str = ".pyy",
        output_suffix: str = ".ipynb",
        images_suffix: str = ".images",
        default_nbformat_minor: int = 5,
        indent: int = 2,
        validate_output: bool = False,
    ):
        """Initialize converter.

        Args:
            source_suffix: Extension of authoring documents
            output_suffix: Extension given to written notebooks
            images_suffix: Suffix of each notebook's image directory
            default_nbformat_minor: Minor version used when the input has none
            indent: JSON indentation of written notebooks
            validate_output: Re-read and strictly validate each written notebook
        """
        self.source_suffix = source_suffix
        self.output_suffix = output_suffix
        self.validate_output = validate_output

        self.reader = PyyReader()
        self.normalizer = NotebookNormalizer(default_nbformat_minor=default_nbformat_minor)
        self.extractor = ImageExtractor(images_suffix=images_suffix)
        self.writer = NotebookWriter(indent=indent)
        self.validator = StrictValidator()

    def output_path_for(self, source_path: Path | str) -> Path:
        """Return the notebook path mirroring a pyy document."""
        return Path(source_path).with_suffix(self.output_suffix)

    def convert(
        self, source_path: Path | str, output_path: Optional[Path | str] = None
    ) -> ConversionResult:
        """Convert one pyy document.

        Args:
            source_path: Path to the .pyy file
            output_path: Notebook path (default: source with the output suffix)

        Returns:
            ConversionResult: Paths of the written notebook and its images

        Raises:
            NotebookParseError: If the input is missing or not well-formed JSON
            NormalizationError: If the input cannot take the notebook shape
            ImageExtractionError: If an embedded image cannot be decoded or saved
            StructuralViolation: If ``validate_output`` is set and the output fails
        """
        source_path = Path(source_path).absolute()
        output_path = Path(output_path or self.output_path_for(source_path)).absolute()

        logger.info(f"Converting {source_path} -> {output_path}")
        document = self.reader.read(source_path)
        notebook = self.normalizer.normalize(document)
        notebook = self.extractor.extract(notebook, output_path)
        self.writer.write(notebook, output_path)

        if self.validate_output:
            self.validator.validate_file(output_path)

        store = self.extractor.last_store
        return ConversionResult(
            source_path=source_path,
            output_path=output_path,
            images_dir=self.extractor.images_dir_for(output_path),
            images=store.images if store else [],
        )

    def convert_many(self, paths: Iterable[Path | str]) -> list[ConversionResult]:
        """Convert several documents in order.

        Paths without the source suffix are skipped. There is no rollback:
        documents converted before a failing one stay on disk.

        Args:
            paths: Candidate document paths

        Returns:
            list[ConversionResult]: One result per converted document
        """
        results = []
        for path in paths:
            path = Path(path)
            if not path.name.lower().endswith(self.source_suffix.lower()):
                logger.debug(f"Skipping {path}: not a {self.source_suffix} document")
                continue
            results.append(self.convert(path))
        return results
