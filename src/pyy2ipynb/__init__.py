"""pyy2ipynb - Convert pyy authoring documents into strict nbformat v4 notebooks.

Loose in, strict out. Images on disk, not in JSON.
"""

__version__ = "0.1.0"


class Pyy2IpynbError(Exception):
    """Base exception for all pyy2ipynb errors."""

    pass


class NotebookParseError(Pyy2IpynbError):
    """Raised when a document cannot be read or is not well-formed JSON."""

    pass


class NormalizationError(Pyy2IpynbError):
    """Raised when a document cannot be lifted into the canonical notebook shape."""

    pass


class ImageExtractionError(Pyy2IpynbError):
    """Raised when an embedded image payload cannot be decoded or stored."""

    pass


class StructuralViolation(Pyy2IpynbError):
    """Raised by the strict validator on the first schema mismatch.

    Attributes:
        source: Identifier of the validated document (usually its path)
        location: Structural path within the document (e.g. ``cells[2].outputs[0]``)
        message: Human-readable description of the violated expectation
    """

    def __init__(self, source: str, location: str, message: str):
        self.source = source
        self.location = location
        self.message = message
        super().__init__(f"{source}: {location}: {message}")
