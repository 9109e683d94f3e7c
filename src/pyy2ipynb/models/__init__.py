"""Data models for pyy2ipynb."""

from pyy2ipynb.models.notebook import (
    Cell,
    CodeCell,
    DisplayDataOutput,
    ErrorOutput,
    ExecuteResultOutput,
    MarkdownCell,
    Notebook,
    Output,
    RawCell,
    StreamOutput,
)
from pyy2ipynb.models.conversion import ConversionResult

__all__ = [
    "Cell",
    "CodeCell",
    "MarkdownCell",
    "RawCell",
    "Output",
    "StreamOutput",
    "ErrorOutput",
    "DisplayDataOutput",
    "ExecuteResultOutput",
    "Notebook",
    "ConversionResult",
]
