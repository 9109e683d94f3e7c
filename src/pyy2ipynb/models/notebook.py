"""Canonical nbformat v4 document records.

Every record has a closed key set (``extra="forbid"``) and strict field
types, so a value that builds here already has the shape the strict
validator expects. Optional keys that were never set are left out of
``model_dump(exclude_unset=True)``.
"""

from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, StrictFloat, StrictInt, StrictStr


class _Record(BaseModel):
    model_config = ConfigDict(extra="forbid")


class StreamOutput(_Record):
    """Text written to a named stream (stdout/stderr)."""

    output_type: Literal["stream"]
    name: StrictStr
    text: list[StrictStr]
    metadata: Optional[dict[str, Any]] = None


class ErrorOutput(_Record):
    """An exception raised while the cell ran."""

    output_type: Literal["error"]
    ename: StrictStr
    evalue: StrictStr
    traceback: list[StrictStr]


class DisplayDataOutput(_Record):
    """Rich display output keyed by MIME type.

    Attributes:
        data: MIME type -> string or line list
        metadata: Per-MIME display metadata
        transient: Runtime-only display information
    """

    output_type: Literal["display_data"]
    data: dict[str, Any]
    metadata: Optional[dict[str, Any]] = None
    transient: Optional[dict[str, Any]] = None


class ExecuteResultOutput(_Record):
    """Value of the last expression in a code cell."""

    output_type: Literal["execute_result"]
    data: dict[str, Any]
    metadata: Optional[dict[str, Any]] = None
    execution_count: StrictInt = Field(ge=0)


Output = Annotated[
    Union[StreamOutput, ErrorOutput, DisplayDataOutput, ExecuteResultOutput],
    Field(discriminator="output_type"),
]


class MarkdownCell(_Record):
    """Markdown text cell, optionally carrying inline attachments."""

    id: StrictStr
    cell_type: Literal["markdown"]
    metadata: dict[str, Any] = Field(default_factory=dict)
    source: list[StrictStr]
    attachments: Optional[dict[str, Any]] = None


class CodeCell(_Record):
    """Executable code cell with its captured outputs.

    Attributes:
        id: Cell identifier
        metadata: Cell metadata
        source: Code as a line list
        outputs: Captured outputs in display order
        execution_count: Non-negative execution number (never null)
    """

    id: StrictStr
    cell_type: Literal["code"]
    metadata: dict[str, Any] = Field(default_factory=dict)
    source: list[StrictStr]
    outputs: list[Output] = Field(default_factory=list)
    execution_count: StrictInt = Field(ge=0)


class RawCell(_Record):
    """Raw passthrough cell."""

    id: StrictStr
    cell_type: Literal["raw"]
    metadata: dict[str, Any] = Field(default_factory=dict)
    source: list[StrictStr]


Cell = Annotated[
    Union[MarkdownCell, CodeCell, RawCell],
    Field(discriminator="cell_type"),
]


class Notebook(_Record):
    """Complete nbformat v4 document.

    Attributes:
        nbformat: Major format version, always 4
        nbformat_minor: Minor format version
        metadata: Notebook-level metadata (opaque)
        cells: Cells in document order
    """

    nbformat: Literal[4] = 4
    nbformat_minor: Union[StrictInt, StrictFloat] = 5
    metadata: dict[str, Any] = Field(default_factory=dict)
    cells: list[Cell] = Field(default_factory=list)

    def to_json_dict(self) -> dict[str, Any]:
        """Return the JSON-ready dictionary, omitting optional keys never set."""
        return self.model_dump(mode="json", exclude_unset=True)
