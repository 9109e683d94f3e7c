"""Data model describing the outcome of one document conversion."""

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field


class ConversionResult(BaseModel):
    """Result of converting a single pyy document.

    Attributes:
        source_path: Absolute path of the pyy input
        output_path: Absolute path of the written notebook
        images_dir: Image directory owned by the notebook (may not exist)
        images: Distinct image files referenced by the notebook
    """

    source_path: Path
    output_path: Path
    images_dir: Path
    images: list[Path] = Field(default_factory=list)

    model_config = ConfigDict(arbitrary_types_allowed=True)
