"""
Data models for token exports.

Defines the export scope/format enums and the Pydantic models exchanged
with the export pipeline and the selection analyzer.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class Scope(str, Enum):
    """Which subset of tokens an export covers."""

    ALL = "all"
    SELECTED = "selected"
    TYPOGRAPHY = "typography"

    @classmethod
    def coerce(cls, value: object) -> Scope:
        """
        Map a loosely-typed scope to a Scope.

        Anything that is not "all" or "typography" is treated as "selected",
        matching how requests from the editor are interpreted.
        """
        if isinstance(value, Scope):
            return value
        if value == "all":
            return cls.ALL
        if value == "typography":
            return cls.TYPOGRAPHY
        return cls.SELECTED


class ExportFormat(str, Enum):
    """Output layout requested from the export pipeline."""

    SINGLE = "single"
    PER_MODE = "perMode"
    TYPOGRAPHY = "typography"


class ExportFile(BaseModel):
    """A single exported token document."""

    name: str = Field(description="File name suggested by the pipeline")
    json_data: Any = Field(
        default=None,
        alias="json",
        description="Parsed JSON document",
    )

    model_config = {"populate_by_name": True}

    def is_empty_object(self) -> bool:
        """True when the document is a plain mapping with no keys."""
        return isinstance(self.json_data, dict) and len(self.json_data) == 0


class ExportBundle(BaseModel):
    """Files returned by one export pipeline call."""

    files: list[ExportFile] = Field(default_factory=list)

    @property
    def names(self) -> list[str]:
        return [f.name for f in self.files]


class SelectionDiagnostics(BaseModel):
    """
    Result of analyzing one collection/mode pair.

    Used to explain why a selected-scope export came out empty.
    """

    ok: bool
    variable_count: int | None = None
    variables_with_values: int | None = None
    message: str | None = None
