from __future__ import annotations
from typing import List

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ExtensionItem(BaseModel):
    """An extension found by a scan plus the user's checkbox state."""
    model_config = ConfigDict(validate_assignment=True)
    extension: str
    is_checked: bool = False

    @field_validator("extension")
    @classmethod
    def _lower(cls, value: str) -> str:
        return value.lower()


class ScanResult(BaseModel):
    root: str
    extensions: List[str] = Field(default_factory=list)
    directories_skipped: int = 0
    entries_skipped: int = 0

    @property
    def count(self) -> int:
        return len(self.extensions)


class ExportSummary(BaseModel):
    destination: str
    files_written: int = 0
    files_failed: int = 0
    chars_written: int = 0
    directories_skipped: int = 0
    entries_skipped: int = 0
