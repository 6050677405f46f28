"""Uploaded file and classification models."""

from __future__ import annotations

from enum import StrEnum
from typing import Optional

from pydantic import BaseModel, Field, model_validator


class FileRole(StrEnum):
    PAYROLL = "PAYROLL"
    DEPENDENTS = "DEPENDENTS"
    RETRO = "RETRO"
    BONUS = "BONUS"


class UploadedFile(BaseModel):
    """An in-memory upload handed over by the caller."""

    buffer: bytes
    original_filename: str
    size: int = 0

    @model_validator(mode="after")
    def _default_size(self) -> UploadedFile:
        if not self.size:
            self.size = len(self.buffer)
        return self

    @property
    def base_name(self) -> str:
        """Filename up to the first dot, underscores read as spaces."""
        return self.original_filename.split(".")[0].replace("_", " ").strip()


class ClassificationDecision(BaseModel):
    """Which strategy assigned which role to a file."""

    filename: str
    role: FileRole
    strategy: str


class ClassifiedFiles(BaseModel):
    """Uploads partitioned by role. Only payroll is mandatory."""

    payroll: Optional[UploadedFile] = None
    dependents: Optional[UploadedFile] = None
    retro: Optional[UploadedFile] = None
    bonuses: list[UploadedFile] = Field(default_factory=list)
    decisions: list[ClassificationDecision] = Field(default_factory=list)

    def assign(self, file: UploadedFile, role: FileRole, strategy: str) -> Optional[UploadedFile]:
        """Put ``file`` in ``role`` and return the file it displaced, if any."""
        displaced = None
        if role is FileRole.BONUS:
            self.bonuses.append(file)
        else:
            self.bonuses = [f for f in self.bonuses if f is not file]
            attr = role.value.lower()
            displaced = getattr(self, attr)
            setattr(self, attr, file)
        self.decisions.append(
            ClassificationDecision(filename=file.original_filename, role=role, strategy=strategy)
        )
        return displaced
