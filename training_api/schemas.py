from __future__ import annotations

from typing import Any, Dict, List

from pydantic import BaseModel, Field


class FilterSelectionModel(BaseModel):
    tenure: List[str] = Field(default_factory=list)
    stores: List[str] = Field(default_factory=list)
    area_managers: List[str] = Field(default_factory=list)
    trainers: List[str] = Field(default_factory=list)
    courses: List[str] = Field(default_factory=list)
    designations: List[str] = Field(default_factory=list)


class DatasetUploadModel(BaseModel):
    rows: List[Dict[str, Any]] = Field(default_factory=list)


class DatasetUploadResponse(BaseModel):
    raw_rows: int
    records: int
    dropped_rows: int
