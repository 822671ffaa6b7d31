from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class TaskOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    type: str
    organization_id: int
    department_id: int
    created_by: int
    assignees: list[int]
    watchers: list[int]
    created_at: datetime


class AttachmentCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    file_name: str = Field(alias="fileName", min_length=1, max_length=255)
    file_url: str = Field(alias="fileUrl", min_length=1, max_length=500)
    parent_model: Literal["Task"] = Field(alias="parentModel")
    parent: int


class AttachmentOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    file_name: str
    file_url: str
    parent_model: str
    parent_id: int
    uploaded_by: int
