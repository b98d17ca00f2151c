from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class UploadResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    message: str = "File uploaded successfully"
    file_name: str = Field(alias="fileName")
    size: int = Field(ge=0)


class ErrorResponse(BaseModel):
    error: str


class UploadFailureResponse(BaseModel):
    error: str
    details: str
