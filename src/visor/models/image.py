"""Pydantic models for report images."""

from datetime import datetime

from pydantic import Field

from visor.models.common import CamelModel


class Image(CamelModel):
    key: str
    report_id: str
    description: str
    filename: str
    content_type: str
    size: int
    created_at: datetime | None = None


class ImageDescriptionUpdate(CamelModel):
    description: str = Field(..., min_length=1, max_length=10000)
