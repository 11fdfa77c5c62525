"""
Tutorial Models
"""

from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime


class TutorialCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=300)
    video_url: str = Field(..., min_length=1, description="Video link (e.g. YouTube)")
    description: str = Field("", max_length=2000)


class TutorialUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=300)
    video_url: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = Field(None, max_length=2000)


class TutorialResponse(BaseModel):
    id: str
    title: str
    video_url: str
    description: str = ""
    created_at: Optional[datetime] = None
