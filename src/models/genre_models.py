"""
Genre Models
"""

from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime


class GenreCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: str = Field("", max_length=1000)


class GenreUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=1000)


class GenreResponse(BaseModel):
    id: str
    name: str
    description: str = ""
    created_at: Optional[datetime] = None
