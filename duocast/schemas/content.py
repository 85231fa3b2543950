"""
Pydantic schemas for content upload and analysis.
"""
from typing import List
from pydantic import BaseModel, Field


class ContentResponse(BaseModel):
    """Plain text extracted from an uploaded document."""
    content: str


class ContentAnalysisRequest(BaseModel):
    content: str


class ContentAnalysis(BaseModel):
    """Suggested episode framing for a piece of content."""
    title: str
    summary: str
    key_points: List[str] = Field(default_factory=list)
