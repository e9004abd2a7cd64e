"""
Course schema definitions for request bodies and responses.

Design choices:
- CourseIn leaves `title` optional so an empty or missing title reaches the repository,
  which owns the non-empty rule and reports it as a domain validation error.
- Unknown request fields are ignored, so clients may send `id`/`created_at` back unchanged.
- Course is populated straight from ORM rows via `from_attributes`.
"""
from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class CourseIn(BaseModel):
    title: Optional[str] = Field(default=None, description="Course title; required and non-empty")
    description: Optional[str] = None
    long_description: Optional[str] = None
    duration: Optional[str] = Field(default=None, description="Free-form duration such as '6 weeks'")
    price: Optional[float] = Field(default=None, description="Course price; numeric or null")
    level: Optional[str] = Field(default=None, description="Difficulty level such as beginner or advanced")
    image_url: Optional[str] = None

    model_config = ConfigDict(extra="ignore")


class Course(BaseModel):
    id: int
    title: str
    description: Optional[str] = None
    long_description: Optional[str] = None
    duration: Optional[str] = None
    price: Optional[float] = None
    level: Optional[str] = None
    image_url: Optional[str] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class SequenceReset(BaseModel):
    """Outcome of compacting course ids to 1..N."""

    total_courses: int = Field(alias="totalCourses")
    next_id: int = Field(alias="nextId")

    model_config = ConfigDict(populate_by_name=True)
