"""Catalog schemas."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from app.core.enums import CourseLevelEnum


class CourseCreate(BaseModel):
    """Create course request. Part number is assigned when omitted."""

    title: str = Field(min_length=1, max_length=255)
    description: str | None = Field(default=None, max_length=10000)
    price: Decimal = Field(default=Decimal("0"), ge=0)
    duration_hours: int = Field(default=0, ge=0, le=1000)
    level: CourseLevelEnum = CourseLevelEnum.BEGINNER
    is_published: bool = False
    series_name: str | None = Field(default=None, max_length=255)
    part_number: int | None = Field(default=None, ge=1)


class CourseSeriesUpdate(BaseModel):
    """Move a course into another series, or out of any series."""

    series_name: str | None = Field(default=None, max_length=255)
    part_number: int | None = Field(default=None, ge=1)


class CourseRead(BaseModel):
    """Course response schema."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    title: str
    description: str | None
    price: Decimal
    duration_hours: int
    level: CourseLevelEnum
    is_published: bool
    series_name: str | None
    part_number: int | None
    created_at: datetime
    updated_at: datetime


class CourseWriteRead(BaseModel):
    """Created or retagged course with any part-number warnings for its series."""

    course: CourseRead
    warnings: list[str] = Field(default_factory=list)


class SeriesGroupRead(BaseModel):
    name: str
    courses: list[CourseRead]


class SeriesOverviewRead(BaseModel):
    """Courses grouped by series in display order."""

    groups: list[SeriesGroupRead]
    warnings: list[str] = Field(default_factory=list)


class NextPartRead(BaseModel):
    series_name: str | None
    next_part_number: int
