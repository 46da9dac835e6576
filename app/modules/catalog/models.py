"""Catalog ORM models."""

from __future__ import annotations

from decimal import Decimal

from sqlalchemy import Boolean, Enum as SAEnum, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.core.database import Base, BaseModelMixin
from app.core.enums import CourseLevelEnum


class Course(BaseModelMixin, Base):
    """Catalog course, optionally one part of a named video series."""

    __tablename__ = "courses"

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2), default=Decimal("0"), nullable=False)
    duration_hours: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    level: Mapped[CourseLevelEnum] = mapped_column(
        SAEnum(CourseLevelEnum, name="course_level_enum", native_enum=False),
        default=CourseLevelEnum.BEGINNER,
        nullable=False,
    )
    is_published: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    series_name: Mapped[str | None] = mapped_column(String(255), nullable=True, index=True)
    part_number: Mapped[int | None] = mapped_column(Integer, nullable=True)
