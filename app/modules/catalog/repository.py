"""Catalog repository layer."""

from __future__ import annotations

from decimal import Decimal
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.enums import CourseLevelEnum
from app.modules.catalog.models import Course


class CatalogRepository:
    """DB operations for catalog domain."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def create_course(
        self,
        title: str,
        description: str | None,
        price: Decimal,
        duration_hours: int,
        level: CourseLevelEnum,
        is_published: bool,
        series_name: str | None,
        part_number: int | None,
    ) -> Course:
        course = Course(
            title=title,
            description=description,
            price=price,
            duration_hours=duration_hours,
            level=level,
            is_published=is_published,
            series_name=series_name,
            part_number=part_number,
        )
        self.session.add(course)
        await self.session.flush()
        return course

    async def get_course_by_id(self, course_id: UUID) -> Course | None:
        return await self.session.scalar(select(Course).where(Course.id == course_id))

    async def list_series_members(self, series_name: str) -> list[Course]:
        stmt = select(Course).where(Course.series_name == series_name).order_by(Course.created_at.asc())
        return (await self.session.scalars(stmt)).all()

    async def list_courses(self, is_published: bool | None = None) -> list[Course]:
        stmt = select(Course)
        if is_published is not None:
            stmt = stmt.where(Course.is_published.is_(is_published))
        stmt = stmt.order_by(Course.created_at.asc())
        return (await self.session.scalars(stmt)).all()

    async def set_series(self, course: Course, series_name: str | None, part_number: int | None) -> Course:
        course.series_name = series_name
        course.part_number = part_number
        await self.session.flush()
        return course

    async def delete_course(self, course: Course) -> None:
        await self.session.delete(course)
        await self.session.flush()
