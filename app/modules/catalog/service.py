"""Catalog business logic layer."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from uuid import UUID

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db_session
from app.modules.audit.repository import AuditRepository
from app.modules.catalog.models import Course
from app.modules.catalog.repository import CatalogRepository
from app.modules.catalog.schemas import CourseCreate, CourseSeriesUpdate
from app.modules.catalog.sequencer import (
    find_part_collisions,
    group_by_series,
    next_part_number,
    normalize_series_name,
)
from app.shared.exceptions import NotFoundException

logger = logging.getLogger(__name__)


def collision_warnings(courses: Iterable[Course]) -> list[str]:
    """Human-readable warnings for duplicated part numbers."""
    warnings = []
    for series_name, parts in find_part_collisions(courses).items():
        joined = ", ".join(str(part) for part in parts)
        warnings.append(f"Series '{series_name}' has duplicate part numbers: {joined}")
    return warnings


class CatalogService:
    """Course catalog with video-series sequencing."""

    def __init__(self, repository: CatalogRepository, audit_repository: AuditRepository) -> None:
        self.repository = repository
        self.audit_repository = audit_repository

    async def next_part(self, series_name: str | None) -> int:
        name = normalize_series_name(series_name)
        if name is None:
            return 1
        members = await self.repository.list_series_members(name)
        return next_part_number(name, members)

    async def create_course(
        self,
        payload: CourseCreate,
        actor_ref: str | None = None,
    ) -> tuple[Course, list[str]]:
        """Create a course, appending it to its series when no part is given.

        The next part is read from the members present right now. Two
        concurrent creations may pick the same part; that shows up as a
        warning on the next read instead of a rejected write.
        """
        series_name = normalize_series_name(payload.series_name)
        part_number = None
        if series_name is not None:
            part_number = payload.part_number or await self.next_part(series_name)

        course = await self.repository.create_course(
            title=payload.title,
            description=payload.description,
            price=payload.price,
            duration_hours=payload.duration_hours,
            level=payload.level,
            is_published=payload.is_published,
            series_name=series_name,
            part_number=part_number,
        )
        warnings = await self._series_warnings(series_name)

        await self.audit_repository.create_audit_log(
            actor_ref=actor_ref,
            action="course.create",
            entity_type="course",
            entity_id=str(course.id),
            payload={"series_name": series_name, "part_number": part_number},
        )
        logger.info("Created course %s (series=%s, part=%s)", course.id, series_name, part_number)
        return course, warnings

    async def retag_series(
        self,
        course_id: UUID,
        payload: CourseSeriesUpdate,
        actor_ref: str | None = None,
    ) -> tuple[Course, list[str]]:
        """Move a course between series. Leaving a series clears its part number."""
        course = await self._get_course(course_id)
        previous_series = course.series_name
        series_name = normalize_series_name(payload.series_name)

        part_number = None
        if series_name is not None:
            if payload.part_number is not None:
                part_number = payload.part_number
            elif series_name == previous_series and course.part_number is not None:
                part_number = course.part_number
            else:
                members = [
                    member
                    for member in await self.repository.list_series_members(series_name)
                    if member.id != course.id
                ]
                part_number = next_part_number(series_name, members)

        course = await self.repository.set_series(course, series_name, part_number)
        warnings = await self._series_warnings(series_name)

        await self.audit_repository.create_audit_log(
            actor_ref=actor_ref,
            action="course.retag_series",
            entity_type="course",
            entity_id=str(course.id),
            payload={
                "from_series": previous_series,
                "to_series": series_name,
                "part_number": part_number,
            },
        )
        return course, warnings

    async def delete_course(self, course_id: UUID, actor_ref: str | None = None) -> None:
        """Delete a course. Remaining parts of its series keep their numbers."""
        course = await self._get_course(course_id)
        await self.repository.delete_course(course)
        await self.audit_repository.create_audit_log(
            actor_ref=actor_ref,
            action="course.delete",
            entity_type="course",
            entity_id=str(course_id),
            payload={"series_name": course.series_name, "part_number": course.part_number},
        )
        logger.info("Deleted course %s", course_id)

    async def list_series(self, is_published: bool | None = None) -> tuple[dict[str, list[Course]], list[str]]:
        courses = await self.repository.list_courses(is_published=is_published)
        warnings = collision_warnings(courses)
        for warning in warnings:
            logger.warning(warning)
        return group_by_series(courses), warnings

    async def _get_course(self, course_id: UUID) -> Course:
        course = await self.repository.get_course_by_id(course_id)
        if course is None:
            raise NotFoundException("Course not found")
        return course

    async def _series_warnings(self, series_name: str | None) -> list[str]:
        if series_name is None:
            return []
        warnings = collision_warnings(await self.repository.list_series_members(series_name))
        for warning in warnings:
            logger.warning(warning)
        return warnings


async def get_catalog_service(session: AsyncSession = Depends(get_db_session)) -> CatalogService:
    """Dependency provider for catalog service."""
    return CatalogService(
        repository=CatalogRepository(session),
        audit_repository=AuditRepository(session),
    )
