"""Catalog API router."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, Header, Query, status

from app.modules.catalog.schemas import (
    CourseCreate,
    CourseRead,
    CourseSeriesUpdate,
    CourseWriteRead,
    NextPartRead,
    SeriesGroupRead,
    SeriesOverviewRead,
)
from app.modules.catalog.service import CatalogService, get_catalog_service

router = APIRouter(prefix="/courses", tags=["catalog"])


@router.post("", response_model=CourseWriteRead, status_code=status.HTTP_201_CREATED)
async def create_course(
    payload: CourseCreate,
    service: CatalogService = Depends(get_catalog_service),
    actor_ref: str | None = Header(default=None, alias="X-Admin-Ref"),
) -> CourseWriteRead:
    course, warnings = await service.create_course(payload, actor_ref)
    return CourseWriteRead(course=CourseRead.model_validate(course), warnings=warnings)


@router.get("/series", response_model=SeriesOverviewRead)
async def list_series(
    is_published: bool | None = Query(default=None),
    service: CatalogService = Depends(get_catalog_service),
) -> SeriesOverviewRead:
    """Courses grouped by series, individual courses last."""
    groups, warnings = await service.list_series(is_published=is_published)
    return SeriesOverviewRead(
        groups=[
            SeriesGroupRead(name=name, courses=[CourseRead.model_validate(item) for item in courses])
            for name, courses in groups.items()
        ],
        warnings=warnings,
    )


@router.get("/series/next-part", response_model=NextPartRead)
async def get_next_part(
    series_name: str | None = Query(default=None, max_length=255),
    service: CatalogService = Depends(get_catalog_service),
) -> NextPartRead:
    """Part number a new course in the series would get right now."""
    return NextPartRead(series_name=series_name, next_part_number=await service.next_part(series_name))


@router.patch("/{course_id}/series", response_model=CourseWriteRead)
async def retag_course_series(
    course_id: UUID,
    payload: CourseSeriesUpdate,
    service: CatalogService = Depends(get_catalog_service),
    actor_ref: str | None = Header(default=None, alias="X-Admin-Ref"),
) -> CourseWriteRead:
    course, warnings = await service.retag_series(course_id, payload, actor_ref)
    return CourseWriteRead(course=CourseRead.model_validate(course), warnings=warnings)


@router.delete("/{course_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_course(
    course_id: UUID,
    service: CatalogService = Depends(get_catalog_service),
    actor_ref: str | None = Header(default=None, alias="X-Admin-Ref"),
) -> None:
    await service.delete_course(course_id, actor_ref)
