"""Course video-series sequencing.

A series is never stored on its own: it is the set of courses sharing a
``series_name``. Part numbers are computed from whatever members exist at
decision time and are never renumbered here.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from datetime import datetime
from typing import Protocol, TypeVar

INDIVIDUAL_COURSES = "Individual Courses"


class SeriesMember(Protocol):
    series_name: str | None
    part_number: int | None


class OrderedSeriesMember(SeriesMember, Protocol):
    created_at: datetime


T = TypeVar("T", bound=OrderedSeriesMember)


def normalize_series_name(series_name: str | None) -> str | None:
    """Blank names mean the course is not part of any series."""
    if series_name is None:
        return None
    stripped = series_name.strip()
    return stripped or None


def next_part_number(series_name: str | None, existing_members: Iterable[SeriesMember]) -> int:
    """Return the part number the next course in the series should get."""
    if normalize_series_name(series_name) is None:
        return 1
    parts = [member.part_number for member in existing_members if member.part_number is not None]
    if not parts:
        return 1
    return max(parts) + 1


def group_by_series(courses: Sequence[T]) -> dict[str, list[T]]:
    """Partition courses into series ordered by part, ungrouped ones last.

    Series appear in order of first encounter. Within a series members sort
    by part number, then creation time, then input order; members without a
    part number go last.
    """
    groups: dict[str, list[tuple[int, T]]] = {}
    individual: list[T] = []
    for index, course in enumerate(courses):
        name = normalize_series_name(course.series_name)
        if name is None:
            individual.append(course)
            continue
        groups.setdefault(name, []).append((index, course))

    ordered: dict[str, list[T]] = {}
    for name, members in groups.items():
        members.sort(
            key=lambda item: (
                item[1].part_number is None,
                item[1].part_number or 0,
                item[1].created_at,
                item[0],
            ),
        )
        ordered[name] = [course for _, course in members]

    if individual:
        ordered[INDIVIDUAL_COURSES] = individual
    return ordered


def find_part_collisions(courses: Iterable[SeriesMember]) -> dict[str, list[int]]:
    """Return part numbers used more than once within each series."""
    seen: dict[str, dict[int, int]] = {}
    for course in courses:
        name = normalize_series_name(course.series_name)
        if name is None or course.part_number is None:
            continue
        counts = seen.setdefault(name, {})
        counts[course.part_number] = counts.get(course.part_number, 0) + 1

    collisions: dict[str, list[int]] = {}
    for name, counts in seen.items():
        duplicated = sorted(part for part, count in counts.items() if count > 1)
        if duplicated:
            collisions[name] = duplicated
    return collisions
