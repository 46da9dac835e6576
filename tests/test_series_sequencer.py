from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta

import pytest

from app.modules.catalog.sequencer import (
    INDIVIDUAL_COURSES,
    find_part_collisions,
    group_by_series,
    next_part_number,
)

BASE_TIME = datetime(2026, 1, 5, 8, 0, tzinfo=UTC)


@dataclass
class FakeCourse:
    title: str
    series_name: str | None = None
    part_number: int | None = None
    created_at: datetime = field(default_factory=lambda: BASE_TIME)


def titles(courses: list[FakeCourse]) -> list[str]:
    return [course.title for course in courses]


def test_next_part_number_follows_highest_member() -> None:
    members = [FakeCourse("a", "Detailing 101", 1), FakeCourse("b", "Detailing 101", 2)]

    assert next_part_number("Detailing 101", members) == 3


@pytest.mark.parametrize("series_name", ["", "   ", None])
def test_next_part_number_without_series_is_one(series_name: str | None) -> None:
    assert next_part_number(series_name, [FakeCourse("a", "S", 4)]) == 1


def test_next_part_number_for_new_series_is_one() -> None:
    assert next_part_number("New Series", []) == 1


def test_next_part_number_skips_gaps_instead_of_filling_them() -> None:
    members = [FakeCourse("a", "S", 1), FakeCourse("c", "S", 5)]

    assert next_part_number("S", members) == 6


def test_group_by_series_orders_members_by_part() -> None:
    a = FakeCourse("A", "S", 2)
    b = FakeCourse("B", "S", 1)
    c = FakeCourse("C")

    grouped = group_by_series([a, b, c])

    assert list(grouped) == ["S", INDIVIDUAL_COURSES]
    assert titles(grouped["S"]) == ["B", "A"]
    assert titles(grouped[INDIVIDUAL_COURSES]) == ["C"]


def test_group_by_series_keeps_first_encounter_order_of_series() -> None:
    courses = [
        FakeCourse("z1", "Zeta", 1),
        FakeCourse("solo"),
        FakeCourse("a1", "Alpha", 1),
        FakeCourse("z2", "Zeta", 2),
    ]

    grouped = group_by_series(courses)

    assert list(grouped) == ["Zeta", "Alpha", INDIVIDUAL_COURSES]


def test_group_by_series_breaks_part_ties_by_creation_then_input_order() -> None:
    later = FakeCourse("later", "S", 1, BASE_TIME + timedelta(hours=1))
    earlier = FakeCourse("earlier", "S", 1, BASE_TIME)
    same_time = FakeCourse("same-time", "S", 1, BASE_TIME)

    grouped = group_by_series([later, earlier, same_time])

    assert titles(grouped["S"]) == ["earlier", "same-time", "later"]


def test_group_by_series_treats_blank_series_as_individual() -> None:
    grouped = group_by_series([FakeCourse("blank", "  "), FakeCourse("none")])

    assert list(grouped) == [INDIVIDUAL_COURSES]
    assert titles(grouped[INDIVIDUAL_COURSES]) == ["blank", "none"]


def test_group_by_series_without_individual_courses_has_no_bucket() -> None:
    grouped = group_by_series([FakeCourse("a", "S", 1)])

    assert INDIVIDUAL_COURSES not in grouped


def test_find_part_collisions_reports_without_renumbering() -> None:
    first = FakeCourse("first", "S", 1)
    second = FakeCourse("second", "S", 1)
    third = FakeCourse("third", "S", 2)
    other = FakeCourse("other", "T", 1)

    collisions = find_part_collisions([first, second, third, other])

    assert collisions == {"S": [1]}
    assert (first.part_number, second.part_number) == (1, 1)
