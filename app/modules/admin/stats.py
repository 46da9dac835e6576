"""Dashboard statistics helpers."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from decimal import Decimal

from app.core.enums import EntityKindEnum
from app.modules.workflow import status_model


def status_breakdown(kind: EntityKindEnum, counts: Mapping[str, int]) -> dict[str, int]:
    """Count per lifecycle status, listing every status of the kind even when zero."""
    return {str(status): int(counts.get(str(status), 0)) for status in status_model.status_enum(kind)}


def average_score(scores: Iterable[Decimal | float | int | None]) -> float:
    """Mean of graded scores; ungraded items are skipped and no grades yields 0."""
    graded = [float(score) for score in scores if score is not None]
    if not graded:
        return 0.0
    return sum(graded) / len(graded)
