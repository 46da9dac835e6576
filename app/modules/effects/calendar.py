"""Calendar provisioning for scheduled sessions."""

from __future__ import annotations

import secrets
import string
from typing import Protocol

from app.core.config import get_settings
from app.modules.workflow.effects import ScheduleCalendarEntry

settings = get_settings()


class CalendarProvisioner(Protocol):
    async def provision(self, entry: ScheduleCalendarEntry) -> str:
        """Reserve the session and return the meeting link attendees should use."""


def generate_meeting_code() -> str:
    """Random ``abc-defg-hij`` style meeting code."""
    alphabet = string.ascii_lowercase
    return "-".join("".join(secrets.choice(alphabet) for _ in range(size)) for size in (3, 4, 3))


class MeetingLinkProvisioner:
    """Uses the manually entered link or generates one under the configured base URL."""

    def __init__(self, base_url: str | None = None) -> None:
        self.base_url = (base_url or settings.meeting_link_base_url).rstrip("/")

    async def provision(self, entry: ScheduleCalendarEntry) -> str:
        if entry.meeting_link:
            return entry.meeting_link
        return f"{self.base_url}/{generate_meeting_code()}"
