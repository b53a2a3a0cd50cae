"""Base enums and helpers for the SQLModel classes."""

import re
from datetime import datetime, timezone
from enum import Enum


def utcnow() -> datetime:
    """Naive UTC timestamp; every datetime column stores naive UTC."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_naive_utc(value: datetime | None) -> datetime | None:
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


class LenientEnum(str, Enum):
    """String enum that also accepts ``InProgress`` / ``in_progress`` spellings."""

    @classmethod
    def _missing_(cls, value: object):
        if not isinstance(value, str):
            return None
        key = re.sub(r"[-_\s]", "", value).lower()
        for member in cls:
            if member.value.replace("-", "") == key:
                return member
        return None


class Priority(LenientEnum):
    """Production order priority."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class OrderStatus(LenientEnum):
    """Production order lifecycle status."""

    PENDING = "pending"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"
    DELAYED = "delayed"
    CANCELLED = "cancelled"


class JobStatus(LenientEnum):
    """Production job status."""

    SCHEDULED = "scheduled"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"
    DELAYED = "delayed"


class MachineStatus(LenientEnum):
    """Machine operational status."""

    RUNNING = "running"
    IDLE = "idle"
    MAINTENANCE = "maintenance"
    ERROR = "error"
