"""Status enum for maintenance urgency levels."""

from enum import Enum


class Status(Enum):
    """Maintenance status categories. Lower value = more urgent."""

    OVERDUE = 1
    URGENT = 2  # Due within a week
    ATTENTION = 3  # Due within about two weeks
    OK = 4

    @classmethod
    def classify(cls, days_remaining: int) -> "Status":
        """Map signed days remaining to an urgency level."""
        if days_remaining < 0:
            return cls.OVERDUE
        if days_remaining <= 7:
            return cls.URGENT
        if days_remaining <= 15:
            return cls.ATTENTION
        return cls.OK
