"""Urgency enum for alert presentation."""

from enum import Enum


class Urgency(Enum):
    """Alert urgency categories. Lower value = more urgent."""

    URGENT = 1
    SOON = 2
    NORMAL = 3
