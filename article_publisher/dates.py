"""Calendar-date handling for the article ``date`` field.

Dates arrive from the editor as ``YYYY-MM-DD`` with no time and no timezone.
They are stored as naive local midnight so that the day shown back to the
editor is the day they picked, whatever timezone the server runs in.
"""
from datetime import datetime
from typing import Optional

MONTH_NAMES = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)


def parse_date(date_text: Optional[str]) -> datetime:
    """Turn ``YYYY-MM-DD`` into local midnight of that day.

    The string is split into its integer parts rather than handed to an ISO
    parser, which would attach UTC and can move the day when displayed.
    Missing input yields the current instant.
    """
    if not date_text:
        return datetime.now()
    year, month, day = (int(part) for part in date_text.split("-"))
    return datetime(year, month, day)


def format_date(value: datetime) -> str:
    """Render a stored date as ``Month DD, YYYY``."""
    return f"{MONTH_NAMES[value.month - 1]} {value.day:02d}, {value.year:04d}"
