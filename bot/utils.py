"""
Utility functions for the workout bot.
"""
import re
from datetime import date, datetime
from typing import List, Optional

DISPLAY_DATE_RE = re.compile(r"^(?P<d>\d{2})\.(?P<m>\d{2})\.(?P<y>\d{4})$")


def chunk_list(items: List, chunk_size: int) -> List[List]:
    """Splits a list into sublists of fixed size."""
    if chunk_size < 1:
        chunk_size = 1
    return [items[i:i + chunk_size] for i in range(0, len(items), chunk_size)]


def today_iso() -> str:
    """Returns today's local date as YYYY-MM-DD."""
    return date.today().isoformat()


def parse_display_date(text: str) -> Optional[str]:
    """
    Converts a DD.MM.YYYY command argument to an ISO date string.
    Returns None when the text is not in that format or is not a real date.
    """
    match = DISPLAY_DATE_RE.match(text.strip())
    if not match:
        return None
    try:
        parsed = datetime.strptime(text.strip(), "%d.%m.%Y").date()
    except ValueError:
        return None
    return parsed.isoformat()


def to_display_date(iso_date: str) -> str:
    """Converts YYYY-MM-DD to DD.MM.YYYY."""
    return date.fromisoformat(iso_date).strftime("%d.%m.%Y")
