from datetime import datetime
from typing import Optional


# Query-string day bounds; a bare YYYY-MM-DD upper bound covers the whole day.
# Malformed values are ignored rather than rejected.
def parse_day(value: Optional[str], end_of_day: bool = False) -> Optional[datetime]:
    if not value:
        return None
    if len(value) == 10 and end_of_day:
        value += " 23:59:59"
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        return None
