"""Season identifiers in FPL's ``YYyy`` form (``2526`` for 2025/26)."""
from datetime import date
from typing import Optional

# FPL seasons start in August
SEASON_START_MONTH = 8


def season_for_date(day: date) -> str:
    start_year = day.year if day.month >= SEASON_START_MONTH else day.year - 1
    return f"{start_year % 100:02d}{(start_year + 1) % 100:02d}"


def current_season(configured: Optional[str] = None, today: Optional[date] = None) -> str:
    """Configured season wins; otherwise derive it from today's date."""
    if configured:
        return configured
    return season_for_date(today or date.today())
