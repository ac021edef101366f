"""
Seasonal spotlight selection.
"""
import logging
import random
from datetime import datetime
from typing import Callable, List, Optional, Sequence

from .models import SEASONS, SeasonalEntry

logger = logging.getLogger(__name__)

SEASON_MONTHS = {
    "spring": (3, 4, 5),
    "summer": (6, 7, 8),
    "fall": (9, 10, 11),
    "winter": (12, 1, 2),
}


def season_for_month(month: int) -> str:
    """Map a calendar month (1-12) to its season."""
    if isinstance(month, bool) or not isinstance(month, int) or not 1 <= month <= 12:
        raise ValueError(f"Month must be an integer from 1 to 12, got {month!r}")
    for season, months in SEASON_MONTHS.items():
        if month in months:
            return season
    raise ValueError(f"No season defined for month {month}")


class SeasonalSelector:
    """Picks seasonal animals to feature for the current month."""

    def __init__(
        self,
        catalog: Sequence[SeasonalEntry],
        clock: Optional[Callable[[], datetime]] = None,
        rng: Optional[random.Random] = None,
    ):
        self.catalog = list(catalog)
        self.clock = clock or datetime.now
        self.rng = rng or random.Random()

    def get_current_season(self) -> str:
        return season_for_month(self.clock().month)

    def get_entries_for_season(self, season: str) -> List[SeasonalEntry]:
        if season not in SEASONS:
            raise ValueError(f"Unknown season: {season}")
        return [entry for entry in self.catalog if entry.season == season]

    def get_seasonal_animals(self, limit: int = 3) -> List[SeasonalEntry]:
        """
        Randomly sample animals whose months include the current month.

        The sample is unweighted and without replacement; fewer than
        ``limit`` entries are returned when the month has fewer.
        """
        if limit < 1:
            return []

        month = self.clock().month
        in_season = [entry for entry in self.catalog if month in entry.months]
        picked = self.rng.sample(in_season, min(limit, len(in_season)))

        logger.debug(f"Selected {len(picked)} of {len(in_season)} seasonal animals for month {month}")
        return picked
