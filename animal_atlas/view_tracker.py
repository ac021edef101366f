"""
View tracking for animal pages.
Records per-animal views and derives trending and recently viewed lists.
"""
import logging
from collections import OrderedDict
from datetime import datetime, timedelta
from typing import Callable, Dict, Iterable, List, Optional

from .models import StoreResult, ViewRecord
from .storage import PersistentStore, VIEWS_KEY, delete_key, read_json, write_json

logger = logging.getLogger(__name__)

DEFAULT_CAPACITY = 100
TRENDING_WINDOW_DAYS = 7

POPULAR_ANIMALS = [
    'Lion', 'Tiger', 'Elephant', 'Giraffe', 'Panda',
    'Dolphin', 'Eagle', 'Penguin', 'Wolf', 'Bear',
]


class ViewHistory:
    """
    Fixed-capacity view records keyed by animal name.

    Records are kept most recently touched first. Touching a record moves it
    to the front; anything pushed past the capacity is dropped for good.
    """

    def __init__(self, capacity: int = DEFAULT_CAPACITY):
        if capacity < 1:
            raise ValueError("View history capacity must be at least 1")
        self.capacity = capacity
        self._records: "OrderedDict[str, ViewRecord]" = OrderedDict()

    @classmethod
    def from_records(cls, records: Iterable[ViewRecord], capacity: int = DEFAULT_CAPACITY) -> "ViewHistory":
        history = cls(capacity)
        # stable sort keeps stored order among equal timestamps
        for record in sorted(records, key=lambda r: r.timestamp, reverse=True):
            if record.name in history._records:
                continue
            if len(history._records) >= capacity:
                break
            history._records[record.name] = ViewRecord(record.name, record.timestamp, record.count)
        return history

    def touch(self, name: str, timestamp: int) -> ViewRecord:
        """Count one view of ``name`` at ``timestamp``."""
        record = self._records.get(name)
        if record is not None:
            record.count += 1
            record.timestamp = timestamp
        else:
            record = ViewRecord(name=name, timestamp=timestamp, count=1)
            self._records[name] = record

        self._records.move_to_end(name, last=False)
        while len(self._records) > self.capacity:
            evicted, _ = self._records.popitem(last=True)
            logger.debug(f"Evicted '{evicted}' from view history")
        return record

    def records(self) -> List[ViewRecord]:
        return [ViewRecord(r.name, r.timestamp, r.count) for r in self._records.values()]

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, name: str) -> bool:
        return name in self._records


class ViewTracker:
    """Tracks animal views in the persistent store."""

    def __init__(
        self,
        store: PersistentStore,
        clock: Optional[Callable[[], datetime]] = None,
        capacity: int = DEFAULT_CAPACITY,
        trending_window_days: int = TRENDING_WINDOW_DAYS,
    ):
        """
        Initialize the tracker.

        Args:
            store: Persistent store holding the view history
            clock: Returns the current time, defaults to datetime.now
            capacity: Maximum number of distinct animals remembered
            trending_window_days: Size of the trailing window used for trending
        """
        self.store = store
        self.clock = clock or datetime.now
        self.capacity = capacity
        self.trending_window = timedelta(days=trending_window_days)

    def _now_ms(self) -> int:
        return int(self.clock().timestamp() * 1000)

    def read_records(self) -> StoreResult:
        """
        Read the persisted view records in store order.

        Returns:
            StoreResult holding a list of ViewRecord, or the failure reason
        """
        result = read_json(self.store, VIEWS_KEY, default=[])
        if not result.success:
            return result

        data = result.value
        if not isinstance(data, list):
            return StoreResult.fail(f"View history must be an array, got {type(data).__name__}")

        try:
            return StoreResult.ok([ViewRecord.from_dict(item) for item in data])
        except ValueError as e:
            return StoreResult.fail(f"Corrupt view history: {e}")

    def _load_records(self, operation: str) -> List[ViewRecord]:
        result = self.read_records()
        if not result.success:
            logger.warning(f"Could not read view history during {operation}: {result.error}")
        return result.value_or([])

    def track_view(self, name: str) -> None:
        """
        Record one view of an animal.

        Failures are logged and never raised; the stored history is left
        unchanged when it cannot be read or written.
        """
        if not isinstance(name, str) or not name:
            logger.warning(f"Ignoring view with invalid animal name: {name!r}")
            return

        result = self.read_records()
        if not result.success:
            logger.error(f"Error tracking animal view for '{name}': {result.error}")
            return

        history = ViewHistory.from_records(result.value, self.capacity)
        record = history.touch(name, self._now_ms())

        result = write_json(self.store, VIEWS_KEY, [r.to_dict() for r in history.records()])
        if not result.success:
            logger.error(f"Error tracking animal view for '{name}': {result.error}")
            return

        logger.debug(f"Tracked view of '{name}' (count={record.count})")

    def get_trending_animals(self, limit: int = 5) -> List[str]:
        """
        Get the most viewed animals of the trailing window.

        Falls back to a fixed list of popular animals when there is no recent
        activity or the history cannot be read.
        """
        if limit < 1:
            return []

        result = self.read_records()
        if not result.success:
            logger.warning(f"Error getting trending animals: {result.error}")
            return POPULAR_ANIMALS[:limit]

        cutoff = self._now_ms() - int(self.trending_window.total_seconds() * 1000)

        view_counts: Dict[str, int] = {}
        for record in result.value:
            if record.timestamp >= cutoff:
                view_counts[record.name] = view_counts.get(record.name, 0) + record.count

        if not view_counts:
            return POPULAR_ANIMALS[:limit]

        ranked = sorted(view_counts.items(), key=lambda item: item[1], reverse=True)
        return [name for name, _ in ranked[:limit]]

    def get_recently_viewed(self, limit: int = 5) -> List[str]:
        """Names of the most recently viewed animals, newest first."""
        if limit < 1:
            return []

        records = self._load_records("get_recently_viewed")
        ordered = sorted(records, key=lambda r: r.timestamp, reverse=True)
        return [r.name for r in ordered[:limit]]

    def get_view_stats(self) -> Dict[str, object]:
        """
        Summarize the view history.

        Returns:
            Dictionary with total_views, unique_animals and most_viewed
            ({'name', 'count'} or None when nothing was viewed)
        """
        records = self._load_records("get_view_stats")

        most_viewed = None
        for record in records:
            if most_viewed is None or record.count > most_viewed.count:
                most_viewed = record

        return {
            'total_views': sum(r.count for r in records),
            'unique_animals': len(records),
            'most_viewed': (
                {'name': most_viewed.name, 'count': most_viewed.count}
                if most_viewed is not None else None
            ),
        }

    def clear_view_history(self) -> None:
        """Delete all recorded views."""
        result = delete_key(self.store, VIEWS_KEY)
        if not result.success:
            logger.error(f"Error clearing view history: {result.error}")
            return
        logger.info("View history cleared")
