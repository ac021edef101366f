"""
Lifetime quiz statistics.
"""
import logging
from datetime import datetime, timezone
from typing import Callable, Optional

from .models import QuizSession, QuizStats, StoreResult
from .storage import PersistentStore, QUIZ_STATS_KEY, read_json, write_json

logger = logging.getLogger(__name__)


def iso_timestamp(moment: datetime) -> str:
    """UTC ISO-8601 timestamp with millisecond precision, e.g. 2026-10-18T09:30:00.000Z"""
    utc = moment.astimezone(timezone.utc)
    return utc.isoformat(timespec="milliseconds").replace("+00:00", "Z")


class StatsAggregator:
    """Accumulates completed quiz sessions into persisted lifetime stats."""

    def __init__(self, store: PersistentStore, clock: Optional[Callable[[], datetime]] = None):
        self.store = store
        self.clock = clock or (lambda: datetime.now(timezone.utc))

    def read_stats(self) -> StoreResult:
        """
        Read the persisted stats.

        A missing value reads as fresh zero stats; a corrupt one is a failure.
        """
        result = read_json(self.store, QUIZ_STATS_KEY)
        if not result.success:
            return result
        if result.value is None:
            return StoreResult.ok(QuizStats())

        try:
            return StoreResult.ok(QuizStats.from_dict(result.value))
        except ValueError as e:
            return StoreResult.fail(f"Corrupt quiz stats: {e}")

    def load_stats(self) -> QuizStats:
        result = self.read_stats()
        if not result.success:
            logger.warning(f"Could not read quiz stats, starting from zero: {result.error}")
        return result.value_or(QuizStats())

    def save_quiz_stats(
        self,
        prior_stats: QuizStats,
        session_score: int,
        session_length: int,
        session_best_streak: int,
    ) -> QuizStats:
        """
        Fold one completed session into the lifetime stats and persist them.

        The whole record is replaced. If the write fails the new stats are
        still returned, they just are not durable.

        Args:
            prior_stats: Stats before this session
            session_score: Correct answers in the session
            session_length: Questions in the session
            session_best_streak: Best streak reached in the session

        Returns:
            The new QuizStats
        """
        if min(session_score, session_length, session_best_streak) < 0:
            raise ValueError("Session results cannot be negative")

        new_stats = QuizStats(
            total_quizzes=prior_stats.total_quizzes + 1,
            total_correct=prior_stats.total_correct + session_score,
            total_questions=prior_stats.total_questions + session_length,
            best_streak=max(prior_stats.best_streak, session_best_streak),
            current_streak=session_best_streak,
            last_played=iso_timestamp(self.clock()),
        )

        result = write_json(self.store, QUIZ_STATS_KEY, new_stats.to_dict())
        if not result.success:
            logger.error(f"Error saving quiz stats: {result.error}")
        else:
            logger.info(
                f"Saved quiz stats: {new_stats.total_quizzes} quizzes, "
                f"{new_stats.total_correct}/{new_stats.total_questions} correct, "
                f"best streak {new_stats.best_streak}"
            )
        return new_stats

    def record_session(self, session: QuizSession) -> QuizStats:
        """Persist the results of a completed session."""
        return self.save_quiz_stats(
            self.load_stats(),
            session_score=session.score,
            session_length=session.total_questions,
            session_best_streak=session.best_streak,
        )
