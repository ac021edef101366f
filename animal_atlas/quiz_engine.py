"""
Quiz engine core logic for Animal Atlas.
Handles question filtering, ordering, the daily challenge and answer scoring.
"""
import random
import logging
from datetime import date, datetime
from typing import Any, Callable, Dict, List, Optional, Sequence

from .models import QuizFilters, QuizQuestion, QuizSession, SESSION_MODES

logger = logging.getLogger(__name__)

DAILY_QUESTION_COUNT = 10
DAILY_SHUFFLE_MULTIPLIER = 2654435761

# Fixed English names so the daily key never depends on the process locale
_WEEKDAYS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")
_MONTHS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun",
           "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")


def date_key(day: date) -> str:
    """Render a calendar day as e.g. ``Sun Oct 18 2026``."""
    return f"{_WEEKDAYS[day.weekday()]} {_MONTHS[day.month - 1]} {day.day:02d} {day.year}"


def date_seed(key: str) -> int:
    """Sum of the character codes of ``key``."""
    return sum(ord(char) for char in key)


def seeded_shuffle(items: Sequence[Any], seed: int) -> List[Any]:
    """
    Deterministically permute ``items`` for the given seed.

    Walks i from the last index down to 1 and swaps position i with
    j = ((seed + i) * 2654435761) % (i + 1). The formula must not change:
    every installation derives the same daily order from it.
    """
    shuffled = list(items)
    for i in range(len(shuffled) - 1, 0, -1):
        j = ((seed + i) * DAILY_SHUFFLE_MULTIPLIER) % (i + 1)
        shuffled[i], shuffled[j] = shuffled[j], shuffled[i]
    return shuffled


class QuizEngine:
    """Builds quiz sessions from the question catalog and scores answers."""

    def __init__(
        self,
        questions: Sequence[QuizQuestion],
        rng: Optional[random.Random] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """
        Initialize the quiz engine.

        Args:
            questions: Full question catalog, in catalog order
            rng: Random source for custom sessions
            clock: Returns the current time, used to pick the daily challenge
        """
        self.questions = list(questions)
        self.rng = rng or random.Random()
        self.clock = clock or datetime.now

    def filter_questions(self, filters: Optional[QuizFilters] = None) -> List[QuizQuestion]:
        """
        Filter the catalog.

        A question matches a category filter when its own category equals
        the filter or is ``all``; the ``all`` filter matches everything.
        """
        filtered = list(self.questions)
        if filters is None:
            return filtered

        if filters.difficulty:
            filtered = [q for q in filtered if q.difficulty == filters.difficulty]

        if filters.category and filters.category != "all":
            filtered = [q for q in filtered
                        if q.category == filters.category or q.category == "all"]

        if filters.type:
            filtered = [q for q in filtered if q.type == filters.type]

        return filtered

    def shuffle_questions(self, questions: List[QuizQuestion]) -> List[QuizQuestion]:
        """
        Shuffle questions randomly.

        Returns:
            New list with questions in random order
        """
        shuffled = questions.copy()
        self.rng.shuffle(shuffled)
        return shuffled

    def get_random_questions(self, count: int, filters: Optional[QuizFilters] = None) -> List[QuizQuestion]:
        """
        Build a custom session's question list.

        Args:
            count: Maximum number of questions to return
            filters: Optional difficulty, category and type filters

        Returns:
            Up to ``count`` filtered questions in random order
        """
        if count < 1:
            return []

        pool = self.filter_questions(filters)
        shuffled = self.shuffle_questions(pool)
        selected = shuffled[:count]

        logger.debug(
            f"Selected {len(selected)} of {len(pool)} questions "
            f"({filters.describe() if filters else 'no filters'})"
        )
        return selected

    def get_daily_questions(self, day: Optional[date] = None) -> List[QuizQuestion]:
        """
        Get the daily challenge for ``day`` (today by default).

        Everyone gets the same questions on the same calendar day.
        """
        if day is None:
            day = self.clock().date()

        key = date_key(day)
        seed = date_seed(key)
        daily = seeded_shuffle(self.questions, seed)[:DAILY_QUESTION_COUNT]

        logger.debug(f"Daily challenge for '{key}' (seed {seed}): {[q.id for q in daily]}")
        return daily

    def evaluate_answer(self, question: QuizQuestion, option_index: int) -> bool:
        return option_index == question.correct_answer

    def start_session(
        self,
        questions: List[QuizQuestion],
        mode: str = "custom",
        channel_id: Optional[int] = None,
    ) -> QuizSession:
        """
        Create a new session over the given questions.

        Raises:
            ValueError: If the question list is empty or the mode is unknown
        """
        if not questions:
            raise ValueError("Cannot start a quiz session without questions")
        if mode not in SESSION_MODES:
            raise ValueError(f"Unknown session mode: {mode}")

        return QuizSession(
            questions=list(questions),
            mode=mode,
            start_time=self.clock(),
            channel_id=channel_id,
        )

    def record_answer(self, session: QuizSession, option_index: int) -> Dict[str, Any]:
        """
        Score the session's current question and advance to the next one.

        The streak grows on each correct answer and resets to zero on a
        wrong one. Nothing is persisted here.

        Args:
            session: Session in progress
            option_index: Zero-based index of the chosen option

        Returns:
            Dictionary describing the answer and the updated session state

        Raises:
            ValueError: If the session is complete or the option is out of range
        """
        question = session.current_question
        if question is None:
            raise ValueError("Quiz session is already complete")

        if isinstance(option_index, bool) or not isinstance(option_index, int) \
                or not 0 <= option_index < len(question.options):
            raise ValueError(
                f"Option must be between 1 and {len(question.options)}"
            )

        correct = self.evaluate_answer(question, option_index)
        if correct:
            session.score += 1
            session.current_streak += 1
            session.best_streak = max(session.best_streak, session.current_streak)
        else:
            session.current_streak = 0

        session.answers[question.id] = option_index
        session.current_index += 1

        return {
            'question_id': question.id,
            'correct': correct,
            'chosen_option': question.options[option_index],
            'correct_option': question.correct_option,
            'explanation': question.explanation,
            'score': session.score,
            'current_streak': session.current_streak,
            'best_streak': session.best_streak,
            'completed': session.is_complete,
        }
