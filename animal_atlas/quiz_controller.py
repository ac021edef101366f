"""
Quiz session controller for Animal Atlas.
Manages the active quiz session of each Discord channel.
"""
import logging
from typing import Any, Dict, List, Optional

from .models import QuizFilters, QuizQuestion, QuizSession, QuizStats
from .quiz_engine import QuizEngine
from .stats import StatsAggregator
from .config_manager import ConfigManager


class QuizControllerError(Exception):
    """Base exception for quiz controller errors."""
    pass


class SessionConflictError(QuizControllerError):
    """Raised when a channel already has an active session."""
    pass


class QuizController:
    """
    Orchestrates quiz sessions across Discord channels.

    Each channel has at most one session at a time. Scores stay inside the
    session until its last question is answered; then the result is handed
    to the StatsAggregator and the session is removed.
    """

    def __init__(
        self,
        quiz_engine: QuizEngine,
        stats_aggregator: StatsAggregator,
        config_manager: Optional[ConfigManager] = None,
    ):
        """
        Initialize the quiz controller.

        Args:
            quiz_engine: Builds question lists and scores answers
            stats_aggregator: Persists lifetime stats of completed sessions
            config_manager: Source of the default question count
        """
        self.logger = logging.getLogger(__name__)
        self.quiz_engine = quiz_engine
        self.stats_aggregator = stats_aggregator
        self.config_manager = config_manager or ConfigManager()

        # Active sessions mapped by channel ID
        self._active_sessions: Dict[int, QuizSession] = {}

        self.logger.info("QuizController initialized")

    def get_session(self, channel_id: int) -> Optional[QuizSession]:
        return self._active_sessions.get(channel_id)

    def has_active_session(self, channel_id: int) -> bool:
        return channel_id in self._active_sessions

    def create_session(self, channel_id: int, questions: List[QuizQuestion], mode: str) -> QuizSession:
        """
        Register a new session for the channel.

        Raises:
            SessionConflictError: If the channel already has a session
            ValueError: If there are no questions
        """
        if self.has_active_session(channel_id):
            raise SessionConflictError(f"Channel {channel_id} already has an active quiz")

        session = self.quiz_engine.start_session(questions, mode=mode, channel_id=channel_id)
        self._active_sessions[channel_id] = session
        self.logger.info(
            f"Created {mode} quiz session for channel {channel_id}: questions={len(questions)}"
        )
        return session

    def _start(self, channel_id: int, questions: List[QuizQuestion], mode: str) -> Dict[str, Any]:
        try:
            session = self.create_session(channel_id, questions, mode)
        except SessionConflictError as e:
            self.logger.warning(str(e))
            return {
                'success': False,
                'error': str(e),
                'message': "A quiz is already running in this channel. Use /stop to end it first."
            }
        except ValueError as e:
            self.logger.warning(f"Could not start quiz in channel {channel_id}: {e}")
            return {
                'success': False,
                'error': str(e),
                'message': "No questions match those filters."
            }

        return {
            'success': True,
            'message': f"Quiz started with {session.total_questions} questions",
            'session_info': self.get_session_progress(channel_id),
            'question': session.current_question,
        }

    def start_quiz(
        self,
        channel_id: int,
        filters: Optional[QuizFilters] = None,
        count: Optional[int] = None,
    ) -> Dict[str, Any]:
        """
        Start a custom quiz with randomly ordered questions.

        Args:
            channel_id: Discord channel identifier
            filters: Optional difficulty, category and type filters
            count: Number of questions, defaults to the configured count

        Returns:
            Dictionary with success status, message and the first question
        """
        if count is None:
            count = self.config_manager.get_quiz_question_count()
        questions = self.quiz_engine.get_random_questions(count, filters)
        return self._start(channel_id, questions, "custom")

    def start_daily(self, channel_id: int) -> Dict[str, Any]:
        """Start today's daily challenge."""
        return self._start(channel_id, self.quiz_engine.get_daily_questions(), "daily")

    def answer(self, channel_id: int, option_number: int) -> Dict[str, Any]:
        """
        Answer the current question of the channel's session.

        Args:
            channel_id: Discord channel identifier
            option_number: Chosen option, 1-based as shown to users

        Returns:
            Dictionary with the answer outcome, the next question, and the
            updated lifetime stats once the quiz is complete
        """
        session = self.get_session(channel_id)
        if session is None:
            return {
                'success': False,
                'error': f"No active quiz in channel {channel_id}",
                'message': "There is no quiz running here. Use /quiz or /daily to start one."
            }

        try:
            outcome = self.quiz_engine.record_answer(session, option_number - 1)
        except ValueError as e:
            return {'success': False, 'error': str(e), 'message': str(e)}

        result = {'success': True, **outcome}

        if session.is_complete:
            del self._active_sessions[channel_id]
            result['stats'] = self.stats_aggregator.record_session(session)
            result['total_questions'] = session.total_questions
            result['mode'] = session.mode
            self.logger.info(
                f"Quiz completed in channel {channel_id}: "
                f"{session.score}/{session.total_questions}, best streak {session.best_streak}"
            )
        else:
            result['next_question'] = session.current_question
            result['progress'] = self.get_session_progress(channel_id)

        return result

    def stop_quiz(self, channel_id: int) -> Dict[str, Any]:
        """Abandon the channel's session without recording stats."""
        session = self._active_sessions.pop(channel_id, None)
        if session is None:
            return {
                'success': False,
                'error': f"No active quiz in channel {channel_id}",
                'message': "There is no quiz running here."
            }

        self.logger.info(f"Stopped quiz in channel {channel_id} at question {session.current_index + 1}")
        return {
            'success': True,
            'message': "Quiz stopped. Progress was not saved.",
            'score': session.score,
            'answered': session.current_index,
            'total_questions': session.total_questions,
        }

    def get_session_progress(self, channel_id: int) -> Optional[Dict[str, Any]]:
        """
        Get progress information for the channel's session.

        Returns:
            Dictionary with progress details, or None if no session
        """
        session = self.get_session(channel_id)
        if session is None:
            return None

        return {
            'mode': session.mode,
            'current_question': session.current_index + 1,
            'total_questions': session.total_questions,
            'score': session.score,
            'current_streak': session.current_streak,
            'best_streak': session.best_streak,
            'start_time': session.start_time,
        }

    def get_session_status_summary(self, channel_id: int) -> str:
        progress = self.get_session_progress(channel_id)
        if progress is None:
            return "No active quiz"

        mode = "Daily challenge" if progress['mode'] == "daily" else "Custom quiz"
        return (
            f"{mode} | Question {progress['current_question']}/{progress['total_questions']} | "
            f"Score: {progress['score']} | Streak: {progress['current_streak']}"
        )

    def get_all_active_sessions(self) -> Dict[int, Dict[str, Any]]:
        return {
            channel_id: self.get_session_progress(channel_id)
            for channel_id in self._active_sessions
        }

    def get_lifetime_stats(self) -> QuizStats:
        return self.stats_aggregator.load_stats()
