"""
Integration tests for Animal Atlas.
Tests component interactions against a file-backed store, including state
surviving a restart.
"""
import unittest
import tempfile
import shutil
import random
import logging
from datetime import timedelta

from animal_atlas.config_manager import ConfigManager
from animal_atlas.data_manager import DataManager
from animal_atlas.discovery import DiscoveryService
from animal_atlas.quiz_controller import QuizController
from animal_atlas.quiz_engine import QuizEngine
from animal_atlas.seasonal import SeasonalSelector
from animal_atlas.stats import StatsAggregator
from animal_atlas.storage import FileStore
from animal_atlas.view_tracker import ViewTracker
from tests.test_fixtures import MutableClock, OCT_18_2026


class TestFileBackedFlow(unittest.TestCase):
    """Test complete discovery and quiz flows from start to finish."""

    def setUp(self):
        """Set up integration test environment."""
        logging.disable(logging.CRITICAL)
        self.temp_dir = tempfile.mkdtemp()
        self.clock = MutableClock(OCT_18_2026)

        self.data_manager = DataManager()
        self.data_manager.load_catalogs()
        self._start_components()

    def tearDown(self):
        """Clean up test environment."""
        shutil.rmtree(self.temp_dir, ignore_errors=True)
        logging.disable(logging.NOTSET)

    def _start_components(self):
        """Build a fresh set of components, as a process restart would."""
        self.store = FileStore(self.temp_dir)
        self.tracker = ViewTracker(self.store, clock=self.clock)
        self.selector = SeasonalSelector(self.data_manager.seasonal_animals, clock=self.clock,
                                         rng=random.Random(1))
        self.discovery = DiscoveryService(self.tracker, self.selector, clock=self.clock,
                                          rng=random.Random(2))
        self.controller = QuizController(
            QuizEngine(self.data_manager.questions, rng=random.Random(3), clock=self.clock),
            StatsAggregator(self.store, clock=self.clock),
            ConfigManager(),
        )

    def _play(self, channel_id, correct_pattern):
        session = self.controller.get_session(channel_id)
        result = None
        for is_correct in correct_pattern:
            question = session.current_question
            option = question.correct_answer if is_correct else (question.correct_answer + 1) % len(question.options)
            result = self.controller.answer(channel_id, option + 1)
        return result

    def test_views_survive_restart(self):
        for name in ("Owl", "Fox", "Owl"):
            self.tracker.track_view(name)
            self.clock.advance(timedelta(minutes=1))

        self._start_components()

        self.assertEqual(self.tracker.get_trending_animals(), ["Owl", "Fox"])
        self.assertEqual(self.tracker.get_recently_viewed(), ["Owl", "Fox"])

    def test_trending_decays_after_window(self):
        self.tracker.track_view("Owl")
        self.clock.advance(timedelta(days=8))

        self.assertEqual(self.tracker.get_trending_animals(2), ["Lion", "Tiger"])
        self.assertEqual(self.tracker.get_recently_viewed(), ["Owl"])

    def test_daily_challenge_and_stats_across_restart(self):
        self.assertTrue(self.controller.start_daily(1)['success'])
        ids = [q.id for q in self.controller.get_session(1).questions]
        self.assertEqual(ids, [43, 1, 6, 51, 16, 8, 9, 10, 28, 48])

        # 4 correct, 1 wrong, 2 correct, 3 wrong
        pattern = [True] * 4 + [False] + [True] * 2 + [False] * 3
        result = self._play(1, pattern)

        self.assertTrue(result['completed'])
        self.assertEqual(result['stats'].total_correct, 6)
        self.assertEqual(result['stats'].best_streak, 4)

        self._start_components()
        self.controller.start_quiz(1, count=5)
        result = self._play(1, [True, False, True, True, False])

        stats = result['stats']
        self.assertEqual(stats.total_quizzes, 2)
        self.assertEqual(stats.total_correct, 9)
        self.assertEqual(stats.total_questions, 15)
        self.assertEqual(stats.best_streak, 4)
        self.assertEqual(stats.current_streak, 2)
        self.assertEqual(stats.accuracy, 60)

    def test_featured_reflects_activity(self):
        self.tracker.track_view("Deer")

        featured = self.discovery.get_featured()

        self.assertEqual(featured['season'], "fall")
        self.assertEqual(featured['trending'], ["Deer"])
        self.assertTrue(all(10 in e.months for e in featured['seasonal']))
        self.assertNotIn("Deer", featured['suggestions'])

    def test_clear_history_survives_restart(self):
        self.tracker.track_view("Owl")
        self.tracker.clear_view_history()

        self._start_components()
        self.assertEqual(self.tracker.get_view_stats()['total_views'], 0)


if __name__ == '__main__':
    unittest.main()
