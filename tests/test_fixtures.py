"""
Test fixtures and sample data for Animal Atlas tests.
"""
import json
from pathlib import Path
from typing import Dict, List, Optional
from unittest.mock import Mock, AsyncMock
from datetime import datetime, timezone
import discord

from animal_atlas.models import QuizQuestion, SeasonalEntry
from animal_atlas.storage import MemoryStore, StoreReadError, StoreWriteError


class TestFixtures:
    """Centralized test fixtures for all test modules."""

    @staticmethod
    def fixed_clock(moment: datetime):
        """Clock returning the same instant on every call."""
        return lambda: moment

    @staticmethod
    def create_sample_questions() -> List[QuizQuestion]:
        """Create sample questions for testing."""
        return [
            QuizQuestion(1, "What is the largest land mammal?",
                         ("Elephant", "Rhinoceros", "Hippo", "Giraffe"), 0,
                         "The African elephant is the largest land mammal.", "easy", "mammals"),
            QuizQuestion(2, "Which bird can mimic human speech?",
                         ("Eagle", "Parrot", "Owl", "Penguin"), 1,
                         "Parrots mimic speech.", "easy", "birds"),
            QuizQuestion(3, "How many hearts does an octopus have?",
                         ("One", "Two", "Three", "Four"), 2,
                         "Octopuses have three hearts.", "medium", "marine"),
            QuizQuestion(4, "Which animal never stops growing?",
                         ("Crocodile", "Cat", "Horse", "Owl"), 0,
                         "Crocodiles grow throughout their lives.", "hard", "all"),
            QuizQuestion(5, "Which animal is shown?",
                         ("Lion", "Tiger", "Leopard", "Jaguar"), 1,
                         "Tigers are striped.", "easy", "mammals",
                         type="image", image_query="tiger"),
            QuizQuestion(6, "Which animal makes this sound?",
                         ("Dog", "Wolf", "Fox", "Coyote"), 1,
                         "Wolves howl to communicate.", "medium", "mammals",
                         type="sound", sound_animal="wolf"),
        ]

    @staticmethod
    def create_numbered_questions(count: int) -> List[QuizQuestion]:
        """Questions with ids 1..count in catalog order."""
        return [
            QuizQuestion(i, f"Question {i}?", ("A", "B", "C", "D"), i % 4,
                         f"Explanation {i}", "easy", "all")
            for i in range(1, count + 1)
        ]

    @staticmethod
    def create_seasonal_catalog() -> List[SeasonalEntry]:
        """Create a small seasonal roster covering all four seasons."""
        return [
            SeasonalEntry("Robin", "Turdus migratorius", "spring", frozenset({3, 4, 5}), "Nesting"),
            SeasonalEntry("Bee", "Apis mellifera", "spring", frozenset({3, 4, 5}), "Pollinating"),
            SeasonalEntry("Dolphin", "Delphinus delphis", "summer", frozenset({6, 7, 8}), "Coastal"),
            SeasonalEntry("Owl", "Strix aluco", "fall", frozenset({9, 10, 11}), "Calling"),
            SeasonalEntry("Deer", "Cervus elaphus", "fall", frozenset({9, 10, 11}), "Rutting"),
            SeasonalEntry("Penguin", "Aptenodytes forsteri", "winter", frozenset({12, 1, 2}), "Breeding"),
            SeasonalEntry("Seal", "Phoca vitulina", "winter", frozenset({12, 1, 2}), "Pupping"),
            SeasonalEntry("Polar Bear", "Ursus maritimus", "winter", frozenset({12, 1, 2}), "Hunting"),
        ]

    @staticmethod
    def create_valid_question_json(question_id: int = 1) -> Dict:
        """Create a valid question entry in catalog form."""
        return {
            "id": question_id,
            "question": "What is the fastest land animal?",
            "options": ["Cheetah", "Lion", "Horse", "Gazelle"],
            "correct_answer": 0,
            "explanation": "Cheetahs reach 110 km/h.",
            "difficulty": "easy",
            "category": "mammals",
            "type": "text"
        }

    @staticmethod
    def create_invalid_question_structures() -> List:
        """Create various invalid question entries for testing."""
        valid = TestFixtures.create_valid_question_json()
        return [
            # Not an object
            "not a question",
            # Missing id
            {k: v for k, v in valid.items() if k != "id"},
            # Non-integer id
            {**valid, "id": "one"},
            # Single option
            {**valid, "options": ["Cheetah"]},
            # Options not strings
            {**valid, "options": ["Cheetah", 2]},
            # correct_answer out of range
            {**valid, "correct_answer": 4},
            # Unknown difficulty
            {**valid, "difficulty": "extreme"},
            # Unknown category
            {**valid, "category": "insects"},
            # Unknown type
            {**valid, "type": "video"},
            # Media reference of wrong type
            {**valid, "type": "image", "image_query": 5},
        ]

    @staticmethod
    def create_catalog_files(temp_dir: str, questions: Optional[List] = None,
                             seasonal: Optional[List] = None) -> Dict[str, Path]:
        """Write catalog files into ``temp_dir``."""
        files = {}
        if questions is not None:
            files["questions"] = Path(temp_dir) / "quiz_questions.json"
            with open(files["questions"], 'w', encoding='utf-8') as f:
                json.dump({"questions": questions}, f)
        if seasonal is not None:
            files["seasonal"] = Path(temp_dir) / "seasonal_animals.json"
            with open(files["seasonal"], 'w', encoding='utf-8') as f:
                json.dump({"seasonal_animals": seasonal}, f)
        return files


# Shared instants used across tests
OCT_18_2026 = datetime(2026, 10, 18, 9, 30, tzinfo=timezone.utc)
JAN_15_2026 = datetime(2026, 1, 15, 12, 0, tzinfo=timezone.utc)


class MutableClock:
    """Clock whose current time tests can move forward."""

    def __init__(self, moment: datetime):
        self.moment = moment

    def __call__(self) -> datetime:
        return self.moment

    def advance(self, delta):
        self.moment = self.moment + delta


class FailingStore(MemoryStore):
    """Memory store whose reads and/or writes can be made to fail."""

    def __init__(self, initial=None, fail_reads: bool = False, fail_writes: bool = False):
        super().__init__(initial)
        self.fail_reads = fail_reads
        self.fail_writes = fail_writes
        self.write_attempts = 0

    def get(self, key):
        if self.fail_reads:
            raise StoreReadError(f"Simulated read failure for '{key}'")
        return super().get(key)

    def set(self, key, value):
        self.write_attempts += 1
        if self.fail_writes:
            raise StoreWriteError(f"Simulated write failure for '{key}'")
        super().set(key, value)

    def delete(self, key):
        if self.fail_writes:
            raise StoreWriteError(f"Simulated delete failure for '{key}'")
        super().delete(key)


class MockDiscordObjects:
    """Mock Discord objects for testing bot functionality."""

    @staticmethod
    def create_mock_interaction(channel_id: int = 12345, user_id: int = 67890) -> Mock:
        """Create mock Discord interaction."""
        interaction = Mock(spec=discord.Interaction)
        interaction.channel_id = channel_id
        interaction.user = Mock()
        interaction.user.id = user_id
        interaction.response = Mock()
        interaction.response.is_done.return_value = False
        interaction.response.send_message = AsyncMock()
        interaction.followup = Mock()
        interaction.followup.send = AsyncMock()
        return interaction


class ErrorScenarios:
    """Common error scenarios for testing."""

    @staticmethod
    def get_corrupt_view_payloads() -> List[str]:
        """Stored view histories that cannot be decoded."""
        return [
            "{ not json",
            json.dumps({"name": "Lion"}),
            json.dumps([{"name": "Lion", "timestamp": "yesterday", "count": 1}]),
            json.dumps([{"name": "Lion", "timestamp": 1, "count": 0}]),
            json.dumps([{"timestamp": 1, "count": 1}]),
        ]

    @staticmethod
    def get_corrupt_stats_payloads() -> List[str]:
        """Stored quiz stats that cannot be decoded."""
        return [
            "not json at all",
            json.dumps([1, 2, 3]),
            json.dumps({"totalQuizzes": -1}),
            json.dumps({"totalCorrect": "many"}),
            json.dumps({"lastPlayed": 5}),
        ]

    @staticmethod
    def get_discord_api_errors():
        """Get Discord API error scenarios."""
        return [
            discord.HTTPException(Mock(status=500, reason="error"), "HTTP error"),
            discord.Forbidden(Mock(status=403, reason="forbidden"), "Forbidden"),
        ]
