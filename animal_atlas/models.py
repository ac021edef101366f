"""
Core data models for the Animal Atlas discovery engine.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple
from datetime import datetime


SEASONS = ("spring", "summer", "fall", "winter")
DIFFICULTIES = ("easy", "medium", "hard")
CATEGORIES = ("all", "mammals", "birds", "reptiles", "fish", "marine")
QUESTION_TYPES = ("text", "image", "sound")
SESSION_MODES = ("custom", "daily")


@dataclass
class StoreResult:
    """Outcome of a store read or write: either a value or a failure reason."""
    success: bool
    value: Any = None
    error: Optional[str] = None

    @classmethod
    def ok(cls, value: Any = None) -> "StoreResult":
        return cls(success=True, value=value)

    @classmethod
    def fail(cls, error: str) -> "StoreResult":
        return cls(success=False, error=error)

    def value_or(self, default: Any) -> Any:
        """Collapse the result to its value, or to ``default`` on failure."""
        return self.value if self.success else default


@dataclass
class ViewRecord:
    """View counter for a single animal."""
    name: str
    timestamp: int
    count: int = 1

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "timestamp": self.timestamp, "count": self.count}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ViewRecord":
        """
        Build a record from its persisted form.

        Raises:
            ValueError: If a field is missing or has the wrong type
        """
        if not isinstance(data, dict):
            raise ValueError("View record must be an object")

        name = data.get("name")
        timestamp = data.get("timestamp")
        count = data.get("count")

        if not isinstance(name, str):
            raise ValueError("View record 'name' must be a string")
        # bool is an int subclass; reject it explicitly
        if isinstance(timestamp, bool) or not isinstance(timestamp, (int, float)):
            raise ValueError(f"View record for {name!r} has an invalid timestamp")
        if isinstance(count, bool) or not isinstance(count, int) or count < 1:
            raise ValueError(f"View record for {name!r} has an invalid count")

        return cls(name=name, timestamp=int(timestamp), count=count)


@dataclass(frozen=True)
class SeasonalEntry:
    """An animal highlighted during specific months of the year."""
    name: str
    scientific_name: str
    season: str
    months: frozenset
    reason: str


@dataclass(frozen=True)
class QuizQuestion:
    """Represents a single multiple-choice quiz question."""
    id: int
    question: str
    options: Tuple[str, ...]
    correct_answer: int
    explanation: str
    difficulty: str
    category: str
    type: str = "text"
    image_query: Optional[str] = None
    sound_animal: Optional[str] = None

    @property
    def correct_option(self) -> str:
        return self.options[self.correct_answer]

    @property
    def media_reference(self) -> Optional[str]:
        """Identifier of the media an image or sound question needs, if any."""
        if self.type == "image":
            return self.image_query
        if self.type == "sound":
            return self.sound_animal
        return None


@dataclass(frozen=True)
class QuizFilters:
    """Optional filters for building a custom quiz session."""
    difficulty: Optional[str] = None
    category: Optional[str] = None
    type: Optional[str] = None

    def __post_init__(self):
        if self.difficulty is not None and self.difficulty not in DIFFICULTIES:
            raise ValueError(f"Unknown difficulty: {self.difficulty}")
        if self.category is not None and self.category not in CATEGORIES:
            raise ValueError(f"Unknown category: {self.category}")
        if self.type is not None and self.type not in QUESTION_TYPES:
            raise ValueError(f"Unknown question type: {self.type}")

    def describe(self) -> str:
        parts = [
            f"{label}: {value}"
            for label, value in (
                ("difficulty", self.difficulty),
                ("category", self.category),
                ("type", self.type),
            )
            if value is not None
        ]
        return ", ".join(parts) if parts else "no filters"


@dataclass
class QuizStats:
    """Lifetime quiz statistics, persisted once per installation."""
    total_quizzes: int = 0
    total_correct: int = 0
    total_questions: int = 0
    best_streak: int = 0
    current_streak: int = 0
    last_played: str = ""

    @property
    def accuracy(self) -> int:
        """Percentage of questions answered correctly, rounded."""
        if self.total_questions == 0:
            return 0
        return round(self.total_correct / self.total_questions * 100)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totalQuizzes": self.total_quizzes,
            "totalCorrect": self.total_correct,
            "totalQuestions": self.total_questions,
            "bestStreak": self.best_streak,
            "currentStreak": self.current_streak,
            "lastPlayed": self.last_played,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "QuizStats":
        """
        Build stats from their persisted form.

        Raises:
            ValueError: If the value is not an object or a counter is invalid
        """
        if not isinstance(data, dict):
            raise ValueError("Quiz stats must be an object")

        counters = {}
        for attr, key in (
            ("total_quizzes", "totalQuizzes"),
            ("total_correct", "totalCorrect"),
            ("total_questions", "totalQuestions"),
            ("best_streak", "bestStreak"),
            ("current_streak", "currentStreak"),
        ):
            value = data.get(key, 0)
            if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                raise ValueError(f"Quiz stats field '{key}' must be a non-negative integer")
            counters[attr] = value

        last_played = data.get("lastPlayed", "")
        if not isinstance(last_played, str):
            raise ValueError("Quiz stats field 'lastPlayed' must be a string")

        return cls(last_played=last_played, **counters)


@dataclass
class QuizSession:
    """A quiz in progress; scoring stays local until it completes."""
    questions: List[QuizQuestion]
    mode: str = "custom"
    current_index: int = 0
    score: int = 0
    current_streak: int = 0
    best_streak: int = 0
    answers: Dict[int, int] = field(default_factory=dict)
    start_time: datetime = field(default_factory=datetime.now)
    channel_id: Optional[int] = None

    @property
    def current_question(self) -> Optional[QuizQuestion]:
        if self.current_index < len(self.questions):
            return self.questions[self.current_index]
        return None

    @property
    def is_complete(self) -> bool:
        return self.current_index >= len(self.questions)

    @property
    def total_questions(self) -> int:
        return len(self.questions)


@dataclass
class DiscoverySettings:
    """Display limits and quiz defaults."""
    trending_limit: int = 5
    recent_limit: int = 5
    seasonal_limit: int = 3
    suggestion_limit: int = 3
    quiz_question_count: int = 10
