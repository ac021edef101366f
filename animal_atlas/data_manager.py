"""
Data manager for the static quiz and seasonal catalogs.
Loads the bundled JSON files and validates their structure.
"""
import json
import os
import logging
from typing import Any, Dict, List, Optional
from pathlib import Path

from .models import (
    CATEGORIES,
    DIFFICULTIES,
    QUESTION_TYPES,
    SEASONS,
    QuizQuestion,
    SeasonalEntry,
)

DEFAULT_DATA_DIRECTORY = Path(__file__).resolve().parent / "data"
QUESTIONS_FILE = "quiz_questions.json"
SEASONAL_FILE = "seasonal_animals.json"


class DataManager:
    """Manages loading and validation of the catalog JSON files."""

    MAX_FILE_SIZE = 10 * 1024 * 1024  # 10MB

    def __init__(self, data_directory: Optional[str] = None):
        """
        Initialize DataManager with the catalog directory.

        Args:
            data_directory: Directory holding the catalog files, defaults to
                the data bundled with the package
        """
        self.data_directory = Path(data_directory) if data_directory else DEFAULT_DATA_DIRECTORY
        self.questions: List[QuizQuestion] = []
        self.seasonal_animals: List[SeasonalEntry] = []
        self.logger = logging.getLogger(__name__)
        self.load_errors: List[str] = []
        self.fallback_catalog_created = False

    def load_catalogs(self) -> Dict[str, int]:
        """
        Load both catalogs, falling back to a minimal built-in catalog for
        any file that cannot be loaded.

        Returns:
            Dictionary with the number of questions and seasonal entries loaded
        """
        self.load_errors.clear()
        self.fallback_catalog_created = False

        self.questions = self.load_questions()
        self.seasonal_animals = self.load_seasonal_animals()

        if self.load_errors:
            self.logger.warning(f"Encountered {len(self.load_errors)} catalog loading errors")

        return {
            'questions': len(self.questions),
            'seasonal_animals': len(self.seasonal_animals),
        }

    def load_questions(self) -> List[QuizQuestion]:
        """
        Load the quiz question catalog in file order.

        Invalid entries are skipped and reported in the load errors.
        """
        load_result = self._load_file_safely(self.data_directory / QUESTIONS_FILE, "questions")
        if not load_result['success']:
            self.load_errors.append(f"{QUESTIONS_FILE}: {load_result['error']}")
            return self._create_fallback_questions()

        questions = []
        seen_ids = set()
        for i, question_data in enumerate(load_result['data']):
            if not self.validate_question_structure(question_data, i):
                self.load_errors.append(f"{QUESTIONS_FILE}: question {i} is invalid")
                continue
            if question_data["id"] in seen_ids:
                self.logger.error(f"Duplicate question id {question_data['id']}")
                self.load_errors.append(f"{QUESTIONS_FILE}: duplicate id {question_data['id']}")
                continue
            seen_ids.add(question_data["id"])
            questions.append(self._parse_question(question_data))

        if not questions:
            self.load_errors.append(f"{QUESTIONS_FILE}: no valid questions found")
            return self._create_fallback_questions()

        self.logger.info(f"Loaded {len(questions)} quiz questions")
        return questions

    def load_seasonal_animals(self) -> List[SeasonalEntry]:
        """Load the seasonal spotlight roster."""
        load_result = self._load_file_safely(self.data_directory / SEASONAL_FILE, "seasonal_animals")
        if not load_result['success']:
            self.load_errors.append(f"{SEASONAL_FILE}: {load_result['error']}")
            return []

        entries = []
        for i, entry_data in enumerate(load_result['data']):
            if not self.validate_seasonal_structure(entry_data, i):
                self.load_errors.append(f"{SEASONAL_FILE}: entry {i} is invalid")
                continue
            entries.append(SeasonalEntry(
                name=entry_data["name"],
                scientific_name=entry_data["scientific_name"],
                season=entry_data["season"],
                months=frozenset(entry_data["months"]),
                reason=entry_data["reason"],
            ))

        self.logger.info(f"Loaded {len(entries)} seasonal animals")
        return entries

    def validate_question_structure(self, data: Any, index: int = 0) -> bool:
        """
        Validate a single question entry.

        Expected structure:
        {
            "id": int,
            "question": str,
            "options": [str, str, ...],  # at least two
            "correct_answer": int,        # index into options
            "explanation": str,
            "difficulty": "easy" | "medium" | "hard",
            "category": "all" | "mammals" | "birds" | "reptiles" | "fish" | "marine",
            "type": "text" | "image" | "sound",   # optional, defaults to text
            "image_query": str,                   # optional
            "sound_animal": str                   # optional
        }

        Returns:
            True if structure is valid, False otherwise
        """
        if not isinstance(data, dict):
            self.logger.error(f"Question {index} must be an object")
            return False

        for required in ("id", "question", "options", "correct_answer",
                         "explanation", "difficulty", "category"):
            if required not in data:
                self.logger.error(f"Question {index} missing '{required}' field")
                return False

        if isinstance(data["id"], bool) or not isinstance(data["id"], int):
            self.logger.error(f"Question {index} 'id' field must be an integer")
            return False

        for text_field in ("question", "explanation"):
            if not isinstance(data[text_field], str):
                self.logger.error(f"Question {index} '{text_field}' field must be a string")
                return False

        options = data["options"]
        if not isinstance(options, list) or len(options) < 2:
            self.logger.error(f"Question {index} must have at least two options")
            return False
        if not all(isinstance(option, str) for option in options):
            self.logger.error(f"Question {index} options must be strings")
            return False

        correct = data["correct_answer"]
        if isinstance(correct, bool) or not isinstance(correct, int) or not 0 <= correct < len(options):
            self.logger.error(f"Question {index} 'correct_answer' must index into options")
            return False

        if data["difficulty"] not in DIFFICULTIES:
            self.logger.error(f"Question {index} has unknown difficulty {data['difficulty']!r}")
            return False
        if data["category"] not in CATEGORIES:
            self.logger.error(f"Question {index} has unknown category {data['category']!r}")
            return False
        if data.get("type", "text") not in QUESTION_TYPES:
            self.logger.error(f"Question {index} has unknown type {data.get('type')!r}")
            return False

        for media_field in ("image_query", "sound_animal"):
            if media_field in data and not isinstance(data[media_field], str):
                self.logger.error(f"Question {index} '{media_field}' field must be a string")
                return False

        return True

    def validate_seasonal_structure(self, data: Any, index: int = 0) -> bool:
        """Validate a single seasonal roster entry."""
        if not isinstance(data, dict):
            self.logger.error(f"Seasonal entry {index} must be an object")
            return False

        for text_field in ("name", "scientific_name", "season", "reason"):
            if not isinstance(data.get(text_field), str):
                self.logger.error(f"Seasonal entry {index} '{text_field}' field must be a string")
                return False

        if data["season"] not in SEASONS:
            self.logger.error(f"Seasonal entry {index} has unknown season {data['season']!r}")
            return False

        months = data.get("months")
        if not isinstance(months, list) or not months:
            self.logger.error(f"Seasonal entry {index} 'months' must be a non-empty array")
            return False
        if not all(isinstance(m, int) and not isinstance(m, bool) and 1 <= m <= 12 for m in months):
            self.logger.error(f"Seasonal entry {index} months must be integers from 1 to 12")
            return False

        return True

    def _parse_question(self, question_data: dict) -> QuizQuestion:
        return QuizQuestion(
            id=question_data["id"],
            question=question_data["question"],
            options=tuple(question_data["options"]),
            correct_answer=question_data["correct_answer"],
            explanation=question_data["explanation"],
            difficulty=question_data["difficulty"],
            category=question_data["category"],
            type=question_data.get("type", "text"),
            image_query=question_data.get("image_query"),
            sound_animal=question_data.get("sound_animal"),
        )

    def _load_file_safely(self, json_file: Path, root_key: str) -> Dict[str, Any]:
        """
        Load a catalog file with comprehensive error handling.

        Args:
            json_file: Path to the JSON file to load
            root_key: Top-level key holding the entry array

        Returns:
            Dictionary with success status, the entry list, or an error message
        """
        try:
            if not json_file.exists():
                return {'success': False, 'error': "File not found"}

            if not os.access(json_file, os.R_OK):
                return {'success': False, 'error': "Permission denied: Cannot read file"}

            file_size = json_file.stat().st_size
            if file_size > self.MAX_FILE_SIZE:
                return {
                    'success': False,
                    'error': f"File too large ({file_size / 1024 / 1024:.1f}MB). "
                             f"Maximum size is {self.MAX_FILE_SIZE / 1024 / 1024}MB"
                }

            with open(json_file, 'r', encoding='utf-8') as f:
                data = json.load(f)

            if not isinstance(data, dict) or not isinstance(data.get(root_key), list):
                self.logger.error(f"Catalog {json_file} must contain a '{root_key}' array")
                return {'success': False, 'error': f"Missing '{root_key}' array"}

            return {'success': True, 'data': data[root_key]}

        except json.JSONDecodeError as e:
            self.logger.error(f"Invalid JSON in {json_file}: {e}")
            return {'success': False, 'error': f"Invalid JSON: {e}"}
        except PermissionError:
            return {'success': False, 'error': "Permission denied"}
        except OSError as e:
            return {'success': False, 'error': f"System error: {e}"}

    def _create_fallback_questions(self) -> List[QuizQuestion]:
        """Minimal in-memory catalog used when the question file cannot be loaded."""
        self.fallback_catalog_created = True
        self.logger.warning("Created fallback question catalog due to loading failures")
        return [
            QuizQuestion(
                id=1,
                question="What is the largest land mammal?",
                options=("Elephant", "Rhinoceros", "Hippopotamus", "Giraffe"),
                correct_answer=0,
                explanation="The African elephant is the largest land mammal.",
                difficulty="easy",
                category="mammals",
            ),
            QuizQuestion(
                id=2,
                question="Which bird is known for its ability to mimic human speech?",
                options=("Eagle", "Parrot", "Owl", "Penguin"),
                correct_answer=1,
                explanation="Parrots can mimic human speech thanks to their specialized vocal structure.",
                difficulty="easy",
                category="birds",
            ),
        ]

    def get_load_errors(self) -> List[str]:
        return self.load_errors.copy()

    def has_load_errors(self) -> bool:
        return len(self.load_errors) > 0

    def is_fallback_catalog_active(self) -> bool:
        return self.fallback_catalog_created

    def get_loading_summary(self) -> Dict[str, Any]:
        """
        Get a summary of the last loading operation.

        Returns:
            Dictionary with loading statistics and status
        """
        return {
            'total_questions': len(self.questions),
            'total_seasonal_animals': len(self.seasonal_animals),
            'has_errors': self.has_load_errors(),
            'error_count': len(self.load_errors),
            'errors': self.get_load_errors(),
            'fallback_active': self.is_fallback_catalog_active(),
            'data_directory': str(self.data_directory),
        }
