"""
Configuration manager for Animal Atlas settings and limits.
"""
import logging
from typing import Any, Dict, List, Optional
from pathlib import Path
import os

from .models import DiscoverySettings


class ConfigManager:
    """Manages display limits, quiz defaults and the storage location."""

    # Default configuration values
    DEFAULT_TRENDING_LIMIT = 5
    DEFAULT_RECENT_LIMIT = 5
    DEFAULT_SEASONAL_LIMIT = 3
    DEFAULT_SUGGESTION_LIMIT = 3
    DEFAULT_QUIZ_QUESTION_COUNT = 10
    DEFAULT_STORAGE_DIRECTORY = "./data/"

    # Validation limits
    MIN_LIST_LIMIT = 1
    MAX_LIST_LIMIT = 25
    MIN_QUESTION_COUNT = 1
    MAX_QUESTION_COUNT = 50

    STORAGE_DIRECTORY_ENV = "ANIMAL_ATLAS_STORAGE_DIR"

    _LIMIT_LABELS = {
        'trending_limit': "Trending list size",
        'recent_limit': "Recently viewed list size",
        'seasonal_limit': "Seasonal spotlight size",
        'suggestion_limit': "Suggestion list size",
    }

    def __init__(self):
        """Initialize ConfigManager with default settings."""
        self.logger = logging.getLogger(__name__)
        self._settings = DiscoverySettings()
        self._storage_directory = self.DEFAULT_STORAGE_DIRECTORY

    def get_settings(self) -> DiscoverySettings:
        """
        Get a copy of the current settings.

        Returns:
            DiscoverySettings object with current configuration
        """
        return DiscoverySettings(
            trending_limit=self._settings.trending_limit,
            recent_limit=self._settings.recent_limit,
            seasonal_limit=self._settings.seasonal_limit,
            suggestion_limit=self._settings.suggestion_limit,
            quiz_question_count=self._settings.quiz_question_count,
        )

    def apply_config(self, config: Dict[str, Any]) -> List[Dict[str, Any]]:
        """
        Apply the ``discovery``, ``quiz`` and ``storage`` sections of a
        config.json dictionary. Invalid values are logged and skipped.

        Returns:
            List of the failed setter results
        """
        failures = []
        discovery = config.get('discovery', {})
        for name in self._LIMIT_LABELS:
            if name in discovery:
                failures.append(self.set_list_limit(name, discovery[name]))

        quiz = config.get('quiz', {})
        if 'question_count' in quiz:
            failures.append(self.set_quiz_question_count(quiz['question_count']))

        storage = config.get('storage', {})
        directory = os.getenv(self.STORAGE_DIRECTORY_ENV) or storage.get('directory')
        if directory is not None:
            failures.append(self.set_storage_directory(directory))

        failures = [result for result in failures if not result['success']]
        for result in failures:
            self.logger.warning(f"Ignoring invalid configuration value: {result['error']}")
        return failures

    def _validate_int(self, value: Any, label: str, minimum: int, maximum: int) -> Optional[Dict[str, Any]]:
        """Return a failure result for ``value``, or None when it is valid."""
        # bool is an int subclass; reject it explicitly
        if isinstance(value, bool) or not isinstance(value, int):
            error_msg = f"{label} must be an integer, got {type(value).__name__}"
            self.logger.error(error_msg)
            return {
                'success': False,
                'error': error_msg,
                'user_message': f"❌ Invalid input: Expected a number, got {type(value).__name__}"
            }

        if value < minimum:
            error_msg = f"{label} must be at least {minimum}"
            self.logger.error(error_msg)
            return {
                'success': False,
                'error': error_msg,
                'user_message': f"❌ Too small: Minimum is {minimum}"
            }

        if value > maximum:
            error_msg = f"{label} cannot exceed {maximum}"
            self.logger.error(error_msg)
            return {
                'success': False,
                'error': error_msg,
                'user_message': f"❌ Too large: Maximum is {maximum}"
            }

        return None

    def set_list_limit(self, name: str, value: int) -> Dict[str, Any]:
        """
        Set one of the display list sizes.

        Args:
            name: trending_limit, recent_limit, seasonal_limit or suggestion_limit
            value: Number of entries to show

        Returns:
            Dictionary with success status, error message, and user-friendly message
        """
        label = self._LIMIT_LABELS.get(name)
        if label is None:
            error_msg = f"Unknown list setting: {name}"
            self.logger.error(error_msg)
            return {
                'success': False,
                'error': error_msg,
                'user_message': f"❌ Unknown setting: {name}"
            }

        failure = self._validate_int(value, label, self.MIN_LIST_LIMIT, self.MAX_LIST_LIMIT)
        if failure:
            return failure

        setattr(self._settings, name, value)
        self.logger.info(f"{label} set to {value}")
        return {
            'success': True,
            'message': f"{label} set to {value}",
            'user_message': f"✅ {label} set to {value}"
        }

    def set_quiz_question_count(self, count: int) -> Dict[str, Any]:
        """
        Set the number of questions in a custom quiz.

        Returns:
            Dictionary with success status, error message, and user-friendly message
        """
        failure = self._validate_int(
            count, "Question count", self.MIN_QUESTION_COUNT, self.MAX_QUESTION_COUNT
        )
        if failure:
            return failure

        self._settings.quiz_question_count = count
        self.logger.info(f"Question count set to {count}")
        return {
            'success': True,
            'message': f"Question count set to {count}",
            'user_message': f"✅ Question count set to {count}"
        }

    def get_quiz_question_count(self) -> int:
        return self._settings.quiz_question_count

    def set_storage_directory(self, directory: str) -> Dict[str, Any]:
        """
        Set the directory the persistent store writes to.

        Returns:
            Dictionary with success status, error message, and user-friendly message
        """
        if not isinstance(directory, str):
            error_msg = f"Storage directory must be a string, got {type(directory).__name__}"
            self.logger.error(error_msg)
            return {
                'success': False,
                'error': error_msg,
                'user_message': f"❌ Invalid input: Expected a path string, got {type(directory).__name__}"
            }

        if not directory.strip():
            error_msg = "Storage directory cannot be empty"
            self.logger.error(error_msg)
            return {
                'success': False,
                'error': error_msg,
                'user_message': "❌ Directory path cannot be empty"
            }

        try:
            normalized_path = str(Path(directory).resolve())
        except (OSError, ValueError) as e:
            error_msg = f"Invalid directory path format: {e}"
            self.logger.error(error_msg)
            return {
                'success': False,
                'error': error_msg,
                'user_message': f"❌ Invalid path format: {directory}"
            }

        system_dirs = ['/bin', '/usr', '/etc', '/sys', '/proc', 'C:\\Windows', 'C:\\Program Files']
        if any(normalized_path.startswith(sys_dir) for sys_dir in system_dirs):
            error_msg = f"Cannot use system directory: {normalized_path}"
            self.logger.error(error_msg)
            return {
                'success': False,
                'error': error_msg,
                'user_message': f"❌ Cannot use system directory: {directory}"
            }

        self._storage_directory = normalized_path
        self.logger.info(f"Storage directory set to {normalized_path}")
        return {
            'success': True,
            'message': f"Storage directory set to {normalized_path}",
            'user_message': f"✅ Storage directory set to {normalized_path}"
        }

    def get_storage_directory(self) -> str:
        return self._storage_directory

    def reset_to_defaults(self) -> None:
        """Reset all settings to their default values."""
        self._settings = DiscoverySettings(
            trending_limit=self.DEFAULT_TRENDING_LIMIT,
            recent_limit=self.DEFAULT_RECENT_LIMIT,
            seasonal_limit=self.DEFAULT_SEASONAL_LIMIT,
            suggestion_limit=self.DEFAULT_SUGGESTION_LIMIT,
            quiz_question_count=self.DEFAULT_QUIZ_QUESTION_COUNT,
        )
        self._storage_directory = self.DEFAULT_STORAGE_DIRECTORY
        self.logger.info("All settings reset to default values")

    def validate_settings(self) -> Dict[str, Any]:
        """
        Validate current settings.

        Returns:
            Dictionary with validation results and any issues found
        """
        validation_result = {
            "valid": True,
            "issues": []
        }

        for name, label in self._LIMIT_LABELS.items():
            value = getattr(self._settings, name)
            if (isinstance(value, bool) or not isinstance(value, int) or
                    not self.MIN_LIST_LIMIT <= value <= self.MAX_LIST_LIMIT):
                validation_result["valid"] = False
                validation_result["issues"].append(f"Invalid {label.lower()}: {value}")

        count = self._settings.quiz_question_count
        if (isinstance(count, bool) or not isinstance(count, int) or
                not self.MIN_QUESTION_COUNT <= count <= self.MAX_QUESTION_COUNT):
            validation_result["valid"] = False
            validation_result["issues"].append(f"Invalid question count: {count}")

        if not isinstance(self._storage_directory, str) or not self._storage_directory.strip():
            validation_result["valid"] = False
            validation_result["issues"].append(
                f"Invalid storage directory: {self._storage_directory}"
            )

        return validation_result

    def get_settings_summary(self) -> str:
        """
        Get a formatted summary of current settings.

        Returns:
            Human-readable string describing current settings
        """
        return (
            f"Atlas Settings:\n"
            f"• Trending: top {self._settings.trending_limit}\n"
            f"• Recently viewed: {self._settings.recent_limit}\n"
            f"• Seasonal spotlight: {self._settings.seasonal_limit}\n"
            f"• Suggestions: {self._settings.suggestion_limit}\n"
            f"• Quiz questions: {self._settings.quiz_question_count}\n"
            f"• Storage Directory: {self._storage_directory}"
        )
