"""
Discovery feed: combines trending, seasonal and recent views into what a
page load should feature, plus the animal of the hour and suggestions.
"""
import logging
import random
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from .seasonal import SeasonalSelector
from .view_tracker import ViewTracker

logger = logging.getLogger(__name__)

HOURLY_ANIMALS = [
    'Lion', 'Tiger', 'Elephant', 'Giraffe', 'Zebra',
    'Panda', 'Gorilla', 'Chimpanzee', 'Orangutan',
    'Kangaroo', 'Koala', 'Wolf', 'Fox', 'Deer',
    'Eagle', 'Hawk', 'Owl', 'Falcon',
    'Penguin', 'Flamingo', 'Parrot', 'Toucan',
    'Dolphin', 'Whale', 'Seal', 'Otter',
    'Shark', 'Octopus', 'Jellyfish', 'Seahorse',
    'Butterfly', 'Dragonfly', 'Bee',
]

DISCOVERABLE_ANIMALS = [
    'Lion', 'Tiger', 'Elephant', 'Giraffe', 'Zebra',
    'Bear', 'Panda', 'Gorilla', 'Chimpanzee', 'Orangutan',
    'Kangaroo', 'Koala', 'Wolf', 'Fox', 'Deer',
    'Moose', 'Bison', 'Rhinoceros', 'Hippopotamus',
    'Leopard', 'Cheetah', 'Jaguar', 'Cougar',
    'Dolphin', 'Whale', 'Seal', 'Otter', 'Walrus',
    'Eagle', 'Hawk', 'Owl', 'Falcon', 'Vulture',
    'Penguin', 'Flamingo', 'Parrot', 'Toucan', 'Peacock',
    'Crow', 'Raven', 'Robin', 'Sparrow', 'Cardinal',
    'Ostrich', 'Emu', 'Pelican', 'Heron', 'Crane',
    'Duck', 'Goose', 'Swan', 'Albatross',
    'Crocodile', 'Alligator', 'Snake', 'Python', 'Cobra',
    'Lizard', 'Iguana', 'Chameleon', 'Gecko',
    'Turtle', 'Tortoise', 'Frog', 'Toad', 'Salamander',
    'Shark', 'Tuna', 'Octopus', 'Squid', 'Jellyfish',
    'Starfish', 'Seahorse', 'Clownfish', 'Swordfish',
    'Stingray', 'Lobster', 'Crab',
    'Butterfly', 'Dragonfly', 'Bee', 'Ant', 'Beetle',
    'Spider', 'Scorpion', 'Ladybug',
]

# How many recent views are excluded from suggestions
SUGGESTION_HISTORY_SIZE = 10


class DiscoveryService:
    """Decides what animals to surface to the user."""

    def __init__(
        self,
        view_tracker: ViewTracker,
        seasonal_selector: SeasonalSelector,
        clock: Optional[Callable[[], datetime]] = None,
        rng: Optional[random.Random] = None,
    ):
        self.view_tracker = view_tracker
        self.seasonal_selector = seasonal_selector
        self.clock = clock or datetime.now
        self.rng = rng or random.Random()

    def get_animal_of_the_hour(self) -> str:
        """Curated animal that changes every hour of the day."""
        return HOURLY_ANIMALS[self.clock().hour % len(HOURLY_ANIMALS)]

    def get_discovery_suggestions(self, limit: int = 3) -> List[str]:
        """Random animals the user has not looked at recently."""
        if limit < 1:
            return []

        recently_viewed = set(self.view_tracker.get_recently_viewed(SUGGESTION_HISTORY_SIZE))
        unviewed = [animal for animal in DISCOVERABLE_ANIMALS if animal not in recently_viewed]
        return self.rng.sample(unviewed, min(limit, len(unviewed)))

    def get_featured(
        self,
        trending_limit: int = 5,
        seasonal_limit: int = 3,
        recent_limit: int = 5,
        suggestion_limit: int = 3,
    ) -> Dict[str, Any]:
        """
        Snapshot of everything a landing page features.

        Returns:
            Dictionary with season, trending, seasonal, recently_viewed,
            animal_of_the_hour and suggestions
        """
        featured = {
            'season': self.seasonal_selector.get_current_season(),
            'trending': self.view_tracker.get_trending_animals(trending_limit),
            'seasonal': self.seasonal_selector.get_seasonal_animals(seasonal_limit),
            'recently_viewed': self.view_tracker.get_recently_viewed(recent_limit),
            'animal_of_the_hour': self.get_animal_of_the_hour(),
            'suggestions': self.get_discovery_suggestions(suggestion_limit),
        }
        logger.debug(
            f"Featured snapshot: season={featured['season']}, "
            f"{len(featured['trending'])} trending, {len(featured['seasonal'])} seasonal"
        )
        return featured
