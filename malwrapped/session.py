"""Owner of the current insight model for one user.

The session recomputes the whole model whenever its inputs change (first
data, a new year, manga arriving after anime) and swaps it in as a unit.
Portrait enrichment that finishes later is applied only if it was started
against the generation that is still current.
"""

import logging

from malwrapped import records
from malwrapped.engine import aggregate

logger = logging.getLogger(__name__)


class InsightSession:
    def __init__(self, user_profile=None, selected_year=records.ALL_TIME):
        self.user_profile = dict(user_profile or {})
        self.selected_year = records.normalize_year(selected_year)
        self.anime = []
        self.manga = []
        self.model = None

    @property
    def generation(self) -> int | None:
        return self.model.generation if self.model is not None else None

    def recompute(self):
        self.model = aggregate(self.anime, self.manga, self.selected_year, self.user_profile)
        return self.model

    def load_anime(self, entries):
        """Anime list is available; compute an anime-only model."""
        self.anime = list(entries or [])
        return self.recompute()

    def load_manga(self, entries):
        """Manga list arrived; recompute with both lists merged."""
        self.manga = list(entries or [])
        return self.recompute()

    def select_year(self, year):
        self.selected_year = records.normalize_year(year)
        return self.recompute()

    def available_years(self) -> list[int]:
        return records.available_years(self.anime, self.manga)

    def is_current(self, generation) -> bool:
        return self.model is not None and generation == self.model.generation

    def apply_character_portrait(self, generation, url) -> bool:
        """Merge a character portrait if *generation* is still current."""
        if not self.is_current(generation):
            logger.info("Discarding stale character portrait for generation %s", generation)
            return False
        self.model.portraits.character = url
        return True

    def apply_author_portrait(self, generation, author_name, url) -> bool:
        """Merge an author portrait, keyed by normalized author name."""
        if not self.is_current(generation):
            logger.info("Discarding stale portrait for %s (generation %s)", author_name, generation)
            return False
        self.model.portraits.authors[author_name] = url
        return True
