"""Character-twin matcher.

The reference characters and the genre spelling table are versioned JSON
assets under ``malwrapped/data`` so they can change without touching this code.
"""

import json
from functools import lru_cache
from pathlib import Path

from malwrapped.model import CharacterTwin
from malwrapped.outcome import Evaluated, NotApplicable, first_available

DATA_DIR = Path(__file__).resolve().parent / "data"
TOP_GENRES_FOR_MATCH = 3


@lru_cache(maxsize=None)
def load_reference() -> dict:
    with open(DATA_DIR / "characters.json", encoding="utf-8") as f:
        return json.load(f)


@lru_cache(maxsize=None)
def load_aliases() -> dict:
    with open(DATA_DIR / "genre_aliases.json", encoding="utf-8") as f:
        data = json.load(f)
    return {k.lower(): v for k, v in data.get("aliases", {}).items()}


def canonical_genre(name, aliases=None) -> str:
    """Lowercased canonical spelling of a genre name."""
    if not isinstance(name, str):
        return ""
    aliases = load_aliases() if aliases is None else aliases
    key = name.strip().lower()
    return aliases.get(key, key).lower()


def genres_match(a, b, aliases=None) -> bool:
    """Case-insensitive substring match in either direction after canonicalization."""
    a = canonical_genre(a, aliases)
    b = canonical_genre(b, aliases)
    if not a or not b:
        return False
    return a in b or b in a


def reference_set(gender, reference=None) -> list[dict]:
    """Characters for the user's declared gender, else the default set."""
    reference = load_reference() if reference is None else reference
    sets = reference.get("sets", {})
    key = gender.strip().lower() if isinstance(gender, str) else ""
    if key not in sets:
        key = reference.get("default_set", "")
    return list(sets.get(key, []))


def restrict_to_consumed(characters, consumed_ids) -> list[dict]:
    """Characters from works the user consumed; the full set when none match."""
    restricted = [c for c in characters if c.get("anime_id") in consumed_ids]
    return restricted or list(characters)


def matched_genres(character, user_genres, aliases=None) -> list[str]:
    tags = character.get("genres") or []
    return [g for g in user_genres if any(genres_match(g, tag, aliases) for tag in tags)]


def best_by_overlap(characters, user_genres, aliases=None):
    """Highest genre overlap; earlier characters win ties. None when nobody overlaps."""
    best, best_score = None, 0
    for character in characters:
        score = len(matched_genres(character, user_genres, aliases))
        if score > best_score:
            best, best_score = character, score
    return best


def first_sharing(characters, genre, aliases=None):
    for character in characters:
        if any(genres_match(genre, tag, aliases) for tag in character.get("genres") or []):
            return character
    return None


def _twin(character, user_genres, aliases) -> CharacterTwin:
    return CharacterTwin(
        name=character.get("name", ""),
        anime_id=character.get("anime_id"),
        source_title=character.get("source_title", ""),
        genres=tuple(character.get("genres") or ()),
        matched_genres=tuple(matched_genres(character, user_genres, aliases)),
    )


def match_twin(top_genres, consumed_ids, gender=None, reference=None, aliases=None):
    """Pick the reference character whose genres best fit the user's top genres.

    Candidates are the characters from consumed works, or the full set when
    none of them were consumed. Fallback order: best overlap among the
    candidates, then any character in the full set sharing the top genre, then
    the first candidate. A zero overlap among the candidates means none of
    them carries the top genre either, so that step has to look wider.
    """
    if not consumed_ids and not top_genres:
        return NotApplicable("no consumed works or genres to match against")

    aliases = load_aliases() if aliases is None else aliases
    characters = reference_set(gender, reference)
    if not characters:
        return NotApplicable("empty character reference set")

    candidates = restrict_to_consumed(characters, set(consumed_ids))
    user_genres = list(top_genres)[:TOP_GENRES_FOR_MATCH]

    picked = first_available(
        [
            ("genre_overlap", lambda: best_by_overlap(candidates, user_genres, aliases)),
            ("top_genre", lambda: first_sharing(characters, user_genres[0], aliases) if user_genres else None),
            ("first_available", lambda: candidates[0] if candidates else None),
        ],
        reason="no character available",
    )
    if not picked.applicable:
        return picked
    return Evaluated(_twin(picked.value, user_genres, aliases), source=picked.source)
