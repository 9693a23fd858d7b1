"""Portrait enrichment for character twins and top authors.

Lookups run after the model is built. Each one remembers the generation it
was started for and hands its result to the session, which drops it if the
user has since switched year or new data arrived. A failed lookup leaves the
portrait unset.
"""

import logging

import httpx

from malwrapped import records

logger = logging.getLogger(__name__)

MAL_API_URL = "https://api.myanimelist.net/v2"
JIKAN_API_URL = "https://api.jikan.moe/v4"

CHARACTER_FIELDS = "id,first_name,last_name,alternative_name,role,main_picture"


def _name_tokens(name) -> frozenset:
    if not isinstance(name, str):
        return frozenset()
    return frozenset(name.replace(",", " ").lower().split())


def pick_character_portrait(payload, character_name) -> str | None:
    """Portrait URL for *character_name* from a MAL ``/anime/{id}/characters`` payload.

    Names match regardless of given/family order.
    """
    wanted = _name_tokens(character_name)
    if not wanted or not isinstance(payload, dict):
        return None
    for item in payload.get("data") or []:
        character = item.get("node") if isinstance(item, dict) else None
        if not isinstance(character, dict):
            continue
        names = [
            records.author_name(character.get("first_name"), character.get("last_name")),
            character.get("alternative_name"),
        ]
        if any(_name_tokens(n) == wanted for n in names if n):
            pictures = character.get("main_picture") or {}
            return pictures.get("large") or pictures.get("medium")
    return None


def pick_person_portrait(payload) -> str | None:
    """Image URL from a Jikan ``/people/{id}`` payload."""
    if not isinstance(payload, dict):
        return None
    data = payload.get("data") or {}
    images = data.get("images") or {}
    jpg = images.get("jpg") or {}
    return jpg.get("image_url")


class PortraitClient:
    """Async lookups against MAL (characters) and Jikan (people)."""

    def __init__(self, access_token: str | None = None, client: httpx.AsyncClient | None = None):
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(timeout=15.0, follow_redirects=True)
        self.access_token = access_token

    async def aclose(self):
        if self._owns_client:
            await self.client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        await self.aclose()

    async def character_portrait(self, anime_id, character_name) -> str | None:
        if anime_id is None or not self.access_token:
            return None
        response = await self.client.get(
            f"{MAL_API_URL}/anime/{anime_id}/characters",
            params={"fields": CHARACTER_FIELDS, "limit": 500},
            headers={"Authorization": f"Bearer {self.access_token}"},
        )
        response.raise_for_status()
        return pick_character_portrait(response.json(), character_name)

    async def author_portrait(self, author_id) -> str | None:
        if author_id is None:
            return None
        response = await self.client.get(f"{JIKAN_API_URL}/people/{author_id}")
        response.raise_for_status()
        return pick_person_portrait(response.json())


async def enrich_character_portrait(session, fetch_portrait) -> bool:
    """Look up the twin's portrait and merge it if the model is still current.

    *fetch_portrait* is an async ``(anime_id, name) -> url | None`` callable,
    normally :meth:`PortraitClient.character_portrait`.
    """
    model = session.model
    if model is None or not model.character_twin.applicable:
        return False
    generation = model.generation
    twin = model.character_twin.value
    try:
        url = await fetch_portrait(twin.anime_id, twin.name)
    except (httpx.HTTPError, ValueError) as exc:
        logger.warning("Character portrait lookup for %s failed: %s", twin.name, exc)
        return False
    if not url:
        return False
    return session.apply_character_portrait(generation, url)


async def enrich_author_portraits(session, fetch_portrait) -> int:
    """Look up portraits for the top manga authors; returns how many were merged.

    *fetch_portrait* is an async ``(author_id) -> url | None`` callable.
    """
    model = session.model
    if model is None:
        return 0
    generation = model.generation
    merged = 0
    for author in model.manga.top_creators:
        if author.id is None:
            continue
        try:
            url = await fetch_portrait(author.id)
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning("Author portrait lookup for %s failed: %s", author.name, exc)
            continue
        if url and session.apply_author_portrait(generation, author.name, url):
            merged += 1
    return merged
