import asyncio
import hashlib
import json
import logging
import os
import time

import asyncpg

logger = logging.getLogger(__name__)

_pool: asyncpg.Pool | None = None


async def init_pool():
    global _pool
    _pool = await asyncpg.create_pool(
        os.environ["DATABASE_URL"],
        min_size=2,
        max_size=10,
        command_timeout=30,
    )


async def close_pool():
    global _pool
    if _pool:
        await _pool.close()
        _pool = None


def get_pool() -> asyncpg.Pool:
    assert _pool is not None, "Database pool not initialized"
    return _pool


def decode_json(value):
    """asyncpg hands JSONB back as text unless a codec is registered."""
    if isinstance(value, str):
        return json.loads(value)
    return value


async def get_profile(mal_user_id: str) -> dict | None:
    row = await get_pool().fetchrow(
        "SELECT * FROM profiles WHERE mal_user_id = $1", mal_user_id
    )
    if row is None:
        return None
    profile = dict(row)
    profile["anime_json"] = decode_json(profile.get("anime_json")) or []
    profile["manga_json"] = decode_json(profile.get("manga_json")) or []
    return profile


async def get_stored_insights(mal_user_id: str, selected_year: str) -> dict | None:
    row = await get_pool().fetchrow(
        """SELECT i.insights_json
           FROM insights i
           JOIN profiles p ON i.profile_id = p.id
           WHERE p.mal_user_id = $1 AND i.selected_year = $2""",
        mal_user_id,
        selected_year,
    )
    if row is None:
        return None
    return decode_json(row["insights_json"])


async def upsert_profile(user: dict, anime: list, manga: list) -> None:
    await get_pool().execute(
        """INSERT INTO profiles
               (mal_user_id, username, gender, anime_count, manga_count, anime_json, manga_json)
           VALUES ($1, $2, $3, $4, $5, $6::jsonb, $7::jsonb)
           ON CONFLICT (mal_user_id) DO UPDATE SET
               username    = EXCLUDED.username,
               gender      = EXCLUDED.gender,
               anime_count = EXCLUDED.anime_count,
               manga_count = EXCLUDED.manga_count,
               anime_json  = EXCLUDED.anime_json,
               manga_json  = EXCLUDED.manga_json,
               updated_at  = NOW()""",
        str(user.get("id")),
        user.get("name"),
        user.get("gender"),
        len(anime),
        len(manga),
        json.dumps(anime),
        json.dumps(manga),
    )


async def store_insights(mal_user_id: str, selected_year: str, insights: dict) -> None:
    await get_pool().execute(
        """INSERT INTO insights (profile_id, selected_year, insights_json)
           VALUES ((SELECT id FROM profiles WHERE mal_user_id = $1), $2, $3::jsonb)
           ON CONFLICT (profile_id, selected_year) DO UPDATE SET
               insights_json = EXCLUDED.insights_json,
               created_at    = NOW()""",
        mal_user_id,
        selected_year,
        json.dumps(insights),
    )


_platform_stats_cache: dict | None = None
_platform_stats_cache_time: float = 0.0
_PLATFORM_STATS_TTL = 600  # 10 minutes


async def get_platform_stats() -> dict:
    global _platform_stats_cache, _platform_stats_cache_time
    if _platform_stats_cache and (time.time() - _platform_stats_cache_time) < _PLATFORM_STATS_TTL:
        return _platform_stats_cache

    pool = get_pool()

    vitals, archetype_rows = await asyncio.gather(
        pool.fetchrow("""
            SELECT
                COUNT(*)                          AS total_profiles,
                COALESCE(SUM(anime_count), 0)     AS total_anime,
                COALESCE(SUM(manga_count), 0)     AS total_manga
            FROM profiles
        """),
        pool.fetch("""
            SELECT insights_json->'archetype'->'value'->>'name' AS archetype, COUNT(*) AS cnt
            FROM insights
            WHERE selected_year = 'all'
              AND insights_json->'archetype'->>'status' = 'evaluated'
            GROUP BY archetype
            ORDER BY cnt DESC
            LIMIT 5
        """),
    )

    total_archetypes = sum(r["cnt"] for r in archetype_rows)
    archetype_breakdown = [
        {
            "archetype": r["archetype"],
            "count": int(r["cnt"]),
            "pct": round(int(r["cnt"]) * 100 / total_archetypes) if total_archetypes else 0,
        }
        for r in archetype_rows
    ]

    result = {
        "total_profiles":      int(vitals["total_profiles"]),
        "total_anime":         int(vitals["total_anime"]),
        "total_manga":         int(vitals["total_manga"]),
        "dominant_archetype":  archetype_rows[0]["archetype"] if archetype_rows else None,
        "archetype_breakdown": archetype_breakdown,
    }

    _platform_stats_cache = result
    _platform_stats_cache_time = time.time()
    return result


async def log_page_view(page_type: str, entity_id: str | None, ip: str | None, referrer: str | None) -> None:
    try:
        ip_hash = hashlib.sha256((ip or "").encode()).hexdigest()[:16] if ip else None
        await get_pool().execute(
            "INSERT INTO page_views (page_type, entity_id, ip_hash, referrer) VALUES ($1, $2, $3, $4)",
            page_type, entity_id, ip_hash, referrer,
        )
    except (asyncpg.PostgresError, OSError) as exc:
        logger.warning("Failed to log page view for %s %s: %s", page_type, entity_id, exc)
