#!/usr/bin/env python3
"""Read lists or insights JSON from stdin and upsert into Postgres.

Usage:
    cat data/<user>/lists.json | python -m cli.store_results
    cat insights.json | python -m cli.store_results --insights
"""

import argparse
import json
import sys

import psycopg2
import psycopg2.extensions
import psycopg2.extras

from cli.env import get_database_url

# Register the JSON adapter so Python dicts/lists are sent as JSONB.
psycopg2.extensions.register_adapter(dict, psycopg2.extras.Json)
psycopg2.extensions.register_adapter(list, psycopg2.extras.Json)

UPSERT_PROFILE_SQL = """
INSERT INTO profiles (
    mal_user_id,
    username,
    gender,
    anime_count,
    manga_count,
    anime_json,
    manga_json
) VALUES (
    %(mal_user_id)s,
    %(username)s,
    %(gender)s,
    %(anime_count)s,
    %(manga_count)s,
    %(anime_json)s,
    %(manga_json)s
)
ON CONFLICT (mal_user_id) DO UPDATE SET
    username    = EXCLUDED.username,
    gender      = EXCLUDED.gender,
    anime_count = EXCLUDED.anime_count,
    manga_count = EXCLUDED.manga_count,
    anime_json  = EXCLUDED.anime_json,
    manga_json  = EXCLUDED.manga_json,
    updated_at  = NOW();
"""

UPSERT_INSIGHTS_SQL = """
INSERT INTO insights (profile_id, selected_year, insights_json)
VALUES (
    (SELECT id FROM profiles WHERE mal_user_id = %(mal_user_id)s),
    %(selected_year)s,
    %(insights_json)s
)
ON CONFLICT (profile_id, selected_year) DO UPDATE SET
    insights_json = EXCLUDED.insights_json,
    created_at    = NOW();
"""


def profile_params(data: dict) -> dict:
    anime = data.get("anime") or []
    manga = data.get("manga") or []
    return {
        "mal_user_id": str(data["user_id"]),
        "username":    data.get("user_name"),
        "gender":      data.get("gender"),
        "anime_count": len(anime),
        "manga_count": len(manga),
        "anime_json":  anime,
        "manga_json":  manga,
    }


def insights_params(data: dict) -> list[dict]:
    user_id = str(data["user_id"])
    return [
        {"mal_user_id": user_id, "selected_year": year, "insights_json": insights}
        for year, insights in (data.get("insights") or {}).items()
    ]


def _execute(sql: str, rows: list[dict]) -> None:
    database_url = get_database_url()
    try:
        conn = psycopg2.connect(database_url)
        with conn:
            with conn.cursor() as cur:
                for row in rows:
                    cur.execute(sql, row)
        conn.close()
    except psycopg2.Error as exc:
        print(f"ERROR: Failed to upsert: {exc}", file=sys.stderr)
        sys.exit(1)


def store_profile(data: dict) -> None:
    """Upsert a profile row from a fetched lists payload."""
    params = profile_params(data)
    print(f"Upserting profile for MAL user {params['mal_user_id']}...", file=sys.stderr)
    _execute(UPSERT_PROFILE_SQL, [params])
    print("Profile stored successfully.", file=sys.stderr)


def store_insights(data: dict) -> None:
    """Upsert one insights row per computed year selector."""
    rows = insights_params(data)
    if not rows:
        print("ERROR: No insights found in payload.", file=sys.stderr)
        sys.exit(1)
    print(
        f"Upserting {len(rows)} insight snapshot(s) for MAL user {rows[0]['mal_user_id']}...",
        file=sys.stderr,
    )
    _execute(UPSERT_INSIGHTS_SQL, rows)
    print("Insights stored successfully.", file=sys.stderr)


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Read JSON from stdin and upsert into Postgres."
    )
    parser.add_argument(
        "--insights",
        action="store_true",
        help="Treat input as compute_insights output instead of fetched lists.",
    )
    args = parser.parse_args()

    raw = sys.stdin.read()
    if not raw.strip():
        print("ERROR: No input received on stdin.", file=sys.stderr)
        sys.exit(1)

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        print(f"ERROR: Invalid JSON on stdin: {exc}", file=sys.stderr)
        sys.exit(1)

    if not isinstance(data, dict) or not data.get("user_id"):
        print("ERROR: Payload has no user_id.", file=sys.stderr)
        sys.exit(1)

    if args.insights:
        store_insights(data)
    else:
        store_profile(data)


if __name__ == "__main__":
    main()
