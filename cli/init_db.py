#!/usr/bin/env python3
"""Create Postgres tables for MAL Wrapped."""

import sys

import psycopg2

from cli.env import get_database_url

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS profiles (
    id              SERIAL PRIMARY KEY,
    mal_user_id     VARCHAR(32) UNIQUE NOT NULL,
    username        VARCHAR(255),
    gender          VARCHAR(32),
    anime_count     INTEGER NOT NULL DEFAULT 0,
    manga_count     INTEGER NOT NULL DEFAULT 0,
    anime_json      JSONB NOT NULL,
    manga_json      JSONB NOT NULL,
    created_at      TIMESTAMPTZ DEFAULT NOW(),
    updated_at      TIMESTAMPTZ DEFAULT NOW()
);

CREATE TABLE IF NOT EXISTS insights (
    id              SERIAL PRIMARY KEY,
    profile_id      INTEGER REFERENCES profiles(id) ON DELETE CASCADE,
    selected_year   VARCHAR(8) NOT NULL,
    insights_json   JSONB NOT NULL,
    created_at      TIMESTAMPTZ DEFAULT NOW(),
    UNIQUE(profile_id, selected_year)
);

CREATE TABLE IF NOT EXISTS page_views (
    id              SERIAL PRIMARY KEY,
    page_type       VARCHAR(20) NOT NULL,
    entity_id       VARCHAR(64),
    ip_hash         VARCHAR(16),
    referrer        TEXT,
    created_at      TIMESTAMPTZ DEFAULT NOW()
);
"""


def main() -> None:
    database_url = get_database_url()

    try:
        conn = psycopg2.connect(database_url)
        conn.autocommit = True
        with conn.cursor() as cur:
            cur.execute(SCHEMA_SQL)
        conn.close()
        print("Tables created successfully.", file=sys.stderr)
    except psycopg2.Error as exc:
        print(f"ERROR: Failed to create tables: {exc}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
