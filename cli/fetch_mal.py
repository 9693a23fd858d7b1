#!/usr/bin/env python3
"""Fetch a user's MyAnimeList profile, anime list and manga list.

Usage:
    MAL_ACCESS_TOKEN=... python -m cli.fetch_mal
    python -m cli.fetch_mal --code <auth_code> --verifier <pkce_verifier> --redirect-uri <uri>
"""

import argparse
import json
import os
import re
import sys
import time
from datetime import datetime, timezone

import httpx

from cli.env import PROJECT_ROOT, load_dotenv

MAL_API_URL = "https://api.myanimelist.net/v2"
MAL_TOKEN_URL = "https://myanimelist.net/v1/oauth2/token"

PAGE_SIZE = 100

USER_FIELDS = "id,name,picture,gender,anime_statistics,manga_statistics"

LIST_FIELDS = {
    "anime": ",".join([
        "list_status{status,score,start_date,finish_date,num_episodes_watched,updated_at}",
        "genres",
        "studios",
        "num_episodes",
        "average_episode_duration",
        "start_season",
        "mean",
        "num_list_users",
        "media_type",
        "main_picture",
    ]),
    "manga": ",".join([
        "list_status{status,score,start_date,finish_date,num_chapters_read,num_volumes_read,updated_at}",
        "genres{name}",
        "authors{first_name,last_name}",
        "mean",
        "num_list_users",
        "main_picture",
    ]),
}

CHARACTER_FIELDS = "id,first_name,last_name,alternative_name,role,main_picture"


class TokenExchangeError(Exception):
    """MAL refused to exchange an authorization code for a token."""

    def __init__(self, error: str, description: str, status_code: int | None = None):
        super().__init__(f"{error}: {description}")
        self.error = error
        self.description = description
        self.status_code = status_code


_TOKEN_ERROR_HINTS = {
    "invalid_client": "Invalid MAL_CLIENT_ID; it must match the client ID of your MAL app.",
    "invalid_grant": "The authorization code expired or was already used. Connect again.",
    "redirect_uri_mismatch": "The redirect URI must match the MAL app setting exactly.",
}


# ---------------------------------------------------------------------------
# Core functions
# ---------------------------------------------------------------------------

def exchange_code_for_token(
    code: str,
    code_verifier: str,
    redirect_uri: str,
    client: httpx.Client,
    client_id: str | None = None,
) -> dict:
    """Trade an OAuth authorization code (PKCE "plain") for an access token."""
    client_id = (client_id or os.environ.get("MAL_CLIENT_ID", "")).strip()
    if not client_id:
        raise TokenExchangeError("server_configuration", "MAL_CLIENT_ID is not configured.")
    if not code or not code_verifier or not redirect_uri:
        raise TokenExchangeError(
            "missing_parameters", "code, code_verifier and redirect_uri are required.", 400
        )

    response = client.post(
        MAL_TOKEN_URL,
        data={
            "client_id": client_id,
            "code": code,
            "code_verifier": code_verifier,
            "grant_type": "authorization_code",
            "redirect_uri": redirect_uri,
        },
        timeout=15.0,
    )
    return parse_token_response(response)


def parse_token_response(response: httpx.Response) -> dict:
    text = response.text
    if not text or not text.strip():
        raise TokenExchangeError(
            "empty_response",
            f"MAL returned {response.status_code} with an empty body.",
            response.status_code,
        )
    try:
        data = response.json()
    except ValueError:
        raise TokenExchangeError(
            "invalid_response", "MAL returned a response that is not JSON.", response.status_code
        )

    if response.is_error:
        error = data.get("error") or "token_exchange_failed"
        description = _TOKEN_ERROR_HINTS.get(error) or data.get("error_description") or "Unknown error"
        raise TokenExchangeError(error, description, response.status_code)

    if not data.get("access_token"):
        raise TokenExchangeError("no_token", "MAL did not return an access token.", response.status_code)
    return data


def _get(client: httpx.Client, path: str, params: dict | None = None) -> dict:
    response = client.get(f"{MAL_API_URL}{path}", params=params, timeout=15.0)
    if response.status_code == 401:
        raise PermissionError("MAL rejected the access token (401). Log in again.")
    response.raise_for_status()
    return response.json()


def fetch_user(client: httpx.Client) -> dict:
    """Profile of the token's owner."""
    return _get(client, "/users/@me", {"fields": USER_FIELDS})


def fetch_list_page(kind: str, offset: int, client: httpx.Client) -> tuple[list[dict], bool]:
    """Fetch one page of the user's anime or manga list.

    Returns (entries, has_next).
    """
    data = _get(
        client,
        f"/users/@me/{kind}list",
        {"offset": offset, "limit": PAGE_SIZE, "fields": LIST_FIELDS[kind], "nsfw": "true"},
    )
    entries = data.get("data") or []
    has_next = bool((data.get("paging") or {}).get("next"))
    return entries, has_next


def fetch_list(kind: str, client: httpx.Client, delay: float = 0.5) -> list[dict]:
    """Paginate through the user's whole anime or manga list."""
    all_entries: list[dict] = []
    offset = 0
    while True:
        print(f"Fetching {kind} list (offset={offset})...", file=sys.stderr)
        entries, has_next = fetch_list_page(kind, offset, client)
        if not entries:
            break
        all_entries.extend(entries)
        if not has_next:
            break
        offset += PAGE_SIZE
        time.sleep(delay)  # polite delay between pages

    print(f"Fetched {len(all_entries)} {kind} entries.", file=sys.stderr)
    return all_entries


def fetch_characters(anime_id: int, client: httpx.Client) -> list[dict]:
    data = _get(client, f"/anime/{anime_id}/characters", {"fields": CHARACTER_FIELDS, "limit": 500})
    return data.get("data") or []


def make_client(access_token: str) -> httpx.Client:
    return httpx.Client(
        headers={
            "Authorization": f"Bearer {access_token}",
            "User-Agent": "mal-wrapped/0.1 (list-stats CLI)",
        },
        follow_redirects=True,
    )


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------


def main() -> None:
    load_dotenv()

    parser = argparse.ArgumentParser(description="Fetch MAL anime and manga lists to data/.")
    parser.add_argument("--code", help="OAuth authorization code to exchange for a token")
    parser.add_argument("--verifier", help="PKCE code verifier used for the authorization")
    parser.add_argument("--redirect-uri", help="Redirect URI registered on the MAL app")
    args = parser.parse_args()

    access_token = os.environ.get("MAL_ACCESS_TOKEN", "")
    if args.code:
        try:
            with httpx.Client() as client:
                token = exchange_code_for_token(args.code, args.verifier, args.redirect_uri, client)
        except TokenExchangeError as exc:
            print(f"Error: {exc}", file=sys.stderr)
            sys.exit(1)
        except httpx.HTTPError as exc:
            print(f"HTTP error exchanging token: {exc}", file=sys.stderr)
            sys.exit(1)
        access_token = token["access_token"]
        print("Token exchange successful; export MAL_ACCESS_TOKEN to reuse it.", file=sys.stderr)

    if not access_token:
        print("Usage: MAL_ACCESS_TOKEN=... python -m cli.fetch_mal", file=sys.stderr)
        sys.exit(1)

    try:
        with make_client(access_token) as client:
            user = fetch_user(client)
            anime = fetch_list("anime", client)
            manga = fetch_list("manga", client)
    except PermissionError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)
    except httpx.HTTPError as exc:
        print(f"HTTP error fetching lists: {exc}", file=sys.stderr)
        sys.exit(1)

    if not anime and not manga:
        print("Both lists are empty.", file=sys.stderr)
        sys.exit(1)

    user_name = user.get("name") or ""
    user_id = str(user.get("id") or "unknown")
    safe_name = re.sub(r"[^\w-]", "_", user_name.lower()).strip("_") if user_name else "unknown"
    data_dir = PROJECT_ROOT / "data" / f"{safe_name}_{user_id}"
    data_dir.mkdir(parents=True, exist_ok=True)

    output = {
        "user_id": user_id,
        "user_name": user_name,
        "gender": user.get("gender"),
        "fetch_date": datetime.now(timezone.utc).isoformat(),
        "anime_count": len(anime),
        "manga_count": len(manga),
        "anime": anime,
        "manga": manga,
    }
    json_path = data_dir / "lists.json"
    with open(json_path, "w") as f:
        json.dump(output, f, indent=2, ensure_ascii=False)
        f.write("\n")

    print(f"\nSaved {len(anime)} anime and {len(manga)} manga entries to:", file=sys.stderr)
    print(f"  {json_path}", file=sys.stderr)


if __name__ == "__main__":
    main()
