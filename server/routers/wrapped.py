"""Live wrapped for the bearer of a MAL access token, plus the OAuth token exchange."""

import asyncio
import logging
import os

import asyncpg
import httpx
from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from cli.fetch_mal import (LIST_FIELDS, MAL_API_URL, MAL_TOKEN_URL, PAGE_SIZE,
                           USER_FIELDS, TokenExchangeError, parse_token_response)
from malwrapped import records
from malwrapped.enrichment import (PortraitClient, enrich_author_portraits,
                                   enrich_character_portrait)
from malwrapped.session import InsightSession
from server.database import upsert_profile

logger = logging.getLogger(__name__)

router = APIRouter()


def make_async_client() -> httpx.AsyncClient:
    return httpx.AsyncClient(timeout=15.0, follow_redirects=True)


def _bearer_token(request: Request) -> str | None:
    header = request.headers.get("Authorization") or ""
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


async def _get(client: httpx.AsyncClient, token: str, path: str, params: dict) -> dict:
    response = await client.get(
        f"{MAL_API_URL}{path}",
        params=params,
        headers={"Authorization": f"Bearer {token}"},
    )
    if response.status_code == 401:
        raise PermissionError("MAL rejected the access token (401).")
    response.raise_for_status()
    return response.json()


async def fetch_list(client: httpx.AsyncClient, token: str, kind: str) -> list[dict]:
    entries: list[dict] = []
    offset = 0
    while True:
        data = await _get(
            client, token, f"/users/@me/{kind}list",
            {"offset": offset, "limit": PAGE_SIZE, "fields": LIST_FIELDS[kind], "nsfw": "true"},
        )
        page = data.get("data") or []
        entries.extend(page)
        if not page or not (data.get("paging") or {}).get("next"):
            return entries
        offset += PAGE_SIZE


@router.post("/api/auth/token", response_class=JSONResponse)
async def exchange_token(request: Request):
    try:
        body = await request.json()
    except ValueError:
        body = None
    if not isinstance(body, dict):
        return JSONResponse({"error": "invalid_request", "error_description": "Expected a JSON body."}, status_code=400)

    client_id = os.environ.get("MAL_CLIENT_ID", "").strip()
    if not client_id:
        return JSONResponse(
            {"error": "server_configuration", "error_description": "MAL_CLIENT_ID is not configured."},
            status_code=500,
        )
    code = body.get("code")
    code_verifier = body.get("code_verifier")
    redirect_uri = body.get("redirect_uri")
    if not code or not code_verifier or not redirect_uri:
        return JSONResponse(
            {"error": "missing_parameters", "error_description": "code, code_verifier and redirect_uri are required."},
            status_code=400,
        )

    try:
        async with make_async_client() as client:
            response = await client.post(
                MAL_TOKEN_URL,
                data={
                    "client_id": client_id,
                    "code": code,
                    "code_verifier": code_verifier,
                    "grant_type": "authorization_code",
                    "redirect_uri": redirect_uri,
                },
            )
        token = parse_token_response(response)
    except TokenExchangeError as exc:
        status = exc.status_code if exc.status_code and 400 <= exc.status_code < 500 else 502
        return JSONResponse({"error": exc.error, "error_description": exc.description}, status_code=status)
    except httpx.HTTPError as exc:
        logger.warning("Token exchange request failed: %s", exc)
        return JSONResponse({"error": "upstream_error", "error_description": str(exc)}, status_code=502)

    return JSONResponse({
        "access_token": token["access_token"],
        "refresh_token": token.get("refresh_token"),
        "expires_in": token.get("expires_in"),
        "token_type": token.get("token_type", "Bearer"),
    })


@router.get("/api/wrapped", response_class=JSONResponse)
async def wrapped_api(request: Request, year: str = records.ALL_TIME, store: bool = False):
    token = _bearer_token(request)
    if token is None:
        return JSONResponse({"error": "missing bearer token"}, status_code=401)
    try:
        selected_year = records.normalize_year(year)
    except ValueError as exc:
        return JSONResponse({"error": str(exc)}, status_code=400)

    try:
        async with make_async_client() as client:
            user = await _get(client, token, "/users/@me", {"fields": USER_FIELDS})
            session = InsightSession({"gender": user.get("gender")}, selected_year)
            session.load_anime(await fetch_list(client, token, "anime"))
            session.load_manga(await fetch_list(client, token, "manga"))

            portraits = PortraitClient(token, client)
            await asyncio.gather(
                enrich_character_portrait(session, portraits.character_portrait),
                enrich_author_portraits(session, portraits.author_portrait),
            )
    except PermissionError as exc:
        return JSONResponse({"error": str(exc)}, status_code=401)
    except httpx.HTTPError as exc:
        logger.warning("Fetching MAL lists failed: %s", exc)
        return JSONResponse({"error": "upstream_error"}, status_code=502)

    if store:
        try:
            await upsert_profile(user, session.anime, session.manga)
        except (asyncpg.PostgresError, OSError) as exc:
            logger.warning("Could not store profile %s: %s", user.get("id"), exc)

    return JSONResponse({
        "user": {"id": user.get("id"), "name": user.get("name"), "picture": user.get("picture")},
        "available_years": session.available_years(),
        "insights": session.model.to_dict(),
    })
