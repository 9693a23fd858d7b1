import asyncio

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from malwrapped import records
from malwrapped.session import InsightSession
from server.database import get_profile, get_stored_insights, log_page_view

router = APIRouter()


def _get_client_ip(request: Request) -> str | None:
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else None


def _track(request: Request, page_type: str, entity_id: str) -> None:
    asyncio.create_task(log_page_view(
        page_type, entity_id,
        _get_client_ip(request),
        request.headers.get("Referer"),
    ))


@router.get("/api/profile/{mal_id}", response_class=JSONResponse)
async def profile_api(request: Request, mal_id: str):
    profile = await get_profile(mal_id)
    if profile is None:
        return JSONResponse({"error": "not found"}, status_code=404)

    _track(request, "profile", mal_id)
    return JSONResponse(
        {
            "mal_user_id": profile["mal_user_id"],
            "username": profile["username"],
            "anime_count": profile["anime_count"],
            "manga_count": profile["manga_count"],
            "available_years": records.available_years(profile["anime_json"], profile["manga_json"]),
        }
    )


@router.get("/api/insights/{mal_id}", response_class=JSONResponse)
async def insights_api(request: Request, mal_id: str, year: str = records.ALL_TIME):
    try:
        selected_year = records.normalize_year(year)
    except ValueError as exc:
        return JSONResponse({"error": str(exc)}, status_code=400)

    stored = await get_stored_insights(mal_id, str(selected_year))
    if stored is not None:
        _track(request, "insights", mal_id)
        return JSONResponse({"mal_user_id": mal_id, "source": "stored", "insights": stored})

    profile = await get_profile(mal_id)
    if profile is None:
        return JSONResponse({"error": "not found"}, status_code=404)

    session = InsightSession({"gender": profile.get("gender")}, selected_year)
    session.load_anime(profile["anime_json"])
    model = session.load_manga(profile["manga_json"])

    _track(request, "insights", mal_id)
    return JSONResponse({"mal_user_id": mal_id, "source": "computed", "insights": model.to_dict()})
