import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from cli.env import load_dotenv
from server.database import close_pool, get_platform_stats, init_pool
from server.routers import insights, wrapped

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")


@asynccontextmanager
async def lifespan(app: FastAPI):
    load_dotenv()
    await init_pool()
    yield
    await close_pool()


app = FastAPI(title="MAL Wrapped", lifespan=lifespan)

app.include_router(insights.router)
app.include_router(wrapped.router)


@app.get("/api/stats")
async def platform_stats():
    return await get_platform_stats()


@app.get("/health")
async def health():
    return {"status": "ok"}
