"""FastAPI app, CORS, and route registration."""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

logging.basicConfig(
    level=logging.INFO,
    format="%(levelname)s: %(name)s: %(message)s",
)

from mixaid.api.state import AppState, get_state
from mixaid.config import FRONT_END_SERVER_URL

# Routes depend on api.state for the get_state dependency
from mixaid.api.routes import cards

__all__ = ["app", "AppState", "get_state"]


@asynccontextmanager
async def lifespan(app: FastAPI):
    app.state.mixaid = AppState.open()
    yield
    await app.state.mixaid.close()


app = FastAPI(
    title="Mix-aid API",
    description="Card search backed by Redis index sets",
    lifespan=lifespan,
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=[FRONT_END_SERVER_URL] if FRONT_END_SERVER_URL else ["*"],
    allow_methods=["*"],
    allow_headers=["Origin", "X-Requested-With", "Content-Type", "Accept"],
)

app.include_router(cards.router, tags=["cards"])
