"""FastAPI application entrypoint."""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from heartline.api import (
	auth,
	chat,
	discovery,
	matches,
	moderation,
	ops,
	premium,
	profile,
	swipe,
)
from heartline.api.errors import install_error_handlers
from heartline.api.middleware_request_id import RequestIdMiddleware
from heartline.infra import postgres
from heartline.infra.redis import redis_client
from heartline.obs import init as obs_init
from heartline.settings import settings

DEV_ORIGINS = [
	"http://localhost:3000",
	"http://127.0.0.1:3000",
	"http://localhost:5173",
	"http://127.0.0.1:5173",
]


@asynccontextmanager
async def lifespan(app: FastAPI):
	await postgres.init_pool()
	try:
		yield
	finally:
		await postgres.close_pool()
		await redis_client.aclose()


def _allowed_origins() -> list[str]:
	origins = list(settings.cors_allow_origins)
	# Starlette disallows wildcard '*' with allow_credentials=True
	if not origins or "*" in origins:
		return DEV_ORIGINS if settings.is_dev() else []
	return origins


app = FastAPI(title="Heartline API", lifespan=lifespan)
install_error_handlers(app)

app.add_middleware(
	CORSMiddleware,
	allow_origins=_allowed_origins(),
	allow_credentials=True,
	allow_methods=["*"],
	allow_headers=["*"],
)

obs_init(app)
app.add_middleware(RequestIdMiddleware)

for module in (auth, profile, discovery, swipe, matches, chat, moderation, premium):
	app.include_router(module.router, prefix=settings.api_prefix)
app.include_router(ops.router)
