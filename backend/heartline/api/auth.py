"""Registration, login and the authenticated user's account."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request, status

from heartline.api.envelope import Envelope, ok
from heartline.domain.identity import service
from heartline.domain.identity.schemas import AuthResponse, LoginRequest, ProfileOut, RegisterRequest
from heartline.infra.auth import AuthenticatedUser, get_current_user

router = APIRouter(prefix="/auth", tags=["auth"])


def _client_ip(request: Request) -> str:
	forwarded = request.headers.get("x-forwarded-for")
	if forwarded:
		return forwarded.split(",")[0].strip()
	return request.client.host if request.client else "unknown"


@router.post("/register", response_model=Envelope[AuthResponse], status_code=status.HTTP_201_CREATED)
async def register(payload: RegisterRequest, request: Request) -> Envelope:
	result = await service.register(payload, ip_address=_client_ip(request))
	return ok(result, "Account created.")


@router.post("/login", response_model=Envelope[AuthResponse])
async def login(payload: LoginRequest) -> Envelope:
	return ok(await service.login(payload), "Logged in.")


@router.get("/me", response_model=Envelope[ProfileOut])
async def me(auth_user: AuthenticatedUser = Depends(get_current_user)) -> Envelope:
	return ok(await service.get_me(auth_user.id))
