"""Profile, prompt and photo management for the signed-in user."""

from __future__ import annotations

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, status

from heartline.api.envelope import Envelope, ok
from heartline.domain.identity import profile_service
from heartline.domain.identity.schemas import (
	PhotoCreateRequest,
	PhotoOrderRequest,
	PhotoOut,
	ProfileOut,
	ProfileUpdateRequest,
	PromptCreateRequest,
	PromptOut,
	PromptUpdateRequest,
)
from heartline.infra.auth import AuthenticatedUser, get_current_user

router = APIRouter(prefix="/users", tags=["profile"])


@router.get("/me", response_model=Envelope[ProfileOut])
async def get_me(auth_user: AuthenticatedUser = Depends(get_current_user)) -> Envelope:
	return ok(await profile_service.get_profile(auth_user.id))


@router.patch("/profile", response_model=Envelope[ProfileOut])
async def update_profile(
	payload: ProfileUpdateRequest,
	auth_user: AuthenticatedUser = Depends(get_current_user),
) -> Envelope:
	return ok(await profile_service.update_profile(auth_user.id, payload), "Profile updated.")


@router.post("/prompts", response_model=Envelope[PromptOut], status_code=status.HTTP_201_CREATED)
async def add_prompt(
	payload: PromptCreateRequest,
	auth_user: AuthenticatedUser = Depends(get_current_user),
) -> Envelope:
	return ok(await profile_service.add_prompt(auth_user.id, payload), "Prompt added.")


@router.patch("/prompts/{prompt_id}", response_model=Envelope[PromptOut])
async def update_prompt(
	prompt_id: UUID,
	payload: PromptUpdateRequest,
	auth_user: AuthenticatedUser = Depends(get_current_user),
) -> Envelope:
	return ok(await profile_service.update_prompt(auth_user.id, prompt_id, payload), "Prompt updated.")


@router.delete("/prompts/{prompt_id}", response_model=Envelope[None])
async def delete_prompt(prompt_id: UUID, auth_user: AuthenticatedUser = Depends(get_current_user)) -> Envelope:
	await profile_service.delete_prompt(auth_user.id, prompt_id)
	return ok(None, "Prompt deleted.")


@router.post("/photos", response_model=Envelope[PhotoOut], status_code=status.HTTP_201_CREATED)
async def add_photo(
	payload: PhotoCreateRequest,
	auth_user: AuthenticatedUser = Depends(get_current_user),
) -> Envelope:
	return ok(await profile_service.add_photo(auth_user.id, payload), "Photo added.")


@router.delete("/photos/{photo_id}", response_model=Envelope[None])
async def delete_photo(photo_id: UUID, auth_user: AuthenticatedUser = Depends(get_current_user)) -> Envelope:
	await profile_service.delete_photo(auth_user.id, photo_id)
	return ok(None, "Photo deleted.")


@router.put("/photos/order", response_model=Envelope[List[PhotoOut]])
async def reorder_photos(
	payload: PhotoOrderRequest,
	auth_user: AuthenticatedUser = Depends(get_current_user),
) -> Envelope:
	return ok(await profile_service.reorder_photos(auth_user.id, payload), "Photos reordered.")
