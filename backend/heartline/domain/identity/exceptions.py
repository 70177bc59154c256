"""Domain-level exceptions for accounts and profiles."""

from __future__ import annotations

from heartline.domain.common.errors import Conflict, NotFound, Unauthenticated, ValidationFailed


class EmailTaken(Conflict):
    reason = "email_exists"
    message = "An account with this email already exists"


class InvalidCredentials(Unauthenticated):
    reason = "invalid_credentials"
    message = "Invalid email or password"


class UserNotFound(NotFound):
    reason = "user_not_found"
    message = "User not found"


class EmptyProfileUpdate(ValidationFailed):
    reason = "empty_update"
    message = "At least one field must be provided"


class InvalidDateOfBirth(ValidationFailed):
    reason = "invalid_date_of_birth"
    message = "Date of birth cannot be in the future"


class PromptLimitReached(ValidationFailed):
    reason = "prompt_limit"
    message = "A profile can have at most 3 prompts"


class PromptNotFound(NotFound):
    reason = "prompt_not_found"
    message = "Prompt not found"


class PhotoLimitReached(ValidationFailed):
    reason = "photo_limit"
    message = "A profile can have at most 5 photos"


class PhotoMinimumReached(ValidationFailed):
    reason = "photo_minimum"
    message = "A profile must keep at least 2 photos"


class PhotoNotFound(NotFound):
    reason = "photo_not_found"
    message = "Photo not found"


class InvalidPhotoOrder(ValidationFailed):
    reason = "invalid_photo_order"
    message = "Photo order must list every photo once with positions 0..n-1"
