"""Domain-level exceptions for swipes and matches."""

from __future__ import annotations

from heartline.domain.common.errors import Conflict, NotFound, ValidationFailed


class SelfSwipe(ValidationFailed):
    reason = "self_swipe"
    message = "Cannot swipe on yourself"


class AlreadyInteracted(Conflict):
    reason = "already_interacted"
    message = "You have already interacted with this user"


class TargetNotFound(NotFound):
    reason = "target_not_found"
    message = "Target user not found"


class MatchNotFound(NotFound):
    reason = "match_not_found"
    message = "Match not found"
