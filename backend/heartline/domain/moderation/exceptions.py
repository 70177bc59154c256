"""Domain-level exceptions for blocks and reports."""

from __future__ import annotations

from heartline.domain.common.errors import NotFound, ValidationFailed


class SelfModeration(ValidationFailed):
    reason = "self_action"
    message = "You cannot block or report yourself"


class UserNotFound(NotFound):
    reason = "user_not_found"
    message = "User not found"


class ReportNotFound(NotFound):
    reason = "report_not_found"
    message = "Report not found"
