"""Domain-level exceptions for premium features."""

from __future__ import annotations

from heartline.domain.common.errors import Conflict, Forbidden


class PremiumRequired(Forbidden):
    reason = "premium_required"
    message = "This feature requires a premium subscription"


class BoostActive(Conflict):
    reason = "boost_active"
    message = "A boost is already active"
