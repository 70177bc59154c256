"""Audit helpers for swipes and matches."""

from __future__ import annotations

from typing import Dict

from heartline.infra.redis import redis_client
from heartline.obs import metrics as obs_metrics

SWIPE_STREAM = "x:swipes.events"
MATCH_STREAM = "x:matches.events"


async def log_swipe_event(event: str, fields: Dict[str, str]) -> None:
	payload = {"event": event, **fields}
	await redis_client.xadd(SWIPE_STREAM, payload, maxlen=100_000, approximate=True)


async def log_match_event(event: str, fields: Dict[str, str]) -> None:
	payload = {"event": event, **fields}
	await redis_client.xadd(MATCH_STREAM, payload, maxlen=100_000, approximate=True)


def inc_swipe(kind: str) -> None:
	obs_metrics.inc_swipe(kind)


def inc_swipe_reject(reason: str) -> None:
	obs_metrics.inc_swipe_reject(reason)


def inc_match_created() -> None:
	obs_metrics.inc_match_created()
