"""Central registry for Prometheus metrics used across the backend."""

from __future__ import annotations

from typing import Optional

from prometheus_client import Counter, Gauge, Histogram


REQUEST_COUNTER = Counter(
	"heartline_http_requests_total",
	"Total HTTP requests processed",
	["route", "method", "status"],
)

REQUEST_LATENCY = Histogram(
	"heartline_http_request_duration_seconds",
	"HTTP request latency in seconds",
	["route", "method"],
	buckets=(0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.0, 5.0),
)

SWIPES_TOTAL = Counter(
	"heartline_swipes_total",
	"Swipes recorded by kind",
	["kind"],
)

SWIPE_REJECTS = Counter(
	"heartline_swipe_rejects_total",
	"Swipes rejected by reason",
	["reason"],
)

MATCHES_CREATED = Counter(
	"heartline_matches_created_total",
	"Matches created from mutual likes",
)

MATCH_RACES = Counter(
	"heartline_match_races_total",
	"Match inserts that lost to a concurrent insert of the same pair",
)

MESSAGES_SENT = Counter(
	"heartline_messages_sent_total",
	"Messages accepted into conversations",
)

MESSAGE_REJECTS = Counter(
	"heartline_message_rejects_total",
	"Messages refused by the conversation gate",
	["reason"],
)

BLOCKS_TOTAL = Counter(
	"heartline_blocks_total",
	"Block list mutations",
	["action"],
)

REPORTS_TOTAL = Counter(
	"heartline_reports_total",
	"Reports filed by reason",
	["reason"],
)

RATE_LIMITED = Counter(
	"heartline_rate_limited_total",
	"Requests rejected by the rate limiter",
	["kind"],
)

AUTH_EVENTS = Counter(
	"heartline_auth_events_total",
	"Registration and login outcomes",
	["event", "result"],
)

BOOSTS_TOTAL = Counter(
	"heartline_boosts_total",
	"Profile boosts applied",
)

ACTIVITY_BUMP_FAILURES = Counter(
	"heartline_activity_bump_failures_total",
	"Best-effort activity score updates that failed",
)

REDIS_UP = Gauge("heartline_redis_up", "Redis readiness (1 up, 0 down)")
POSTGRES_UP = Gauge("heartline_postgres_up", "Postgres readiness (1 up, 0 down)")
DEPENDENCY_LATENCY = Histogram(
	"heartline_dependency_latency_seconds",
	"Readiness probe latency per dependency",
	["dependency"],
	buckets=(0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5),
)


def observe_request(route: str, method: str, status: int, elapsed_seconds: float) -> None:
	REQUEST_COUNTER.labels(route=route, method=method, status=str(status)).inc()
	REQUEST_LATENCY.labels(route=route, method=method).observe(elapsed_seconds)


def inc_swipe(kind: str) -> None:
	SWIPES_TOTAL.labels(kind=kind).inc()


def inc_swipe_reject(reason: str) -> None:
	SWIPE_REJECTS.labels(reason=reason).inc()


def inc_match_created() -> None:
	MATCHES_CREATED.inc()


def inc_match_race() -> None:
	MATCH_RACES.inc()


def inc_message_sent() -> None:
	MESSAGES_SENT.inc()


def inc_message_reject(reason: str) -> None:
	MESSAGE_REJECTS.labels(reason=reason).inc()


def inc_block(action: str) -> None:
	BLOCKS_TOTAL.labels(action=action).inc()


def inc_report(reason: str) -> None:
	REPORTS_TOTAL.labels(reason=reason).inc()


def inc_rate_limited(kind: str) -> None:
	RATE_LIMITED.labels(kind=kind).inc()


def inc_auth_event(event: str, result: str) -> None:
	AUTH_EVENTS.labels(event=event, result=result).inc()


def inc_boost() -> None:
	BOOSTS_TOTAL.inc()


def inc_activity_bump_failure() -> None:
	ACTIVITY_BUMP_FAILURES.inc()


def mark_redis(up: bool, *, latency_seconds: Optional[float] = None) -> None:
	REDIS_UP.set(1 if up else 0)
	if latency_seconds is not None:
		DEPENDENCY_LATENCY.labels(dependency="redis").observe(latency_seconds)


def mark_postgres(up: bool, *, latency_seconds: Optional[float] = None) -> None:
	POSTGRES_UP.set(1 if up else 0)
	if latency_seconds is not None:
		DEPENDENCY_LATENCY.labels(dependency="postgres").observe(latency_seconds)
