"""Profile completion scoring and age arithmetic.

The completion score is a pure function of which profile fields are filled
and how many photos and prompts exist. It is recomputed inside every
transaction that changes any of those inputs.
"""

from __future__ import annotations

from datetime import date
from typing import Any, Mapping, Tuple

FIELD_POINTS: Mapping[str, int] = {
	"bio": 10,
	"date_of_birth": 10,
	"gender": 10,
	"gender_preference": 10,
	"dating_intent": 10,
	"city": 10,
}
PHOTO_POINTS = 6
PHOTO_CAP = 5
PROMPT_POINTS = 10
PROMPT_CAP = 3
MAX_SCORE = 100


def _is_filled(value: Any) -> bool:
	if value is None:
		return False
	if isinstance(value, str):
		return bool(value.strip())
	return True


def compute_profile_score(fields: Mapping[str, Any], *, photo_count: int, prompt_count: int) -> int:
	"""Return the 0..100 completion score for a profile.

	``fields`` may be a dict, an asyncpg record or anything with ``get``.
	Unknown keys are ignored; missing keys count as empty.
	"""
	score = sum(points for name, points in FIELD_POINTS.items() if _is_filled(fields.get(name)))
	score += min(max(photo_count, 0), PHOTO_CAP) * PHOTO_POINTS
	score += min(max(prompt_count, 0), PROMPT_CAP) * PROMPT_POINTS
	return min(score, MAX_SCORE)


def years_before(day: date, years: int) -> date:
	"""Same calendar day ``years`` earlier; Feb 29 falls back to Feb 28."""
	try:
		return day.replace(year=day.year - years)
	except ValueError:
		return day.replace(year=day.year - years, day=28)


def age_on(date_of_birth: date | None, today: date) -> int | None:
	if date_of_birth is None:
		return None
	age = today.year - date_of_birth.year
	if (today.month, today.day) < (date_of_birth.month, date_of_birth.day):
		age -= 1
	return age


def birth_date_bounds(min_age: int, max_age: int, today: date) -> Tuple[date, date]:
	"""Return (exclusive_earliest, inclusive_latest) birth dates for an age range.

	Someone aged exactly ``max_age`` today was born after ``today - (max_age + 1)``
	years; someone at least ``min_age`` was born on or before ``today - min_age`` years.
	"""
	return years_before(today, max_age + 1), years_before(today, min_age)
