"""Matching domain exports."""

from .models import Match, MatchPair, Swipe, SwipeOutcome, SwipeType
from .service import list_matches, record_swipe

__all__ = [
	"Match",
	"MatchPair",
	"Swipe",
	"SwipeOutcome",
	"SwipeType",
	"list_matches",
	"record_swipe",
]
