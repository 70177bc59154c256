"""Success envelope shared by every JSON endpoint: {status, message?, data}."""

from __future__ import annotations

from typing import Any, Generic, Literal, Optional, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class Envelope(BaseModel, Generic[T]):
	status: Literal["success"] = "success"
	message: Optional[str] = None
	data: T


def ok(data: Any, message: Optional[str] = None) -> Envelope:
	return Envelope(data=data, message=message)
