"""Shared pydantic bases: camelCase wire names, snake_case accepted on input."""

from __future__ import annotations

from typing import Generic, List, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

T = TypeVar("T")

PAGE_LIMIT_MAX = 50


class CamelModel(BaseModel):
	model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class PageParams(CamelModel):
	page: int = Field(default=1, ge=1)
	limit: int = Field(default=20, ge=1, le=PAGE_LIMIT_MAX)

	@property
	def offset(self) -> int:
		return (self.page - 1) * self.limit


class Page(CamelModel, Generic[T]):
	items: List[T]
	page: int
	limit: int
	total: int
	total_pages: int

	@classmethod
	def build(cls, items: List[T], *, params: PageParams, total: int) -> "Page[T]":
		pages = (total + params.limit - 1) // params.limit if total else 0
		return cls(items=items, page=params.page, limit=params.limit, total=total, total_pages=pages)
