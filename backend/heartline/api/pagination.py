from __future__ import annotations

from fastapi import Query

from heartline.domain.common.schemas import PAGE_LIMIT_MAX, PageParams


def page_params(
	page: int = Query(default=1, ge=1),
	limit: int = Query(default=20, ge=1, le=PAGE_LIMIT_MAX),
) -> PageParams:
	return PageParams(page=page, limit=limit)
