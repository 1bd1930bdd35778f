from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import ColumnElement, Select, func, or_, select
from sqlalchemy.orm import Session

from careerdesk.config import Settings, get_settings
from careerdesk.core.errors import ValidationError

T = TypeVar("T")


class PageRequest(BaseModel):
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=100, ge=1)
    search: str = ""

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


@dataclass(slots=True)
class Page(Generic[T]):
    rows: list[T] = field(default_factory=list)
    total: int = 0
    page: int = 1
    limit: int = 100

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.total else 0


def build_page_request(
    page: int | None = None,
    limit: int | None = None,
    search: str | None = None,
    *,
    settings: Settings | None = None,
) -> PageRequest:
    settings = settings or get_settings()
    resolved_limit = settings.page_size_default if limit is None else limit
    if resolved_limit > settings.page_size_max:
        raise ValidationError(f"limit must be at most {settings.page_size_max}")
    try:
        return PageRequest(
            page=1 if page is None else page,
            limit=resolved_limit,
            search=(search or "").strip(),
        )
    except PydanticValidationError as exc:
        raise ValidationError("Invalid pagination parameters") from exc


def _escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def search_clause(columns: list[Any], term: str) -> ColumnElement[bool] | None:
    if not term:
        return None
    pattern = f"%{_escape_like(term)}%"
    return or_(*(column.ilike(pattern, escape="\\") for column in columns))


def paginate(session: Session, statement: Select, request: PageRequest) -> Page:
    count_statement = select(func.count()).select_from(statement.order_by(None).subquery())
    total = session.scalar(count_statement) or 0
    rows = session.scalars(statement.limit(request.limit).offset(request.offset)).all()
    return Page(rows=list(rows), total=total, page=request.page, limit=request.limit)
