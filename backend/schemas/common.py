from pydantic import BaseModel
from pydantic.alias_generators import to_camel


class RequestModel(BaseModel):
    """Base for request bodies: accepts snake_case and camelCase keys alike."""

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    total_pages: int


class Page(BaseModel):
    """A slice of ORM rows plus its pagination block."""
    data: list
    pagination: Pagination

    class Config:
        arbitrary_types_allowed = True


def make_pagination(page: int, limit: int, total: int) -> Pagination:
    total_pages = (total + limit - 1) // limit if limit > 0 else 0
    return Pagination(page=page, limit=limit, total=total, total_pages=total_pages)
