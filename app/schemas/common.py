# app/schemas/common.py
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class ApiModel(BaseModel):
    """
    Base for request/response bodies.

    JSON uses camelCase (`productId`, `totalItems`), Python uses
    snake_case. Both spellings are accepted on input.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class Pagination(ApiModel):
    current_page: int
    total_pages: int
    total_orders: int
    has_next: bool
    has_prev: bool

    @classmethod
    def build(cls, page: int, limit: int, total: int) -> "Pagination":
        total_pages = (total + limit - 1) // limit if limit else 0
        return cls(
            current_page=page,
            total_pages=total_pages,
            total_orders=total,
            has_next=page < total_pages,
            has_prev=page > 1,
        )


class MessageResponse(ApiModel):
    success: bool = True
    message: str
