"""
Helpers turning service results into the response envelopes.
"""

from typing import Any, Iterable, List, Optional, Type, TypeVar

from hostel_admin.repositories.base import PageResult
from hostel_admin.schemas.common import PaginatedResponse, SuccessResponse
from hostel_admin.schemas.common.base import BaseSchema

S = TypeVar("S", bound=BaseSchema)


def ok(data: Any = None, message: Optional[str] = None) -> SuccessResponse:
    return SuccessResponse.create(data=data, message=message)


def one(schema: Type[S], obj: Any, message: Optional[str] = None) -> SuccessResponse:
    return ok(schema.model_validate(obj), message)


def many(schema: Type[S], objs: Iterable[Any]) -> List[S]:
    return [schema.model_validate(obj) for obj in objs]


def paginated(schema: Type[S], result: PageResult) -> PaginatedResponse:
    return PaginatedResponse.create(many(schema, result.items), result.total, result.page, result.limit)
