from hostel_admin.schemas.common.base import BaseDBSchema, BaseSchema
from hostel_admin.schemas.common.pagination import PaginatedResponse, PaginationMeta, PaginationParams
from hostel_admin.schemas.common.response import ErrorResponse, MessageResponse, SuccessResponse

__all__ = [
    "BaseSchema",
    "BaseDBSchema",
    "PaginationParams",
    "PaginationMeta",
    "PaginatedResponse",
    "SuccessResponse",
    "ErrorResponse",
    "MessageResponse",
]
