# =============================================================================
# core/models/response.py - Response Envelope Schemas
# =============================================================================
# These models define the single wire shape every API response takes:
#
#   {"code": 0, "message": "success", "data": ...}
#
# - ResponseCode: stable numeric application status (0 means success)
# - ResponseMessage: default human-readable message per code
# - ApiResponse: the envelope itself, with helper constructors
# - PaginationData: the "data" payload for paged list endpoints
#
# HTTP transport status is decoupled from application status: callers
# branch on `code`, never on the HTTP status line.
# =============================================================================

import math
from enum import IntEnum
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class ResponseCode(IntEnum):
    """
    Application-level status codes carried in the envelope `code` field.

    SUCCESS is the only non-error value.
    """
    SUCCESS = 0
    INVALID_PARAMS = 400
    UNAUTHORIZED = 401
    FORBIDDEN = 403
    NOT_FOUND = 404
    INTERNAL_ERROR = 500
    DATABASE_ERROR = 501
    BUSINESS_ERROR = 502


class ResponseMessage:
    """Default messages, one per ResponseCode."""
    SUCCESS = "success"
    INVALID_PARAMS = "参数错误"
    UNAUTHORIZED = "未授权访问"
    FORBIDDEN = "禁止访问"
    NOT_FOUND = "资源不存在"
    INTERNAL_ERROR = "服务器内部错误"
    DATABASE_ERROR = "数据库操作失败"
    BUSINESS_ERROR = "业务处理失败"

    @classmethod
    def for_code(cls, code: int) -> str:
        """Look up the default message for a code, falling back to INTERNAL_ERROR."""
        try:
            return getattr(cls, ResponseCode(code).name)
        except ValueError:
            return cls.INTERNAL_ERROR


class PaginationData(BaseModel, Generic[T]):
    """
    One page of a list result.

    Serialized with camelCase keys:
        {"list": [...], "total": 42, "page": 1, "pageSize": 10, "totalPages": 5}
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    items: list[T] = Field(default_factory=list, alias="list", description="Items on this page")
    total: int = Field(default=0, ge=0, description="Total number of records")
    page: int = Field(default=1, ge=1, description="Current page number (1-indexed)")
    page_size: int = Field(default=10, ge=1, description="Maximum items per page")
    total_pages: int = Field(default=0, ge=0, description="ceil(total / page_size)")

    @model_validator(mode="after")
    def _check_page_shape(self) -> "PaginationData[T]":
        if len(self.items) > self.page_size:
            raise ValueError(
                f"page holds {len(self.items)} items but page_size is {self.page_size}"
            )
        expected = math.ceil(self.total / self.page_size)
        if self.total_pages != expected:
            raise ValueError(
                f"total_pages must be {expected} for total={self.total}, "
                f"page_size={self.page_size}"
            )
        return self

    @classmethod
    def build(
        cls,
        items: list[Any],
        total: int,
        page: int,
        page_size: int,
    ) -> "PaginationData":
        """Build a page, deriving total_pages from total and page_size."""
        return cls(
            items=list(items),
            total=total,
            page=page,
            page_size=page_size,
            total_pages=math.ceil(total / page_size) if page_size > 0 else 0,
        )


class ApiResponse(BaseModel, Generic[T]):
    """
    The response envelope.

    Returning an ApiResponse from a route handler marks the value as
    already enveloped: it is emitted as-is. Any other return value is
    treated as raw data and wrapped with code=SUCCESS.

    Example:
        return ApiResponse.success(user, message="注册成功")
        return ApiResponse.error(ResponseCode.NOT_FOUND, "用户不存在")
    """

    code: int = Field(default=ResponseCode.SUCCESS, description="0 on success, error code otherwise")
    message: str = Field(default=ResponseMessage.SUCCESS, description="Human-readable message")
    data: T | None = Field(default=None, description="Payload; null on error paths")

    @property
    def is_success(self) -> bool:
        return self.code == ResponseCode.SUCCESS

    # -------------------------------------------------------------------------
    # Constructors
    # -------------------------------------------------------------------------

    @classmethod
    def success(cls, data: Any = None, message: str = ResponseMessage.SUCCESS) -> "ApiResponse":
        return cls(code=ResponseCode.SUCCESS, message=message, data=data)

    @classmethod
    def error(
        cls,
        code: int = ResponseCode.INTERNAL_ERROR,
        message: str | None = None,
        data: Any = None,
    ) -> "ApiResponse":
        """
        Build an error envelope.

        `data` stays null unless the caller explicitly attaches some.
        A SUCCESS code is rejected since an error must never read as success.
        """
        if code == ResponseCode.SUCCESS:
            raise ValueError("error envelopes require a non-success code")
        return cls(code=int(code), message=message or ResponseMessage.for_code(code), data=data)

    @classmethod
    def pagination(
        cls,
        items: list[Any],
        total: int,
        page: int,
        page_size: int,
        message: str = ResponseMessage.SUCCESS,
    ) -> "ApiResponse":
        return cls.success(
            PaginationData.build(items, total=total, page=page, page_size=page_size),
            message=message,
        )

    @classmethod
    def invalid_params(cls, message: str = ResponseMessage.INVALID_PARAMS) -> "ApiResponse":
        return cls.error(ResponseCode.INVALID_PARAMS, message)

    @classmethod
    def unauthorized(cls, message: str = ResponseMessage.UNAUTHORIZED) -> "ApiResponse":
        return cls.error(ResponseCode.UNAUTHORIZED, message)

    @classmethod
    def database_error(cls, message: str = ResponseMessage.DATABASE_ERROR) -> "ApiResponse":
        return cls.error(ResponseCode.DATABASE_ERROR, message)
