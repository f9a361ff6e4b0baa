"""Uniform success/error response envelopes."""

from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

DataT = TypeVar("DataT")


class CamelModel(BaseModel):
    """Base schema serialised with camelCase keys on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ApiResponse(CamelModel, Generic[DataT]):
    """Success envelope."""

    status_code: int
    data: DataT
    message: str = "Success"
    success: bool = True

    @classmethod
    def ok(cls, data: Any, message: str = "Success", status_code: int = 200) -> "ApiResponse":
        return cls(status_code=status_code, data=data, message=message)


class ErrorResponse(CamelModel):
    """Error envelope."""

    status_code: int
    message: str
    success: bool = False
    errors: list[Any] = Field(default_factory=list)
