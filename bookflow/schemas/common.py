"""
Shared response envelope
"""
from typing import Generic, Optional, TypeVar
from pydantic import BaseModel

T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    """
    Envelope used by every endpoint: {success, data?, error?, message?}
    """
    success: bool
    data: Optional[T] = None
    error: Optional[str] = None
    message: Optional[str] = None

    class Config:
        json_schema_extra = {
            "example": {
                "success": False,
                "error": "SLOT_UNAVAILABLE",
                "message": "Requested interval is not available"
            }
        }


def ok(data=None, message: Optional[str] = None) -> dict:
    """Build a success envelope"""
    return ApiResponse(success=True, data=data, message=message).model_dump()


def fail(error: str, message: str) -> dict:
    """Build a failure envelope"""
    return ApiResponse(success=False, error=error, message=message).model_dump()
