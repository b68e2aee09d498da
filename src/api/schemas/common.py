"""
Common API schemas.
"""

from typing import Any, Dict, Optional

from pydantic import BaseModel


class BaseResponse(BaseModel):
    """Base response schema."""

    success: bool = True
    message: Optional[str] = None


class ErrorResponse(BaseModel):
    """Error body returned by the exception handlers."""

    error: str
    message: str
    type: str
    details: Optional[Dict[str, Any]] = None
