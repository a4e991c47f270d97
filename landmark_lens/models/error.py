"""
Error classification models.

Sandi Metz Principles:
- Small classes with clear purpose
- Consistent error handling
- Clear naming conventions
"""

import time
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class ErrorCategory(str, Enum):
    """Failure taxonomy."""

    NETWORK = "network"
    API = "api"
    PERMISSION = "permission"
    VALIDATION = "validation"
    USER = "user"
    SYSTEM = "system"


class ErrorSeverity(str, Enum):
    """How serious a failure is for the caller."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ErrorCode(str, Enum):
    """Machine codes attached to classified errors."""

    NETWORK_ERROR = "NETWORK_ERROR"
    VISION_API_ERROR = "VISION_API_ERROR"
    WIKIPEDIA_API_ERROR = "WIKIPEDIA_API_ERROR"
    RATE_LIMIT_EXCEEDED = "RATE_LIMIT_EXCEEDED"
    API_ERROR = "API_ERROR"
    PERMISSION_DENIED = "PERMISSION_DENIED"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    NO_LANDMARK_DETECTED = "NO_LANDMARK_DETECTED"
    SYSTEM_ERROR = "SYSTEM_ERROR"


class ErrorDetails(BaseModel):
    """Structured, user-presentable description of a failure."""

    code: ErrorCode = Field(..., description="Machine code")
    message: str = Field(..., description="Raw error message")
    user_message: str = Field(..., description="Short human readable message")
    suggestions: List[str] = Field(default_factory=list, description="Ordered remedies")
    recoverable: bool = Field(default=True, description="Whether retrying can help")
    category: ErrorCategory = Field(..., description="Failure category")
    severity: ErrorSeverity = Field(..., description="Failure severity")
    timestamp: int = Field(
        default_factory=lambda: int(time.time() * 1000), description="Epoch ms"
    )
    context: Dict[str, Any] = Field(default_factory=dict, description="Free-form context")


class ErrorDisplay(BaseModel):
    """Error formatted for presentation."""

    title: str
    message: str
    suggestions: List[str]
    can_retry: bool
    retry_after_ms: Optional[int] = None
    severity: ErrorSeverity


class ErrorResponse(BaseModel):
    """Standard API error body."""

    detail: str = Field(..., description="User facing message")
    error: ErrorDetails = Field(..., description="Classified error")
    display: Optional[ErrorDisplay] = Field(None, description="Presentation hints")
