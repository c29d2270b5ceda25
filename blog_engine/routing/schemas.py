"""
Pydantic schemas for the blog_engine HTTP routes.
"""

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class ClientErrorReport(BaseModel):
    """Error report posted by the admin panel."""

    model_config = ConfigDict(populate_by_name=True)

    message: Optional[str] = None
    stack: Optional[str] = None
    component_stack: Optional[str] = Field(default=None, alias="componentStack")
    user_agent: Optional[str] = Field(default=None, alias="userAgent")
    url: Optional[str] = None
    timestamp: Optional[str] = None
    context: Optional[str] = None
    type: Optional[str] = None
    filename: Optional[str] = None
    lineno: Optional[int] = None
    colno: Optional[int] = None


class ClientErrorAck(BaseModel):
    success: bool = True
    message: str = "Error logged successfully"


class HealthReport(BaseModel):
    """Aggregated health check report."""

    status: str = Field(examples=["healthy", "unhealthy"])
    timestamp: str
    environment: str
    checks: Dict[str, Dict[str, Any]]
